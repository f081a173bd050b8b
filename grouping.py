from notes_parser import Change


UNDEFINED_GROUP = "undefined"


def group_changes(changes: list[Change]) -> dict[str, list[Change]]:
    # Buckets keep first-seen key order and document order inside each bucket.
    grouped: dict[str, list[Change]] = {}
    for change in changes:
        key = UNDEFINED_GROUP if change.type is None else change.type
        grouped.setdefault(key, []).append(change)
    return grouped
