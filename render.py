from classifiers import CHANGE_TITLES, CHANGE_TYPES
from grouping import UNDEFINED_GROUP, group_changes
from notes_parser import Change, ParsedDocument


def group_order(grouped: dict[str, list[Change]]) -> list[str]:
    # Canonical types first in their fixed order, then everything else as first seen.
    canonical = [change_type for change_type in CHANGE_TYPES if change_type in grouped]
    rest = [key for key in grouped if key not in CHANGE_TYPES]
    return canonical + rest


def _title(key: str) -> str:
    if not key or key == UNDEFINED_GROUP:
        return ""
    return f"### {CHANGE_TITLES.get(key, key)}\n"


def _scope(module: str | None) -> str:
    return f"**{module}:** " if module else ""


def render_change(change: Change) -> str:
    # Continuation lines stay indented under the bullet.
    body = change.raw.replace("\n", "\n  ")
    return f"- {_scope(change.module)}{body}\n"


def render_grouped_changes(grouped: dict[str, list[Change]]) -> str:
    chunks = []
    for key in group_order(grouped):
        content = "".join(render_change(change) for change in grouped[key])
        chunks.append(f"{_title(key)}{content}\n")
    return "".join(chunks)


def render_document(parsed: ParsedDocument) -> str:
    """Render one document's descriptions and grouped changes as a changelog body."""
    parts = [description + "\n" for description in parsed.descriptions]
    parts.append(render_grouped_changes(group_changes(parsed.changes)))
    return "\n".join(parts)
