from dataclasses import dataclass


HEADING = "heading"
LIST = "list"
PARAGRAPH = "paragraph"
HTML = "html"
SPACE = "space"


@dataclass(frozen=True)
class Block:
    """One lexical unit of a release-notes document.

    Only the fields relevant to ``kind`` are populated: ``depth`` for headings,
    ``items`` for lists. ``raw`` keeps the source slice the block came from.
    """

    kind: str
    text: str = ""
    depth: int | None = None
    items: tuple[str, ...] = ()
    raw: str = ""


def heading(depth: int, text: str, raw: str | None = None) -> Block:
    return Block(HEADING, text=text, depth=depth, raw=raw if raw is not None else f"{'#' * depth} {text}")


def list_block(items: list[str] | tuple[str, ...], raw: str | None = None) -> Block:
    items = tuple(items)
    return Block(LIST, items=items, raw=raw if raw is not None else "\n".join(f"- {item}" for item in items))


def paragraph(text: str, raw: str | None = None) -> Block:
    return Block(PARAGRAPH, text=text, raw=raw if raw is not None else text)


def html(text: str, raw: str | None = None) -> Block:
    return Block(HTML, text=text, raw=raw if raw is not None else text)


def space(raw: str = "\n") -> Block:
    return Block(SPACE, raw=raw)


def other(kind: str, text: str = "", raw: str | None = None) -> Block:
    # Anything the parser has no rule for (code, tables, quotes, rules).
    return Block(kind, text=text, raw=raw if raw is not None else text)
