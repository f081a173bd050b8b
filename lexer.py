import logging
import re
from functools import lru_cache

from markdown_it import MarkdownIt
from markdown_it.token import Token

import blocks


TAB_WIDTH = 4
LIST_MARKER = re.compile(r"^[ \t]*(?:[-+*]|\d{1,9}[.)])(?:[ \t]+|$)")

# Top-level token types the parser has no rule for, by the kind name they surface as.
OTHER_KINDS = {
    "fence": "code",
    "code_block": "code",
    "hr": "hr",
    "blockquote_open": "blockquote",
    "table_open": "table",
}


@lru_cache(maxsize=1)
def _markdown() -> MarkdownIt:
    # CommonMark keeps raw HTML blocks; tables are enabled so they surface as one block.
    return MarkdownIt("commonmark").enable("table")


def _closing_index(tokens: list[Token], start: int) -> int:
    opener = tokens[start]
    if opener.nesting != 1:
        return start
    index = start + 1
    while index < len(tokens):
        token = tokens[index]
        if token.level == opener.level and token.nesting == -1:
            return index
        index += 1
    return len(tokens) - 1


def _source(lines: list[str], line_map: list[int] | None) -> str:
    if not line_map:
        return ""
    start, end = line_map
    return "\n".join(lines[start:end]).strip("\n")


def _item_text(lines: list[str], line_map: list[int] | None) -> str:
    # Drop the bullet marker and dedent continuation lines by the item's content indent.
    if not line_map:
        return ""
    start, end = line_map
    item_lines = lines[start:end]
    if not item_lines:
        return ""
    marker = LIST_MARKER.match(item_lines[0])
    indent = marker.end() if marker else 0
    body = [item_lines[0][indent:]]
    for line in item_lines[1:]:
        content = line.lstrip(" \t")
        # Tabs count to the next multiple of four columns, as markdown-it measures them.
        leading = line[: len(line) - len(content)].expandtabs(TAB_WIDTH)
        body.append(leading[min(len(leading), indent) :] + content)
    return "\n".join(body).strip()


def _to_block(tokens: list[Token], index: int, close: int, lines: list[str]) -> blocks.Block:
    token = tokens[index]
    raw = _source(lines, token.map)
    if token.type == "heading_open":
        inline = tokens[index + 1] if index + 1 < len(tokens) else None
        text = inline.content if inline is not None and inline.type == "inline" else ""
        return blocks.heading(int(token.tag[1:]), text.strip(), raw=raw)
    if token.type in ("bullet_list_open", "ordered_list_open"):
        items = [
            _item_text(lines, item.map)
            for item in tokens[index + 1 : close]
            if item.type == "list_item_open" and item.level == token.level + 1
        ]
        return blocks.list_block(items, raw=raw)
    if token.type == "paragraph_open":
        return blocks.paragraph(raw.strip(), raw=raw)
    if token.type == "html_block":
        return blocks.html(raw, raw=raw)
    kind = OTHER_KINDS.get(token.type, token.type.removesuffix("_open"))
    return blocks.other(kind, raw, raw=raw)


def lex(markdown: str) -> list[blocks.Block]:
    """Split a markdown document into the top-level blocks the notes parser understands.

    Blank lines between two blocks surface as a single ``space`` block; nested
    structure stays inside its enclosing block.
    """
    lines = markdown.split("\n")
    tokens = _markdown().parse(markdown)
    result: list[blocks.Block] = []
    previous_end: int | None = None
    index = 0
    while index < len(tokens):
        token = tokens[index]
        close = _closing_index(tokens, index)
        if token.map:
            start, end = token.map
            if previous_end is not None and start > previous_end:
                result.append(blocks.space("\n" * (start - previous_end)))
            previous_end = end
        result.append(_to_block(tokens, index, close, lines))
        index = close + 1
    logging.getLogger(__name__).debug("Lexed %s blocks from %s lines", len(result), len(lines))
    return result
