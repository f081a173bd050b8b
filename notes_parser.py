import logging
from dataclasses import dataclass, field, replace

import blocks
from classifiers import match_module, match_type
from lexer import lex


KEEP_NOTES_MARKER = "<!-- KEEP NOTES -->"
MODULE_PREFIX = "Tap"
MODULE_SUFFIX = "SDK"


@dataclass(frozen=True)
class Change:
    raw: str
    module: str | None = None
    type: str | None = None


@dataclass
class ParsedDocument:
    changes: list[Change] = field(default_factory=list)
    descriptions: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ParseState:
    current_module: str | None = None
    current_type: str | None = None
    title_hoisted: bool = False


def _diagnose(diagnostics: list[str] | None, message: str) -> None:
    # Warnings never abort parsing; the optional sink lets callers inspect them.
    logging.getLogger(__name__).warning(message)
    if diagnostics is not None:
        diagnostics.append(message)


def _is_module_title(depth: int, text: str) -> bool:
    return depth == 2 and (text.startswith(MODULE_PREFIX) or text.endswith(MODULE_SUFFIX))


def apply_heading(state: ParseState, depth: int | None, text: str, diagnostics: list[str] | None = None) -> ParseState:
    """Return the state after reading one heading.

    A depth-2 heading carrying the suite prefix or SDK suffix names the module and
    hoists the title; from then on depth-3 headings name change types instead of
    modules. Depth-4 headings always name a change type.
    """
    if _is_module_title(depth, text):
        return replace(state, current_module=match_module(text), title_hoisted=True)
    if depth == 3 and not state.title_hoisted:
        return replace(state, current_module=match_module(text))
    if depth == 4 or (depth == 3 and state.title_hoisted):
        return replace(state, current_type=match_type(text))
    _diagnose(diagnostics, f"Ignoring unexpected heading depth {depth}: {text!r}")
    return state


def _step(
    state: ParseState,
    block: blocks.Block,
    parsed: ParsedDocument,
    diagnostics: list[str] | None,
) -> ParseState:
    if block.kind == blocks.SPACE:
        return state
    if block.kind == blocks.HEADING:
        return apply_heading(state, block.depth, block.text, diagnostics)
    if block.kind == blocks.LIST:
        parsed.changes.extend(
            Change(raw=item, module=state.current_module, type=state.current_type) for item in block.items
        )
        return state
    if block.kind == blocks.PARAGRAPH:
        parsed.descriptions.append(block.text)
        return state
    _diagnose(diagnostics, f"Ignoring unexpected block kind {block.kind}: {block.raw!r}")
    return state


def _document_text(block_list: list[blocks.Block], source: str | None) -> str:
    if source is not None:
        return source
    return "\n".join(block.raw for block in block_list)


def parse_blocks(
    block_list: list[blocks.Block],
    source: str | None = None,
    diagnostics: list[str] | None = None,
) -> ParsedDocument:
    """Extract changes and free-standing descriptions from a lexed document.

    ``source`` is the full document text, used only when the document opts out
    of structured parsing with the keep-notes marker. Without it the blocks'
    raw text stands in for the document.
    """
    block_list = list(block_list)
    if block_list and block_list[0].kind == blocks.HTML and block_list[0].text.startswith(KEEP_NOTES_MARKER):
        kept = _document_text(block_list, source).replace(KEEP_NOTES_MARKER, "", 1).strip()
        return ParsedDocument(changes=[], descriptions=[kept])

    parsed = ParsedDocument()
    state = ParseState()
    for block in block_list:
        state = _step(state, block, parsed, diagnostics)
    return parsed


def parse_markdown(text: str, diagnostics: list[str] | None = None) -> ParsedDocument:
    return parse_blocks(lex(text), source=text, diagnostics=diagnostics)
