"""Tokenizer adapter over markdown-it-py.

Builds the configured parser and marks top-level element boundaries in
its flat token stream.

Namespace:
    Token types starting with ``yamdr:`` are reserved for pipeline markers
    and placeholders. markdown-it derives token types from grammar rules,
    never from document text, so no document can produce them. Parser
    plugins must not emit this prefix.

Boundaries:
    markdown-it emits opening/closing token pairs (nesting +1/-1) and leaf
    tokens (nesting 0). A top-level element starts whenever the running
    depth is zero before a token and ends whenever it is zero after one,
    so a fence, hr, html block or indented code block at the top level is
    a complete element on its own.

Inline expressions:
    A code span wrapped in single underscores, such as ``_len(rows)_``,
    is an inline expression. Spans that start or end with a double
    underscore (``__init__``) are ordinary code.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import TYPE_CHECKING, Any

from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml
from markdown_it.token import Token

if TYPE_CHECKING:
    from markdown_it.renderer import RendererHTML
    from markdown_it.utils import OptionsDict

    from yamdr.readers.protocol import CustomBlock

RESERVED_PREFIX = "yamdr:"
BOUNDARY_OPEN = "yamdr:boundary_open"
BOUNDARY_CLOSE = "yamdr:boundary_close"
CUSTOM_PLACEHOLDER = "yamdr:custom"

# Code spans of the form `_expression_` are inline expressions.
INLINE_SENTINEL = "_"
_DUNDER = INLINE_SENTINEL * 2


def is_reserved(token_type: str) -> bool:
    """Return True for token types owned by the pipeline."""
    return token_type.startswith(RESERVED_PREFIX)


def is_inline_expression(text: str) -> bool:
    """Return True for code span text wrapped in the inline sentinel."""
    return (
        len(text) > 2
        and text.startswith(INLINE_SENTINEL)
        and text.endswith(INLINE_SENTINEL)
        and not text.startswith(_DUNDER)
        and not text.endswith(_DUNDER)
    )


def _render_custom(
    self: RendererHTML,
    tokens: Sequence[Token],
    idx: int,
    options: OptionsDict,
    env: dict[str, Any],
) -> str:
    token = tokens[idx]
    html = token.meta["block"].to_html()
    if token.block and html and not html.endswith("\n"):
        html += "\n"
    return html


def _render_text_special(
    self: RendererHTML,
    tokens: Sequence[Token],
    idx: int,
    options: OptionsDict,
    env: dict[str, Any],
) -> str:
    return escapeHtml(tokens[idx].content)


def _render_nothing(
    self: RendererHTML,
    tokens: Sequence[Token],
    idx: int,
    options: OptionsDict,
    env: dict[str, Any],
) -> str:
    return ""


def create_parser() -> MarkdownIt:
    """Create the markdown-it parser used by the pipeline.

    CommonMark plus GFM tables and strikethrough. ``text_join`` is disabled
    so backslash escapes and entities stay ``text_special`` tokens and keep
    their source markup for the Markdown renderer.
    """
    md = MarkdownIt("commonmark").enable(["table", "strikethrough"])
    md.disable("text_join", ignoreInvalid=True)
    md.add_render_rule("text_special", _render_text_special)
    md.add_render_rule(CUSTOM_PLACEHOLDER, _render_custom)
    md.add_render_rule(BOUNDARY_OPEN, _render_nothing)
    md.add_render_rule(BOUNDARY_CLOSE, _render_nothing)
    return md


_DEFAULT_PARSER: MarkdownIt | None = None


def get_parser() -> MarkdownIt:
    """Return the shared parser, creating it on first use.

    The parser holds configuration only; parse state lives in the token
    lists it returns.
    """
    global _DEFAULT_PARSER
    if _DEFAULT_PARSER is None:
        _DEFAULT_PARSER = create_parser()
    return _DEFAULT_PARSER


def tokenize(markdown: str, md: MarkdownIt | None = None) -> list[Token]:
    """Tokenize Markdown into markdown-it's flat block token list."""
    return (md or get_parser()).parse(markdown, {})


def boundary_token(token_type: str, element: int) -> Token:
    return Token(token_type, "", 0, meta={"element": element}, block=True)


def custom_token(block: CustomBlock, *, lineno: int | None = None) -> Token:
    """Create a placeholder token rendering through ``block.to_html()``."""
    return Token(
        CUSTOM_PLACEHOLDER,
        "",
        0,
        meta={"block": block, "lineno": lineno},
        block=not block.inline,
    )


def mark_boundaries(tokens: Iterable[Token]) -> Iterator[Token]:
    """Wrap every top-level element in boundary marker tokens.

    The opening marker carries the element index in ``meta["element"]``;
    indexes count from 0 in document order. Nested tokens pass through
    unmodified.
    """
    depth = 0
    element = 0
    for token in tokens:
        if depth == 0:
            yield boundary_token(BOUNDARY_OPEN, element)
        depth += token.nesting
        yield token
        if depth == 0:
            yield boundary_token(BOUNDARY_CLOSE, element)
            element += 1


__all__ = [
    "BOUNDARY_CLOSE",
    "BOUNDARY_OPEN",
    "CUSTOM_PLACEHOLDER",
    "INLINE_SENTINEL",
    "RESERVED_PREFIX",
    "create_parser",
    "custom_token",
    "get_parser",
    "is_inline_expression",
    "is_reserved",
    "mark_boundaries",
    "tokenize",
]
