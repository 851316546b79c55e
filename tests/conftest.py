"""Shared fixtures: optional engines pinned to their plain fallbacks."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from markdown_it.token import Token

from yamdr.charts import reset_chart_renderer, set_chart_renderer
from yamdr.config import reset_render_options
from yamdr.graphs import reset_graph_layout, set_graph_layout
from yamdr.highlighting import reset_highlighter, set_highlighter
from yamdr.tokenizer import tokenize

_CONTENT_TYPES = frozenset(
    {
        "code_block",
        "code_inline",
        "fence",
        "html_block",
        "html_inline",
        "text",
        "text_special",
    }
)


@pytest.fixture(autouse=True)
def plain_engines() -> Iterator[None]:
    """Run every test without highlighter, graph layout or chart renderer."""
    set_highlighter(None)
    set_graph_layout(None)
    set_chart_renderer(None)
    yield
    reset_highlighter()
    reset_graph_layout()
    reset_chart_renderer()
    reset_render_options()


def _describe(token: Token) -> tuple:
    attrs = tuple(sorted((key, str(value)) for key, value in token.attrs.items()))
    content = token.content if token.type in _CONTENT_TYPES else ""
    info = token.info if token.type == "fence" else ""
    children = tuple(_describe(child) for child in token.children or [])
    return (token.type, token.tag, token.nesting, token.hidden, attrs, content, info, children)


def token_structure(markdown: str) -> list[tuple]:
    """Structure of a document as markdown-it sees it, ignoring source markup."""
    return [_describe(token) for token in tokenize(markdown)]


@pytest.fixture(scope="session")
def structure():
    return token_structure
