"""Tests for the high-level yamdr API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

import pytest

import yamdr
from yamdr import (
    BlockHeader,
    BlockReadFailure,
    ErrorPolicy,
    Format,
    RenderOptions,
    UnknownBlockType,
    Yamdr,
    create_registry_with_defaults,
    parse_markdown,
    render_markdown,
)
from yamdr.events import Custom, Separator
from yamdr.pipeline import get_renderer
from yamdr.renderers import HtmlRenderer, MarkdownRenderer


@dataclass(frozen=True)
class ShoutBlock:
    text: str

    inline: ClassVar[bool] = False

    def to_html(self) -> str:
        return f"<p class=\"shout\">{self.text.upper()}</p>"

    def to_markdown(self) -> str:
        return BlockHeader("Shout").to_fence(self.text)


class ShoutReader:
    def can_read_block(self, header: BlockHeader) -> bool:
        return header.tag == "Shout"

    def read_block(self, header: BlockHeader, body: str) -> ShoutBlock:
        return ShoutBlock(body)

    def can_read_inline(self, text: str) -> bool:
        return False

    def read_inline(self, text: str) -> None:
        return None


def shout_registry():
    return create_registry_with_defaults().register(ShoutReader()).build()


class TestRenderMarkdown:
    """Tests for render_markdown()."""

    def test_html(self) -> None:
        assert render_markdown("# Hello") == "<h1>Hello</h1>\n"

    def test_markdown(self) -> None:
        options = RenderOptions(format=Format.MARKDOWN)
        assert render_markdown("Hello\n=====", options) == "# Hello\n\n"

    def test_script_document(self) -> None:
        html = render_markdown("```{t: Script}\nx = 40 + 2\n```\n\nx is `_x_`\n")
        assert '<code class="inline-script">x # &gt; 42</code>' in html

    def test_renders_do_not_share_scope(self) -> None:
        render_markdown("```{t: Script}\nleak = 1\n```\n")
        with pytest.raises(BlockReadFailure, match="NameError"):
            render_markdown("`_leak_`\n")

    def test_dunder_code_span_is_plain_code(self) -> None:
        html = render_markdown("Call `__init__` first.\n")
        assert html == "<p>Call <code>__init__</code> first.</p>\n"

    def test_script_cannot_reach_host(self) -> None:
        source = "```{t: Script}\ndebug(().__class__.__base__.__subclasses__())\n```\n"
        with pytest.raises(BlockReadFailure, match="compilation error"):
            render_markdown(source)

    def test_fail_fast_by_default(self) -> None:
        with pytest.raises(UnknownBlockType):
            render_markdown("```{t: Nope}\n```\n")

    def test_best_effort(self) -> None:
        options = RenderOptions(error_policy=ErrorPolicy.BEST_EFFORT)
        html = render_markdown("```{t: Nope}\n```\n\nafter\n", options)
        assert html == (
            "<div class=\"error\">line 1: unknown block type 'Nope'</div>\n<p>after</p>\n"
        )


class TestParseMarkdown:
    """Tests for parse_markdown()."""

    def test_events(self) -> None:
        events = parse_markdown("```{t: Code}\nx\n```\n")
        assert isinstance(events[0], Separator)
        assert isinstance(events[1], Custom)
        assert events[1].lineno == 1

    def test_custom_registry(self) -> None:
        events = parse_markdown("```{t: Shout}\nhey\n```\n", registry_factory=shout_registry)
        assert events[1] == Custom(ShoutBlock("hey\n"), 1)


class TestYamdr:
    """Tests for the configured processor."""

    def test_call(self) -> None:
        md = Yamdr(RenderOptions(format=Format.MARKDOWN))
        assert md("Title\n=====") == "# Title\n\n"

    def test_takes_ambient_options_at_creation(self) -> None:
        with yamdr.render_options_context(RenderOptions(standalone=True)):
            md = Yamdr()
        assert md.options.standalone
        assert md("x").startswith("<!DOCTYPE html>")

    def test_custom_reader(self) -> None:
        md = Yamdr(registry_factory=shout_registry)
        assert md("```{t: Shout}\nhey\n```\n") == '<p class="shout">HEY\n</p>\n'

    def test_custom_reader_markdown(self) -> None:
        md = Yamdr(RenderOptions(format=Format.MARKDOWN), registry_factory=shout_registry)
        assert md("```{t: Shout}\nhey\n```\n") == '```{"t":"Shout"}\nhey\n```\n\n'

    def test_blocks(self) -> None:
        md = Yamdr()
        document = md.render_blocks("# A\n\nB")
        assert len(document.blocks) == 2
        again = md.rerender_blocks([block.markdown for block in document.blocks])
        assert [b.html for b in again.blocks] == [b.html for b in document.blocks]

    def test_parse(self) -> None:
        assert len(Yamdr().parse("a\n\nb")) == 8


class TestPublicApi:
    """The package surface."""

    def test_renderer_per_format(self) -> None:
        assert isinstance(get_renderer(Format.MARKDOWN), MarkdownRenderer)
        assert isinstance(get_renderer(Format.HTML), HtmlRenderer)

    def test_version(self) -> None:
        assert yamdr.__version__ == "0.1.0"

    def test_all_names_exist(self) -> None:
        for name in yamdr.__all__:
            assert hasattr(yamdr, name), name
