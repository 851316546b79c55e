"""Tests for extended event classification."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import pytest

from yamdr.classifier import classify
from yamdr.config import ErrorPolicy
from yamdr.errors import (
    BlockReadFailure,
    NestedExternalBlock,
    UnknownBlockType,
)
from yamdr.events import Custom, External, ExternalBlock, Separator, Standard
from yamdr.header import BlockHeader
from yamdr.readers.marker import ErrorMarker
from yamdr.readers.registry import ReaderRegistryBuilder
from yamdr.tokenizer import CUSTOM_PLACEHOLDER, mark_boundaries, tokenize


@dataclass(frozen=True)
class EchoBlock:
    body: str
    inline: bool = False

    def to_html(self) -> str:
        return f"<echo>{self.body}</echo>"

    def to_markdown(self) -> str:
        return self.body


class EchoReader:
    """Claims ``Echo`` blocks and every inline expression."""

    def can_read_block(self, header: BlockHeader) -> bool:
        return header.tag == "Echo"

    def read_block(self, header: BlockHeader, body: str) -> EchoBlock:
        if "boom" in body:
            raise BlockReadFailure("exploded")
        return EchoBlock(body)

    def can_read_inline(self, text: str) -> bool:
        return True

    def read_inline(self, text: str) -> EchoBlock:
        if "boom" in text:
            raise BlockReadFailure("inline exploded")
        return EchoBlock(text.upper(), inline=True)


def _classify(markdown: str, policy: ErrorPolicy = ErrorPolicy.FAIL_FAST) -> list:
    registry = ReaderRegistryBuilder().register(EchoReader()).build()
    return classify(mark_boundaries(tokenize(markdown)), registry, policy)


def _non_separators(events: list) -> list:
    return [e for e in events if not isinstance(e, Separator)]


# =============================================================================
# Standard content
# =============================================================================


class TestStandard:
    """Plain Markdown passes through untouched."""

    def test_separators_precede_elements(self) -> None:
        events = _classify("# A\n\nB\n")
        assert isinstance(events[0], Separator)
        assert events[0].id == 0
        separators = [e.id for e in events if isinstance(e, Separator)]
        assert separators == [0, 1]

    def test_tokens_wrapped_unchanged(self) -> None:
        tokens = tokenize("Some *text*\n")
        registry = ReaderRegistryBuilder().build()
        events = _non_separators(classify(mark_boundaries(tokens), registry))
        assert [e.token for e in events] == tokens

    def test_plain_fence_stays_standard(self) -> None:
        events = _non_separators(_classify("```python\nx = 1\n```\n"))
        assert len(events) == 1
        assert isinstance(events[0], Standard)
        assert events[0].token.type == "fence"

    def test_malformed_header_stays_standard(self) -> None:
        events = _non_separators(_classify("```{not: a, header\nx\n```\n"))
        assert isinstance(events[0], Standard)

    def test_header_without_tag_stays_standard(self) -> None:
        events = _non_separators(_classify("```{lang: python}\nx\n```\n"))
        assert isinstance(events[0], Standard)

    def test_plain_code_span_untouched(self) -> None:
        events = _classify("Use `print()` here\n")
        inline = next(e.token for e in events if isinstance(e, Standard) and e.token.type == "inline")
        assert [c.type for c in inline.children] == ["text", "code_inline", "text"]


# =============================================================================
# Custom and External blocks
# =============================================================================


class TestCustom:
    """Headers dispatch to readers."""

    def test_custom_block(self) -> None:
        events = _classify("Intro\n\n```{t: Echo}\nhello\n```\n")
        custom = [e for e in events if isinstance(e, Custom)]
        assert len(custom) == 1
        assert custom[0].block == EchoBlock("hello\n")
        assert custom[0].lineno == 3

    def test_custom_block_inside_list(self) -> None:
        events = _classify("- item\n\n  ```{t: Echo}\n  nested\n  ```\n")
        assert any(isinstance(e, Custom) for e in events)

    def test_inline_expression_becomes_placeholder(self) -> None:
        events = _classify("Value: `_x_`!\n")
        inline = next(e.token for e in events if isinstance(e, Standard) and e.token.type == "inline")
        kinds = [c.type for c in inline.children]
        assert kinds == ["text", CUSTOM_PLACEHOLDER, "text"]
        placeholder = inline.children[1]
        assert placeholder.meta["block"] == EchoBlock("_X_", inline=True)

    def test_inline_rewrite_does_not_touch_source_tokens(self) -> None:
        tokens = tokenize("`_x_`\n")
        registry = ReaderRegistryBuilder().register(EchoReader()).build()
        classify(mark_boundaries(tokens), registry)
        assert tokens[1].children[0].type == "code_inline"


class TestExternal:
    """External blocks are never dispatched."""

    def test_external_event(self) -> None:
        events = _classify('```{"t":"External","owner":"plugin"}\npayload\n```\n')
        assert events == [
            Separator(0),
            External(ExternalBlock({"owner": "plugin"}, "payload\n")),
        ]

    def test_nested_external_fails_fast(self) -> None:
        with pytest.raises(NestedExternalBlock) as exc_info:
            _classify("> ```{t: External}\n> x\n> ```\n")
        assert exc_info.value.lineno == 1

    def test_nested_external_best_effort(self) -> None:
        events = _classify("- ```{t: External}\n  x\n  ```\n", ErrorPolicy.BEST_EFFORT)
        markers = [e.block for e in events if isinstance(e, Custom)]
        assert len(markers) == 1
        assert isinstance(markers[0], ErrorMarker)
        assert "top-level" in markers[0].message


# =============================================================================
# Error policy
# =============================================================================


class TestErrorPolicy:
    """FAIL_FAST raises, BEST_EFFORT substitutes markers."""

    def test_unknown_tag_fails_fast(self) -> None:
        with pytest.raises(UnknownBlockType) as exc_info:
            _classify("text\n\n```{t: Mystery}\nx\n```\n")
        assert exc_info.value.tag == "Mystery"
        assert exc_info.value.lineno == 3
        assert "line 3" in str(exc_info.value)

    def test_read_failure_is_located(self) -> None:
        with pytest.raises(BlockReadFailure) as exc_info:
            _classify("```{t: Echo}\nboom\n```\n")
        assert exc_info.value.tag == "Echo"
        assert exc_info.value.lineno == 1
        assert str(exc_info.value) == "Echo block at line 1: exploded"

    def test_best_effort_marker_and_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="yamdr"):
            events = _classify("```{t: Mystery}\nx\n```\n\nafter\n", ErrorPolicy.BEST_EFFORT)
        custom = [e for e in events if isinstance(e, Custom)]
        assert isinstance(custom[0].block, ErrorMarker)
        assert "Mystery" in custom[0].block.message
        assert any("Mystery" in record.getMessage() for record in caplog.records)
        # Processing continued after the failure.
        assert sum(isinstance(e, Separator) for e in events) == 2

    def test_inline_failure_best_effort(self) -> None:
        events = _classify("a `_boom_` b\n", ErrorPolicy.BEST_EFFORT)
        inline = next(e.token for e in events if isinstance(e, Standard) and e.token.type == "inline")
        marker = inline.children[1].meta["block"]
        assert isinstance(marker, ErrorMarker)
        assert marker.inline

    def test_inline_failure_fails_fast(self) -> None:
        with pytest.raises(BlockReadFailure, match="inline exploded"):
            _classify("a `_boom_` b\n")
