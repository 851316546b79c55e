"""Tests for block header parsing and canonical serialization."""

import pytest

from yamdr.errors import MalformedHeader, YamdrError
from yamdr.header import BlockHeader


class TestParse:
    """Info strings that are, and are not, block headers."""

    def test_yaml_flow_mapping(self) -> None:
        header = BlockHeader.parse("{t: Script, hidden_title: abc}")
        assert header.tag == "Script"
        assert header.fields == {"hidden_title": "abc"}

    def test_json_object(self) -> None:
        header = BlockHeader.parse('{"t":"Code","filename":"main.py","numbers":false}')
        assert header.tag == "Code"
        assert header.fields == {"filename": "main.py", "numbers": False}

    def test_surrounding_whitespace(self) -> None:
        assert BlockHeader.parse("  {t: Graph}  ").tag == "Graph"

    @pytest.mark.parametrize(
        "info",
        [
            "python",
            "{t: [unclosed",
            "{x: 1}",
            "{t: 5}",
            "{t: ''}",
            "[1, 2]",
        ],
    )
    def test_not_a_header(self, info: str) -> None:
        with pytest.raises(MalformedHeader) as exc_info:
            BlockHeader.parse(info)
        assert exc_info.value.info == info
        assert isinstance(exc_info.value, YamdrError)


class TestSerialize:
    """Headers are re-emitted as compact JSON with t first."""

    def test_compact_json_with_tag_first(self) -> None:
        header = BlockHeader.parse("{hidden_title: abc, t: Script}")
        assert header.to_info() == '{"t":"Script","hidden_title":"abc"}'

    def test_non_ascii_kept(self) -> None:
        header = BlockHeader("Code", {"filename": "größe.py"})
        assert header.to_info() == '{"t":"Code","filename":"größe.py"}'

    def test_reparse_is_identity(self) -> None:
        header = BlockHeader.parse("{t: Code, filename: a.py, numbers_start_at: 3}")
        assert BlockHeader.parse(header.to_info()) == header

    def test_fence(self) -> None:
        header = BlockHeader("Script", {})
        assert header.to_fence("x = 1") == '```{"t":"Script"}\nx = 1\n```\n'

    def test_fence_grows_past_backtick_lines(self) -> None:
        header = BlockHeader("Code", {})
        fence = header.to_fence("````\ninner\n````\n")
        assert fence.startswith('`````{"t":"Code"}\n')
        assert fence.endswith("\n`````\n")
