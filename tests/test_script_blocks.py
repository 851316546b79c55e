"""Tests for script-bearing blocks and inline expressions."""

from __future__ import annotations

import pytest

from yamdr.errors import BlockReadFailure
from yamdr.header import BlockHeader
from yamdr.readers.builtins import ScriptBlockReader
from yamdr.readers.builtins.script import (
    DataBlock,
    DynamicChartBlock,
    GlobalsBlock,
    InlineExpression,
    ScriptBlock,
    TableBlock,
)
from yamdr.readers.protocol import CustomBlock, ExportableBlock

DATA_BODY = """\
name: testdata
fields:
  - name: field
data:
  - field: abc
  - field: def
"""


@pytest.fixture
def reader() -> ScriptBlockReader:
    return ScriptBlockReader()


def _read(reader: ScriptBlockReader, tag: str, body: str, **fields: object):
    return reader.read_block(BlockHeader(tag, fields), body)


class TestScript:
    """Script blocks render code and debug output."""

    def test_markdown_carries_output(self, reader: ScriptBlockReader) -> None:
        block = _read(reader, "Script", "x = 1 + 1\ndebug(x)\n")
        assert isinstance(block, ScriptBlock)
        assert block.to_markdown() == '```{"t":"Script"}\nx = 1 + 1\ndebug(x)\n# > 2\n```\n'

    def test_html(self, reader: ScriptBlockReader) -> None:
        block = _read(reader, "Script", "x = 1 + 1\ndebug(x)\n")
        assert block.to_html() == (
            '<div class="script"><pre><code>'
            '<span class="script-code">x = 1 + 1</span>\n'
            '<span class="script-code">debug(x)</span>\n'
            '<span class="script-output"># &gt; 2</span>\n'
            "</code></pre></div>"
        )

    def test_hidden_title(self, reader: ScriptBlockReader) -> None:
        block = _read(reader, "Script", "x = 1\n", hidden_title="Setup")
        html = block.to_html()
        assert html.startswith("<details><summary>Setup</summary>")
        assert html.endswith("</details>")
        assert '"hidden_title":"Setup"' in block.to_markdown()

    def test_rereading_markdown_is_stable(self) -> None:
        first = _read(ScriptBlockReader(), "Script", "debug(3 * 3)\n").to_markdown()
        body = first.split("\n", 1)[1].rsplit("```", 1)[0]
        second = _read(ScriptBlockReader(), "Script", body).to_markdown()
        assert second == first

    def test_failure_names_the_block(self, reader: ScriptBlockReader) -> None:
        with pytest.raises(BlockReadFailure) as exc_info:
            _read(reader, "Script", "1 / 0\n")
        assert exc_info.value.tag == "Script"
        assert exc_info.value.message.startswith("runtime error: ZeroDivisionError")


class TestGlobals:
    """ScriptGlobals blocks are invisible in HTML."""

    def test_empty_html_source_kept(self, reader: ScriptBlockReader) -> None:
        source = "def inc(v):\n    return v + 1\n"
        block = _read(reader, "ScriptGlobals", source)
        assert isinstance(block, GlobalsBlock)
        assert block.to_html() == ""
        assert block.to_markdown() == '```{"t":"ScriptGlobals"}\n' + source + "```\n"

    def test_functions_reach_later_blocks(self, reader: ScriptBlockReader) -> None:
        _read(reader, "ScriptGlobals", "def inc(v):\n    return v + 1\n")
        assert reader.read_inline("_inc(1)_").output == "2"


class TestDynamicTable:
    """Generated tables are written back as output comments."""

    SOURCE = "row(['n', 'square'])\nfor i in range(1, 3):\n    row([i, i * i])\n"

    def test_rows(self, reader: ScriptBlockReader) -> None:
        block = _read(reader, "DynamicTable", self.SOURCE)
        assert isinstance(block, TableBlock)
        assert block.head == ("n", "square")
        assert block.rows == (("1", "1"), ("2", "4"))

    def test_html(self, reader: ScriptBlockReader) -> None:
        block = _read(reader, "DynamicTable", self.SOURCE)
        assert block.to_html() == (
            "<table><thead><tr><th>n</th><th>square</th></tr></thead>"
            "<tbody><tr><td>1</td><td>1</td></tr><tr><td>2</td><td>4</td></tr></tbody></table>"
        )

    def test_markdown(self, reader: ScriptBlockReader) -> None:
        block = _read(reader, "DynamicTable", self.SOURCE)
        assert block.to_markdown() == (
            '```{"t":"DynamicTable"}\n'
            + self.SOURCE
            + "# > | n | square |\n# > |---|---|\n# > | 1 | 1 |\n# > | 2 | 4 |\n```\n"
        )

    def test_previous_output_ignored(self, reader: ScriptBlockReader) -> None:
        block = _read(reader, "DynamicTable", self.SOURCE + "# > | stale |\n")
        assert block.code == tuple(self.SOURCE.splitlines())

    def test_pipes_escaped(self, reader: ScriptBlockReader) -> None:
        block = _read(reader, "DynamicTable", "row(['a|b'])\n")
        assert "# > | a\\|b |" in block.to_markdown()


class TestDynamicChart:
    """Chart generators build a line chart from plot() calls."""

    def test_chart_from_plots(self, reader: ScriptBlockReader) -> None:
        block = _read(reader, "DynamicChart", "plot([(0, 0), (1, 1)])\n", title="Growth")
        assert isinstance(block, DynamicChartBlock)
        assert block.chart.title == "Growth"
        assert block.chart.data == (((0.0, 0.0), (1.0, 1.0)),)

    def test_fallback_html(self, reader: ScriptBlockReader) -> None:
        block = _read(reader, "DynamicChart", "plot([(0, 0), (1, 1)])\n", title="T")
        assert block.to_html() == (
            '<div class="chart"><figure class="chart"><figcaption>T</figcaption>'
            "<pre>series 1: (0, 0) (1, 1)</pre></figure></div>"
        )

    def test_markdown_is_the_script(self, reader: ScriptBlockReader) -> None:
        block = _read(reader, "DynamicChart", "plot([(0, 1)])\n")
        assert block.to_markdown() == '```{"t":"DynamicChart"}\nplot([(0, 1)])\n```\n'

    def test_invalid_range(self, reader: ScriptBlockReader) -> None:
        with pytest.raises(BlockReadFailure, match="range_x"):
            _read(reader, "DynamicChart", "plot([(0, 1)])\n", range_x=[1])


class TestData:
    """Data blocks declare datasets."""

    def test_binding_and_export(self, reader: ScriptBlockReader) -> None:
        block = _read(reader, "Data", DATA_BODY)
        assert isinstance(block, DataBlock)
        assert isinstance(block, ExportableBlock)
        name, record = block.export()
        assert name == "testdata"
        assert record["data"] == [{"field": "abc"}, {"field": "def"}]
        assert reader.read_inline('_testdata[1]["field"]_').output == "def"

    def test_html_table_numbers_rows(self, reader: ScriptBlockReader) -> None:
        block = _read(reader, "Data", DATA_BODY)
        assert block.to_html() == (
            "<table><thead><tr><th>#</th><th>field</th></tr></thead>"
            "<tbody><tr><td>1</td><td>abc</td></tr><tr><td>2</td><td>def</td></tr></tbody></table>"
        )

    def test_markdown_bakes_table_into_comments(self, reader: ScriptBlockReader) -> None:
        markdown = _read(reader, "Data", DATA_BODY).to_markdown()
        assert markdown.startswith('```{"t":"Data"}\nname: testdata\n')
        assert markdown.endswith(
            "\n# | # | field |\n# |---|---|\n# | 1 | abc |\n# | 2 | def |\n```\n"
        )

    def test_markdown_reads_back(self) -> None:
        markdown = _read(ScriptBlockReader(), "Data", DATA_BODY).to_markdown()
        body = markdown.split("\n", 1)[1].rsplit("```", 1)[0]
        assert _read(ScriptBlockReader(), "Data", body).to_markdown() == markdown

    def test_invalid_dataset(self, reader: ScriptBlockReader) -> None:
        with pytest.raises(BlockReadFailure, match="invalid Data block"):
            _read(reader, "Data", "- just\n- a list\n")


class TestInlineExpression:
    """Inline expressions carry their value in the Markdown form."""

    def test_value(self, reader: ScriptBlockReader) -> None:
        block = reader.read_inline("_6 * 7_")
        assert block == InlineExpression("6 * 7", "42")
        assert block.inline
        assert isinstance(block, CustomBlock)

    def test_html(self, reader: ScriptBlockReader) -> None:
        block = reader.read_inline("_6 * 7_")
        assert block.to_html() == '<code class="inline-script">6 * 7 # &gt; 42</code>'

    def test_markdown(self, reader: ScriptBlockReader) -> None:
        assert reader.read_inline("_6 * 7_").to_markdown() == "`_6 * 7 # > 42_`"

    def test_previous_value_ignored(self, reader: ScriptBlockReader) -> None:
        block = reader.read_inline("_6 * 7 # > 41_")
        assert block.output == "42"

    def test_newlines_collapsed(self, reader: ScriptBlockReader) -> None:
        assert reader.read_inline("_'a\\nb'_").output == "a b"

    def test_failure(self, reader: ScriptBlockReader) -> None:
        with pytest.raises(BlockReadFailure, match="inline expression 'missing'"):
            reader.read_inline("_missing_")
