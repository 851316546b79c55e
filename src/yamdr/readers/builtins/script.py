"""Script-bearing blocks and inline expressions.

All of them share the reader's ScriptRuntime, so one render sees one
persistent scope in source order.

Block tags:
    Script: runs against the persistent scope; ``debug()`` output is
        written back as ``# > `` comment lines after the calling line
    ScriptGlobals: function definitions merged into every later unit
    DynamicTable: ``row(cells)`` builds a table; the first row is the header
    DynamicChart: ``plot(points)`` adds one line series
    Data: a YAML dataset bound as a read-only constant

Inline expressions are code spans wrapped in underscores::

    The answer is `_6 * 7_`.

After rendering, the Markdown form carries the value:
`` `_6 * 7 # > 42_` ``. Reading it back evaluates only the part before
`` # >``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any, ClassVar

from yamdr.charts import LINE_CHART, LineChart, render_chart
from yamdr.errors import BlockReadFailure, ScriptError
from yamdr.header import BlockHeader
from yamdr.renderers.tables import table_html, table_markdown
from yamdr.script.dataset import Dataset
from yamdr.script.runtime import OUTPUT_PREFIX, ScriptLine, ScriptRuntime, strip_output
from yamdr.stringbuilder import StringBuilder
from yamdr.tokenizer import INLINE_SENTINEL, is_inline_expression
from yamdr.utils.html import hide_with_title, html_escape
from yamdr.utils.logger import get_logger
from yamdr.utils.text import code_span

logger = get_logger(__name__)

SCRIPT_TAG = "Script"
GLOBALS_TAG = "ScriptGlobals"
TABLE_TAG = "DynamicTable"
CHART_TAG = "DynamicChart"
DATA_TAG = "Data"
SCRIPT_TAGS = frozenset({SCRIPT_TAG, GLOBALS_TAG, TABLE_TAG, CHART_TAG, DATA_TAG})

INLINE_OUTPUT_SEPARATOR = " " + OUTPUT_PREFIX.rstrip()


def _titled(header: BlockHeader, html: str) -> str:
    title = header.get_str("hidden_title")
    return hide_with_title(title, html) if title else html


def _code_body(lines: tuple[str, ...]) -> str:
    return "".join(f"{line}\n" for line in lines)


# =============================================================================
# Blocks
# =============================================================================


@dataclass(frozen=True, slots=True)
class ScriptBlock:
    header: BlockHeader
    lines: tuple[ScriptLine, ...]

    inline: ClassVar[bool] = False

    def to_html(self) -> str:
        sb = StringBuilder()
        sb.append('<div class="script"><pre><code>')
        for line in self.lines:
            css = "script-output" if line.output else "script-code"
            sb.append(f'<span class="{css}">{html_escape(line.render())}</span>\n')
        sb.append("</code></pre></div>")
        return _titled(self.header, sb.build())

    def to_markdown(self) -> str:
        return self.header.to_fence("".join(f"{line.render()}\n" for line in self.lines))


@dataclass(frozen=True, slots=True)
class GlobalsBlock:
    """Function definitions; nothing visible in HTML."""

    header: BlockHeader
    source: str

    inline: ClassVar[bool] = False

    def to_html(self) -> str:
        return ""

    def to_markdown(self) -> str:
        return self.header.to_fence(self.source)


@dataclass(frozen=True, slots=True)
class TableBlock:
    header: BlockHeader
    code: tuple[str, ...]
    head: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]

    inline: ClassVar[bool] = False

    def to_html(self) -> str:
        return _titled(self.header, table_html(self.head, self.rows))

    def to_markdown(self) -> str:
        table = "".join(f"{OUTPUT_PREFIX}{line}\n" for line in table_markdown(self.head, self.rows))
        return self.header.to_fence(_code_body(self.code) + table)


@dataclass(frozen=True, slots=True)
class DynamicChartBlock:
    header: BlockHeader
    code: tuple[str, ...]
    chart: LineChart

    inline: ClassVar[bool] = False

    def to_html(self) -> str:
        return _titled(self.header, f'<div class="chart">{render_chart(self.chart)}</div>')

    def to_markdown(self) -> str:
        return self.header.to_fence(_code_body(self.code))


@dataclass(frozen=True, slots=True)
class DataBlock:
    """A dataset; its table is baked into the Markdown as YAML comments."""

    header: BlockHeader
    dataset: Dataset

    inline: ClassVar[bool] = False

    def to_html(self) -> str:
        head, rows = self.dataset.table()
        return _titled(self.header, table_html(head, rows))

    def to_markdown(self) -> str:
        head, rows = self.dataset.table()
        comments = "".join(f"# {line}\n" for line in table_markdown(head, rows))
        return self.header.to_fence(f"{self.dataset.to_yaml()}\n{comments}")

    def export(self) -> tuple[str, Mapping[str, Any]]:
        return self.dataset.name, self.dataset.to_mapping()


@dataclass(frozen=True, slots=True)
class InlineExpression:
    expression: str
    output: str

    inline: ClassVar[bool] = True

    @property
    def source(self) -> str:
        return f"{self.expression}{INLINE_OUTPUT_SEPARATOR} {self.output}"

    def to_html(self) -> str:
        return f'<code class="inline-script">{html_escape(self.source)}</code>'

    def to_markdown(self) -> str:
        return code_span(f"{INLINE_SENTINEL}{self.source}{INLINE_SENTINEL}")


type ScriptBlocks = ScriptBlock | GlobalsBlock | TableBlock | DynamicChartBlock | DataBlock


# =============================================================================
# Reader
# =============================================================================


class ScriptBlockReader:
    """Reads script-bearing blocks and inline expressions.

    Owns the ScriptRuntime of the render it was created for.
    """

    __slots__ = ("runtime",)

    def __init__(self, runtime: ScriptRuntime | None = None) -> None:
        self.runtime = runtime if runtime is not None else ScriptRuntime()

    def can_read_block(self, header: BlockHeader) -> bool:
        return header.tag in SCRIPT_TAGS

    def read_block(self, header: BlockHeader, body: str) -> ScriptBlocks:
        try:
            return self._read(header, body)
        except ScriptError as exc:
            raise BlockReadFailure(str(exc), header.tag) from exc
        except ValueError as exc:
            raise BlockReadFailure(f"invalid {header.tag} block: {exc}", header.tag) from exc

    def _read(self, header: BlockHeader, body: str) -> ScriptBlocks:
        match header.tag:
            case "Script":
                return ScriptBlock(header, tuple(self.runtime.run_block(body)))
            case "ScriptGlobals":
                self.runtime.add_globals(body)
                return GlobalsBlock(header, body)
            case "DynamicTable":
                head, rows = self.runtime.generate_table(body)
                return TableBlock(
                    header,
                    tuple(strip_output(body)),
                    tuple(head),
                    tuple(tuple(row) for row in rows),
                )
            case "DynamicChart":
                series = self.runtime.generate_chart(body)
                chart = LineChart.from_mapping(
                    {
                        "type": LINE_CHART,
                        "title": header.get_str("title") or "",
                        "range_x": header.get("range_x"),
                        "range_y": header.get("range_y"),
                    }
                )
                return DynamicChartBlock(
                    header, tuple(strip_output(body)), replace(chart, data=tuple(series))
                )
            case "Data":
                dataset = Dataset.from_yaml(body)
                self.runtime.add_dataset(dataset)
                logger.debug("Dataset %r with %d row(s)", dataset.name, len(dataset.rows))
                return DataBlock(header, dataset)
            case _:
                msg = f"not a script block: {header.tag!r}"
                raise ValueError(msg)

    def can_read_inline(self, text: str) -> bool:
        return is_inline_expression(text)

    def read_inline(self, text: str) -> InlineExpression:
        expression = text[1:-1].split(INLINE_OUTPUT_SEPARATOR, 1)[0].strip()
        try:
            output = self.runtime.eval_inline(expression)
        except ScriptError as exc:
            raise BlockReadFailure(f"inline expression {expression!r}: {exc}") from exc
        return InlineExpression(expression, " ".join(output.splitlines()))
