"""Chart blocks: static line charts described in YAML.

Example:
    ```{"t":"Chart"}
    type: LineChart
    title: Growth
    data:
      - [[0, 0], [1, 2], [2, 3]]
    ```

The Markdown form re-emits the chart through its model, so numbers come
back as floats.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from yamdr.charts import LineChart, render_chart
from yamdr.errors import BlockReadFailure
from yamdr.header import BlockHeader
from yamdr.readers.protocol import BlockOnlyReader
from yamdr.utils.html import hide_with_title

CHART_TAG = "Chart"


@dataclass(frozen=True, slots=True)
class ChartBlock:
    header: BlockHeader
    chart: LineChart

    inline: ClassVar[bool] = False

    def to_html(self) -> str:
        body = f'<div class="chart">{render_chart(self.chart)}</div>'
        title = self.header.get_str("hidden_title")
        return hide_with_title(title, body) if title else body

    def to_markdown(self) -> str:
        return self.header.to_fence(self.chart.to_yaml())


class ChartBlockReader(BlockOnlyReader):
    """Reads ``Chart`` blocks."""

    __slots__ = ()

    def can_read_block(self, header: BlockHeader) -> bool:
        return header.tag == CHART_TAG

    def read_block(self, header: BlockHeader, body: str) -> ChartBlock:
        try:
            chart = LineChart.from_yaml(body)
        except ValueError as exc:
            raise BlockReadFailure(f"invalid chart: {exc}", CHART_TAG) from exc
        return ChartBlock(header, chart)
