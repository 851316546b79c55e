"""Line charts: data model, renderer protocol and injection.

Chart blocks describe a static line chart in YAML::

    type: LineChart
    title: Growth
    range_x: [0, 10]
    data:
      - [[0, 0], [1, 2], [2, 3]]

DynamicChart blocks produce the same model from a script. When
yamdr[charts] is installed, charts render as inline SVG through
matplotlib; otherwise as a figure holding the raw series.
"""

from __future__ import annotations

import io
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import yaml

from yamdr.utils.html import html_escape
from yamdr.utils.logger import get_logger

logger = get_logger(__name__)

LINE_CHART = "LineChart"

COLORS = ("#1f77b4", "#d62728", "#2ca02c", "#9467bd", "#ff7f0e", "#8c564b")

type Point = tuple[float, float]
type Series = tuple[Point, ...]


def _range(value: Any, key: str) -> tuple[float, float] | None:
    if value is None:
        return None
    if not isinstance(value, Sequence) or isinstance(value, str) or len(value) != 2:
        raise ValueError(f"'{key}' must be a pair of numbers")
    return float(value[0]), float(value[1])


def _series(value: Any) -> Series:
    if not isinstance(value, Sequence) or isinstance(value, str):
        raise ValueError("each series must be a list of [x, y] points")
    points = []
    for point in value:
        if not isinstance(point, Sequence) or isinstance(point, str) or len(point) != 2:
            raise ValueError(f"invalid point {point!r}, expected [x, y]")
        points.append((float(point[0]), float(point[1])))
    return tuple(points)


@dataclass(frozen=True, slots=True)
class LineChart:
    """A line chart with one or more series.

    Ranges default to ``0..max`` of the data when absent.
    """

    title: str = ""
    data: tuple[Series, ...] = ()
    range_x: tuple[float, float] | None = None
    range_y: tuple[float, float] | None = None

    @classmethod
    def from_mapping(cls, value: Any) -> LineChart:
        """Build a chart from a decoded YAML document.

        Raises:
            ValueError: The document is not a line chart description
        """
        if not isinstance(value, Mapping):
            raise ValueError("chart must be a mapping")
        kind = value.get("type")
        if kind != LINE_CHART:
            raise ValueError(f"unknown chart type {kind!r}")
        data = value.get("data") or []
        if not isinstance(data, Sequence) or isinstance(data, str):
            raise ValueError("'data' must be a list of series")
        return cls(
            title=str(value.get("title") or ""),
            data=tuple(_series(series) for series in data),
            range_x=_range(value.get("range_x"), "range_x"),
            range_y=_range(value.get("range_y"), "range_y"),
        )

    @classmethod
    def from_yaml(cls, text: str) -> LineChart:
        try:
            value = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ValueError(f"invalid YAML: {exc}") from exc
        return cls.from_mapping(value)

    def to_mapping(self) -> dict[str, Any]:
        mapping: dict[str, Any] = {"type": LINE_CHART, "title": self.title}
        if self.range_x is not None:
            mapping["range_x"] = list(self.range_x)
        if self.range_y is not None:
            mapping["range_y"] = list(self.range_y)
        mapping["data"] = [[list(point) for point in series] for series in self.data]
        return mapping

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_mapping(), sort_keys=False, default_flow_style=None)

    def bounds(self) -> tuple[tuple[float, float], tuple[float, float]]:
        """Return ``(range_x, range_y)``, defaulting to ``0..max``."""
        xs = [x for series in self.data for x, _ in series]
        ys = [y for series in self.data for _, y in series]
        range_x = self.range_x or (0.0, max(xs, default=1.0))
        range_y = self.range_y or (0.0, max(ys, default=1.0))
        return range_x, range_y


class ChartRenderer(Protocol):
    """Protocol for chart rasterizers."""

    def render_svg(self, chart: LineChart) -> str:
        """Render the chart and return an SVG document."""
        ...


_renderer: ChartRenderer | None = None
_tried_matplotlib: bool = False


def set_chart_renderer(renderer: ChartRenderer | None) -> None:
    """Set the global chart renderer (None selects the plain fallback)."""
    global _renderer, _tried_matplotlib
    _renderer = renderer
    _tried_matplotlib = True


def reset_chart_renderer() -> None:
    """Forget any configured renderer and probe for matplotlib again."""
    global _renderer, _tried_matplotlib
    _renderer = None
    _tried_matplotlib = False


def _try_import_matplotlib() -> bool:
    global _renderer, _tried_matplotlib

    if _tried_matplotlib:
        return _renderer is not None

    _tried_matplotlib = True

    try:
        from matplotlib.figure import Figure  # type: ignore[import-not-found]
    except ImportError:
        return False

    class MatplotlibChartRenderer:
        """SVG output through matplotlib's object-oriented API (no pyplot state)."""

        def render_svg(self, chart: LineChart) -> str:
            figure = Figure(figsize=(6.4, 4.0))
            axes = figure.subplots()
            for index, series in enumerate(chart.data):
                xs = [x for x, _ in series]
                ys = [y for _, y in series]
                axes.plot(xs, ys, color=COLORS[index % len(COLORS)])
            (x0, x1), (y0, y1) = chart.bounds()
            axes.set_xlim(x0, x1)
            axes.set_ylim(y0, y1)
            if chart.title:
                axes.set_title(chart.title)
            buffer = io.StringIO()
            figure.savefig(buffer, format="svg")
            return buffer.getvalue()

    _renderer = MatplotlibChartRenderer()
    return True


def get_chart_renderer() -> ChartRenderer | None:
    if _renderer is None:
        _try_import_matplotlib()
    return _renderer


def _fallback_html(chart: LineChart) -> str:
    lines = []
    for index, series in enumerate(chart.data, start=1):
        points = " ".join(f"({x:g}, {y:g})" for x, y in series)
        lines.append(f"series {index}: {points}")
    caption = f"<figcaption>{html_escape(chart.title)}</figcaption>" if chart.title else ""
    body = html_escape("\n".join(lines))
    return f'<figure class="chart">{caption}<pre>{body}</pre></figure>'


def render_chart(chart: LineChart) -> str:
    """Render a chart to HTML with the configured renderer."""
    renderer = get_chart_renderer()
    if renderer is None:
        logger.debug("No chart renderer available, using plain fallback")
        return _fallback_html(chart)
    return renderer.render_svg(chart)
