"""Graph layout protocol and injection for Graph blocks.

Graph bodies are Graphviz DOT. When yamdr[graph] is installed and the
``dot`` executable is on PATH, graphs render as inline SVG through the
``graphviz`` package. Otherwise the DOT source is shown preformatted.

Usage:
    from yamdr.graphs import set_graph_layout

    class MyLayout:
        def render_svg(self, source: str) -> str:
            return my_engine(source)

    set_graph_layout(MyLayout())
"""

from __future__ import annotations

import subprocess
from typing import Protocol

from yamdr.utils.html import html_escape
from yamdr.utils.logger import get_logger

logger = get_logger(__name__)


class GraphLayoutError(ValueError):
    """The layout engine rejected the graph description."""


class GraphLayoutUnavailable(RuntimeError):
    """The layout engine cannot run in this environment."""


class GraphLayout(Protocol):
    """Protocol for graph layout engines."""

    def render_svg(self, source: str) -> str:
        """Lay out a DOT graph and return an SVG document.

        Raises:
            GraphLayoutError: The description is invalid
        """
        ...


_layout: GraphLayout | None = None
_tried_graphviz: bool = False


def set_graph_layout(layout: GraphLayout | None) -> None:
    """Set the global graph layout engine (None disables layout)."""
    global _layout, _tried_graphviz
    _layout = layout
    _tried_graphviz = True


def reset_graph_layout() -> None:
    """Forget any configured engine and probe for graphviz again."""
    global _layout, _tried_graphviz
    _layout = None
    _tried_graphviz = False


def _try_import_graphviz() -> bool:
    global _layout, _tried_graphviz

    if _tried_graphviz:
        return _layout is not None

    _tried_graphviz = True

    try:
        import graphviz  # type: ignore[import-not-found]
    except ImportError:
        return False

    class GraphvizLayout:
        """Layout through the Graphviz ``dot`` executable."""

        def render_svg(self, source: str) -> str:
            try:
                svg: str = graphviz.Source(source).pipe(format="svg", encoding="utf-8")
            except graphviz.ExecutableNotFound as exc:
                raise GraphLayoutUnavailable(str(exc)) from exc
            except subprocess.CalledProcessError as exc:
                stderr = exc.stderr or ""
                if isinstance(stderr, bytes):
                    stderr = stderr.decode("utf-8", "replace")
                raise GraphLayoutError(stderr.strip() or "graphviz rejected the graph") from exc
            return svg

    _layout = GraphvizLayout()
    return True


def get_graph_layout() -> GraphLayout | None:
    if _layout is None:
        _try_import_graphviz()
    return _layout


def render_graph(source: str) -> str:
    """Render a DOT description to HTML.

    Raises:
        GraphLayoutError: The configured engine rejected the description
    """
    layout = get_graph_layout()
    if layout is not None:
        try:
            return layout.render_svg(source)
        except GraphLayoutUnavailable as exc:
            logger.warning("Graph layout unavailable, showing DOT source: %s", exc)
    return f'<pre class="graph">{html_escape(source)}</pre>'
