"""Graph blocks: Graphviz DOT descriptions rendered as diagrams.

Example:
    ```{"t":"Graph"}
    digraph { a -> b; b -> c }
    ```
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from yamdr.errors import BlockReadFailure
from yamdr.graphs import GraphLayoutError, render_graph
from yamdr.header import BlockHeader
from yamdr.readers.protocol import BlockOnlyReader
from yamdr.utils.html import hide_with_title

GRAPH_TAG = "Graph"


@dataclass(frozen=True, slots=True)
class GraphBlock:
    header: BlockHeader
    source: str
    html: str

    inline: ClassVar[bool] = False

    def to_html(self) -> str:
        body = f'<div class="graph">{self.html}</div>'
        title = self.header.get_str("hidden_title")
        return hide_with_title(title, body) if title else body

    def to_markdown(self) -> str:
        return self.header.to_fence(self.source)


class GraphBlockReader(BlockOnlyReader):
    """Reads ``Graph`` blocks; layout happens at read time."""

    __slots__ = ()

    def can_read_block(self, header: BlockHeader) -> bool:
        return header.tag == GRAPH_TAG

    def read_block(self, header: BlockHeader, body: str) -> GraphBlock:
        try:
            html = render_graph(body)
        except GraphLayoutError as exc:
            raise BlockReadFailure(f"invalid graph: {exc}", GRAPH_TAG) from exc
        return GraphBlock(header, body, html)
