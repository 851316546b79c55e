"""Document segmenter: one block per top-level element.

Separators partition the event list exhaustively and contiguously; each
group is rendered independently by both renderers. A front end edits
blocks one at a time and sends the fragments back through
``rerender_blocks``, which re-runs the whole pipeline from scratch so
script state is rebuilt in document order.

Example:
    >>> blocks = render_blocks("# Title\\n\\nText.")
    >>> [block.markdown for block in blocks.blocks]
    ['# Title\\n\\n', 'Text.\\n\\n']
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from yamdr.config import resolve_options
from yamdr.events import External, Separator
from yamdr.pipeline import collect_exports, parse_markdown
from yamdr.renderers.html import STYLE, HtmlRenderer
from yamdr.renderers.markdown import MarkdownRenderer
from yamdr.utils.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from yamdr.config import RenderOptions
    from yamdr.events import ExtendedEvent, ExternalBlock
    from yamdr.readers.registry import RegistryFactory

logger = get_logger(__name__)


@dataclass(slots=True)
class DocumentBlock:
    """One top-level element rendered to both formats.

    External blocks carry their payload and empty fragments; their owner
    renders them.
    """

    id: int
    html: str
    markdown: str
    external: ExternalBlock | None = None

    def source(self) -> str:
        """Markdown to feed back into the pipeline for this block."""
        if not self.markdown and self.external is not None:
            return self.external.to_markdown()
        return self.markdown


@dataclass(slots=True)
class DocumentBlocks:
    """A segmented document.

    Attributes:
        css: Stylesheet for the HTML fragments
        blocks: Blocks in document order, ids from 0
        datasets: Data block records by dataset name
    """

    css: str
    blocks: list[DocumentBlock]
    datasets: dict[str, Mapping[str, Any]] = field(default_factory=dict)

    def rerender(
        self,
        options: RenderOptions | None = None,
        *,
        registry_factory: RegistryFactory | None = None,
    ) -> None:
        """Re-run the pipeline over the current fragments, in place."""
        fresh = rerender_blocks(
            [block.source() for block in self.blocks],
            options,
            registry_factory=registry_factory,
        )
        self.css = fresh.css
        self.blocks = fresh.blocks
        self.datasets = fresh.datasets

    def markdown(self) -> str:
        """Whole-document Markdown assembled from the fragments."""
        return _join(block.source() for block in self.blocks)

    def to_dict(self) -> dict[str, Any]:
        from yamdr.serialization import to_dict

        return to_dict(self)

    def to_json(self, *, indent: int | None = None) -> str:
        from yamdr.serialization import to_json

        return to_json(self, indent=indent)


def segment(events: Iterable[ExtendedEvent]) -> list[tuple[int, list[ExtendedEvent]]]:
    """Group events by the Separator preceding them.

    Raises:
        ValueError: Events appear before the first Separator
    """
    groups: list[tuple[int, list[ExtendedEvent]]] = []
    for event in events:
        if isinstance(event, Separator):
            groups.append((event.id, []))
        elif not groups:
            raise ValueError("event stream must start with a Separator")
        else:
            groups[-1][1].append(event)
    return groups


def render_blocks(
    markdown: str,
    options: RenderOptions | None = None,
    *,
    registry_factory: RegistryFactory | None = None,
) -> DocumentBlocks:
    """Parse once and render every top-level element to both formats."""
    options = resolve_options(options)
    events = parse_markdown(markdown, options, registry_factory=registry_factory)
    html_renderer = HtmlRenderer()
    markdown_renderer = MarkdownRenderer()

    blocks = []
    for element, group in segment(events):
        if len(group) == 1 and isinstance(group[0], External):
            blocks.append(DocumentBlock(element, "", "", external=group[0].block))
            continue
        blocks.append(
            DocumentBlock(
                element,
                html_renderer.render(group),
                markdown_renderer.render(group),
            )
        )
    logger.debug("Segmented document into %d blocks", len(blocks))
    return DocumentBlocks(STYLE, blocks, collect_exports(events))


def _join(fragments: Iterable[str]) -> str:
    # Every fragment is a complete block; one blank line keeps them apart.
    return "".join(f.rstrip("\n") + "\n\n" for f in fragments if f.strip())


def rerender_blocks(
    fragments: Iterable[str],
    options: RenderOptions | None = None,
    *,
    registry_factory: RegistryFactory | None = None,
) -> DocumentBlocks:
    """Join edited Markdown fragments and render them from scratch."""
    return render_blocks(_join(fragments), options, registry_factory=registry_factory)
