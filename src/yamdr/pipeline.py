"""Document-wide pipeline: parse, classify, render.

Every call builds its own reader registry (and so its own script
runtime) from the registry factory, so renders never share state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from yamdr.classifier import classify
from yamdr.config import Format, resolve_options
from yamdr.events import Custom
from yamdr.readers.protocol import ExportableBlock
from yamdr.readers.registry import create_default_registry
from yamdr.renderers.html import HtmlRenderer, render_page
from yamdr.renderers.markdown import MarkdownRenderer
from yamdr.tokenizer import mark_boundaries, tokenize
from yamdr.utils.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from yamdr.config import RenderOptions
    from yamdr.events import ExtendedEvent
    from yamdr.readers.registry import RegistryFactory
    from yamdr.renderers.protocol import Renderer

logger = get_logger(__name__)


def parse_markdown(
    markdown: str,
    options: RenderOptions | None = None,
    *,
    registry_factory: RegistryFactory | None = None,
) -> list[ExtendedEvent]:
    """Parse Markdown into the extended-event list.

    Args:
        markdown: Source text
        options: Render options (ambient options when None)
        registry_factory: Builds the readers for this parse

    Returns:
        Events in document order
    """
    options = resolve_options(options)
    registry = (registry_factory or create_default_registry)()
    tokens = mark_boundaries(tokenize(markdown))
    return classify(tokens, registry, options.error_policy)


def get_renderer(format: Format) -> Renderer:
    """Return the renderer for an output format."""
    if format is Format.MARKDOWN:
        return MarkdownRenderer()
    return HtmlRenderer()


def render_events(events: Iterable[ExtendedEvent], format: Format = Format.HTML) -> str:
    """Serialize events with the renderer for ``format``."""
    return get_renderer(format).render(events)


def render_markdown(
    markdown: str,
    options: RenderOptions | None = None,
    *,
    registry_factory: RegistryFactory | None = None,
) -> str:
    """Render a whole document to HTML or canonical Markdown.

    Standalone HTML is wrapped in a page shell with the stylesheet and
    the optional head/body fragments.
    """
    options = resolve_options(options)
    events = parse_markdown(markdown, options, registry_factory=registry_factory)
    output = render_events(events, options.format)
    logger.debug("Rendered %d events as %s", len(events), options.format.value)
    if options.format is Format.HTML and options.standalone:
        return render_page(output, options)
    return output


def collect_exports(events: Iterable[ExtendedEvent]) -> dict[str, Mapping[str, Any]]:
    """Collect the structured records of exportable blocks, keyed by name."""
    exports: dict[str, Mapping[str, Any]] = {}
    for event in events:
        if isinstance(event, Custom) and isinstance(event.block, ExportableBlock):
            name, record = event.block.export()
            exports[name] = record
    return exports
