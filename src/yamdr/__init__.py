"""
yamdr: Markdown with executable custom blocks

Renders Markdown to HTML or to canonical Markdown, with fenced custom
blocks (scripts, dynamic tables and charts, datasets, diagrams, code
listings) that render in both formats and survive repeated re-rendering.
Documents can also be segmented into one block per top-level element for
block-by-block editing.

Quick Start:
    >>> from yamdr import render_markdown
    >>> render_markdown("# Hello")
    '<h1>Hello</h1>\\n'

    >>> source = '```{"t":"Script"}\\nx = 1 + 1\\ndebug(x)\\n```\\n'
    >>> print(render_markdown(source, RenderOptions(format=Format.MARKDOWN)))
    ```{"t":"Script"}
    x = 1 + 1
    debug(x)
    # > 2
    ```
    <BLANKLINE>

    >>> # Or keep a configured processor around
    >>> md = Yamdr(RenderOptions(standalone=True))
    >>> page = md("The answer is `_6 * 7_`.")

Custom Readers:
    >>> from yamdr import Yamdr, create_registry_with_defaults
    >>>
    >>> def registry():
    ...     return create_registry_with_defaults().register(MyReader()).build()
    >>> md = Yamdr(registry_factory=registry)

Installation:
    pip install yamdr              # markdown-it-py + PyYAML
    pip install yamdr[syntax]      # + Syntax highlighting via Rosettes
    pip install yamdr[graph]       # + Graphviz diagrams
    pip install yamdr[charts]      # + matplotlib charts
"""

from yamdr.config import (
    ErrorPolicy,
    Format,
    RenderOptions,
    get_render_options,
    render_options_context,
    reset_render_options,
    set_render_options,
)
from yamdr.errors import (
    BlockReadFailure,
    MalformedHeader,
    NestedExternalBlock,
    RenderError,
    ScriptError,
    UnknownBlockType,
    YamdrError,
)
from yamdr.events import Custom, ExtendedEvent, External, ExternalBlock, Separator, Standard
from yamdr.header import BlockHeader
from yamdr.pipeline import parse_markdown, render_events, render_markdown
from yamdr.readers import (
    BlockReader,
    CustomBlock,
    ReaderRegistry,
    ReaderRegistryBuilder,
    RegistryFactory,
    create_default_registry,
    create_registry_with_defaults,
)
from yamdr.renderers import STYLE, HtmlRenderer, MarkdownRenderer
from yamdr.segmenter import (
    DocumentBlock,
    DocumentBlocks,
    render_blocks,
    rerender_blocks,
    segment,
)

__version__ = "0.1.0"


class Yamdr:
    """Configured processor: options plus a registry factory.

    Usage:
        >>> md = Yamdr(RenderOptions(format=Format.MARKDOWN))
        >>> md("Title\\n=====")
        '# Title\\n\\n'

        >>> blocks = md.render_blocks("# A\\n\\nB")
        >>> len(blocks.blocks)
        2

    Thread Safety:
        Holds immutable configuration only; every call builds fresh readers.

    """

    __slots__ = ("_options", "_registry_factory")

    def __init__(
        self,
        options: RenderOptions | None = None,
        *,
        registry_factory: RegistryFactory | None = None,
    ) -> None:
        self._options = options if options is not None else get_render_options()
        self._registry_factory = registry_factory or create_default_registry

    @property
    def options(self) -> RenderOptions:
        return self._options

    def __call__(self, source: str) -> str:
        """Render a whole document with the configured options."""
        return render_markdown(source, self._options, registry_factory=self._registry_factory)

    def parse(self, source: str) -> list[ExtendedEvent]:
        return parse_markdown(source, self._options, registry_factory=self._registry_factory)

    def render_blocks(self, source: str) -> DocumentBlocks:
        return render_blocks(source, self._options, registry_factory=self._registry_factory)

    def rerender_blocks(self, fragments: list[str]) -> DocumentBlocks:
        return rerender_blocks(fragments, self._options, registry_factory=self._registry_factory)


__all__ = [
    "STYLE",
    "BlockHeader",
    "BlockReadFailure",
    "BlockReader",
    "Custom",
    "CustomBlock",
    "DocumentBlock",
    "DocumentBlocks",
    "ErrorPolicy",
    "ExtendedEvent",
    "External",
    "ExternalBlock",
    "Format",
    "HtmlRenderer",
    "MalformedHeader",
    "MarkdownRenderer",
    "NestedExternalBlock",
    "ReaderRegistry",
    "ReaderRegistryBuilder",
    "RegistryFactory",
    "RenderError",
    "RenderOptions",
    "ScriptError",
    "Separator",
    "Standard",
    "UnknownBlockType",
    "Yamdr",
    "YamdrError",
    "__version__",
    "create_default_registry",
    "create_registry_with_defaults",
    "get_render_options",
    "parse_markdown",
    "render_blocks",
    "render_events",
    "render_markdown",
    "render_options_context",
    "rerender_blocks",
    "reset_render_options",
    "segment",
    "set_render_options",
]
