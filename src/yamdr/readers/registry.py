"""Reader registry: ordered dispatch of headers and inline spans to readers.

The first reader (in registration order) whose capability predicate
returns True handles the content; registration order is the only
tie-break.

Readers keep per-render state, so registries are built per render.
Pipeline entry points take a registry *factory* and call it once per
render; ``create_default_registry`` is the default factory.

Example:
    >>> builder = create_registry_with_defaults()
    >>> builder.register(MyReader())
    >>> registry = builder.build()
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from yamdr.errors import UnknownBlockType
from yamdr.readers.protocol import BlockReader
from yamdr.utils.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from yamdr.header import BlockHeader
    from yamdr.readers.protocol import CustomBlock

logger = get_logger(__name__)


class ReaderRegistry:
    """Ordered, immutable collection of block readers.

    Use ReaderRegistryBuilder to create instances.
    """

    __slots__ = ("_readers",)

    def __init__(self, readers: tuple[BlockReader, ...]) -> None:
        self._readers = readers

    def find_block_reader(self, header: BlockHeader) -> BlockReader | None:
        """Return the first reader claiming the header, or None."""
        for reader in self._readers:
            if reader.can_read_block(header):
                return reader
        return None

    def find_inline_reader(self, text: str) -> BlockReader | None:
        """Return the first reader claiming the inline text, or None."""
        for reader in self._readers:
            if reader.can_read_inline(text):
                return reader
        return None

    def read_block(self, header: BlockHeader, body: str) -> CustomBlock | None:
        """Dispatch a fenced block body to its reader.

        Returns:
            The custom block, or None when the content renders as nothing

        Raises:
            UnknownBlockType: No reader claims the header tag
            BlockReadFailure: The reader failed
        """
        reader = self.find_block_reader(header)
        if reader is None:
            raise UnknownBlockType(header.tag)
        logger.debug("Dispatching %s block to %s", header.tag, type(reader).__name__)
        return reader.read_block(header, body)

    @property
    def readers(self) -> tuple[BlockReader, ...]:
        return self._readers

    def __iter__(self) -> Iterator[BlockReader]:
        return iter(self._readers)

    def __len__(self) -> int:
        return len(self._readers)


class ReaderRegistryBuilder:
    """Mutable builder for ReaderRegistry.

    Example:
        >>> builder = ReaderRegistryBuilder()
        >>> builder.register(CodeBlockReader())
        >>> registry = builder.build()
    """

    __slots__ = ("_readers",)

    def __init__(self) -> None:
        self._readers: list[BlockReader] = []

    def register(self, reader: BlockReader) -> ReaderRegistryBuilder:
        """Append a reader after the ones already registered.

        Raises:
            TypeError: The reader does not implement the BlockReader protocol
        """
        if not isinstance(reader, BlockReader):
            msg = f"Reader {type(reader).__name__} does not implement BlockReader"
            raise TypeError(msg)
        self._readers.append(reader)
        return self

    def register_all(self, readers: Iterable[BlockReader]) -> ReaderRegistryBuilder:
        for reader in readers:
            self.register(reader)
        return self

    def build(self) -> ReaderRegistry:
        return ReaderRegistry(tuple(self._readers))

    def __len__(self) -> int:
        return len(self._readers)


type RegistryFactory = Callable[[], ReaderRegistry]


def create_registry_with_defaults() -> ReaderRegistryBuilder:
    """Create a builder holding fresh instances of the built-in readers.

    Order: Script, Code, Chart, Graph.
    """
    from yamdr.readers.builtins import (
        ChartBlockReader,
        CodeBlockReader,
        GraphBlockReader,
        ScriptBlockReader,
    )

    return ReaderRegistryBuilder().register_all(
        [
            ScriptBlockReader(),
            CodeBlockReader(),
            ChartBlockReader(),
            GraphBlockReader(),
        ]
    )


def create_default_registry() -> ReaderRegistry:
    """Build a registry of fresh built-in readers.

    Not cached: every render gets its own readers and script runtime.
    """
    return create_registry_with_defaults().build()


__all__ = [
    "ReaderRegistry",
    "ReaderRegistryBuilder",
    "RegistryFactory",
    "create_default_registry",
    "create_registry_with_defaults",
]
