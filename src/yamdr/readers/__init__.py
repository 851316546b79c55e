"""Block reader system.

Readers turn fenced blocks (selected by their header) and inline
expressions into custom blocks. The registry dispatches to the first
reader that claims the content.

Key components:
- BlockReader: Protocol for readers
- CustomBlock: Protocol for what readers produce
- ReaderRegistry / ReaderRegistryBuilder: ordered dispatch
- create_default_registry: fresh built-in readers for one render

Example:
    >>> from yamdr.readers import create_registry_with_defaults
    >>> builder = create_registry_with_defaults()
    >>> builder.register(MyReader())
    >>> registry = builder.build()
"""

from yamdr.readers.marker import ErrorMarker
from yamdr.readers.protocol import BlockOnlyReader, BlockReader, CustomBlock, ExportableBlock
from yamdr.readers.registry import (
    ReaderRegistry,
    ReaderRegistryBuilder,
    RegistryFactory,
    create_default_registry,
    create_registry_with_defaults,
)

__all__ = [
    "BlockOnlyReader",
    "BlockReader",
    "CustomBlock",
    "ErrorMarker",
    "ExportableBlock",
    "ReaderRegistry",
    "ReaderRegistryBuilder",
    "RegistryFactory",
    "create_default_registry",
    "create_registry_with_defaults",
]
