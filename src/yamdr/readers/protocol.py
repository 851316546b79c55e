"""Protocols for block readers and the custom blocks they produce.

A reader claims fenced blocks by header and inline code spans by text,
and turns their content into custom blocks. Custom blocks know how to
serialize themselves to both output formats; renderers never look at
what kind of block they hold.

Example:
    >>> class UpperReader:
    ...     def can_read_block(self, header):
    ...         return header.tag == "Upper"
    ...     def read_block(self, header, body):
    ...         return UpperBlock(header, body)
    ...     def can_read_inline(self, text):
    ...         return False
    ...     def read_inline(self, text):
    ...         raise NotImplementedError
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from yamdr.header import BlockHeader


@runtime_checkable
class CustomBlock(Protocol):
    """A block rendered by its own serializers.

    Format stability: ``to_markdown()`` re-read by the same reader and
    serialized again yields the same text after the first normalization.

    Attributes:
        inline: True for blocks living inside a paragraph (inline expressions)

    """

    inline: bool

    def to_html(self) -> str:
        """Render the block as an HTML fragment."""
        ...

    def to_markdown(self) -> str:
        """Render the block as Markdown that the reader can read back.

        Block-level output is a complete block ending with a newline.
        Inline output is a single inline fragment.
        """
        ...


@runtime_checkable
class ExportableBlock(Protocol):
    """A custom block carrying a structured record for whole-document export."""

    def export(self) -> tuple[str, Mapping[str, Any]]:
        """Return ``(name, record)``."""
        ...


@runtime_checkable
class BlockReader(Protocol):
    """Turns fenced blocks and inline code spans into custom blocks.

    Readers are created fresh for every render and may keep per-render
    state (the script reader owns the script runtime). ``read_block`` and
    ``read_inline`` return None when the content is consumed but has
    nothing to render.

    Failures are reported as BlockReadFailure.
    """

    def can_read_block(self, header: BlockHeader) -> bool: ...

    def read_block(self, header: BlockHeader, body: str) -> CustomBlock | None: ...

    def can_read_inline(self, text: str) -> bool: ...

    def read_inline(self, text: str) -> CustomBlock | None: ...


class BlockOnlyReader:
    """Mixin for readers that never claim inline content."""

    __slots__ = ()

    def can_read_inline(self, text: str) -> bool:
        return False

    def read_inline(self, text: str) -> CustomBlock | None:
        msg = f"{type(self).__name__} does not read inline content"
        raise NotImplementedError(msg)


__all__ = ["BlockOnlyReader", "BlockReader", "CustomBlock", "ExportableBlock"]
