"""Extended events: the pipeline's single intermediate representation.

A parse produces one ordered list of events. Standard events wrap
markdown-it tokens untouched; the other variants carry what the tokenizer
knows nothing about.

Variants:
- Standard: a markdown-it token (inline tokens may hold custom children)
- Custom: a block-level custom block produced by a reader
- External: a block handed to an outside owner, never dispatched
- Separator: zero-width marker starting top-level element ``id``
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from yamdr.header import EXTERNAL_TAG, BlockHeader

if TYPE_CHECKING:
    from markdown_it.token import Token

    from yamdr.readers.protocol import CustomBlock


@dataclass(frozen=True, slots=True)
class ExternalBlock:
    """Opaque payload of an External block.

    Attributes:
        head: Header fields without the ``t`` key
        body: Raw fence body
    """

    head: Mapping[str, Any] = field(default_factory=dict)
    body: str = ""

    def to_markdown(self) -> str:
        return BlockHeader(EXTERNAL_TAG, dict(self.head)).to_fence(self.body)

    def to_dict(self) -> dict[str, Any]:
        return {"head": dict(self.head), "body": self.body}


@dataclass(frozen=True, slots=True)
class Standard:
    token: Token


@dataclass(frozen=True, slots=True)
class Custom:
    block: CustomBlock
    lineno: int | None = None


@dataclass(frozen=True, slots=True)
class External:
    block: ExternalBlock


@dataclass(frozen=True, slots=True)
class Separator:
    id: int


type ExtendedEvent = Standard | Custom | External | Separator

__all__ = [
    "Custom",
    "ExtendedEvent",
    "External",
    "ExternalBlock",
    "Separator",
    "Standard",
]
