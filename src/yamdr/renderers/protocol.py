"""Renderer protocol shared by the HTML and Markdown serializers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable

    from yamdr.events import ExtendedEvent


class Renderer(Protocol):
    """Serializes an extended-event sequence into one output string.

    Renderers never inspect what kind of custom block they hold; blocks
    serialize themselves.
    """

    def render(self, events: Iterable[ExtendedEvent]) -> str: ...
