"""Extended event classifier.

Second pass over the boundary-marked token stream. One linear traversal
with an explicit ClassifyContext turns markdown-it tokens into extended
events:

- boundary markers become Separator events (the markers are dropped)
- fences with a block header are dispatched to the reader registry
- fences tagged ``External`` become External events, never dispatched
- inline code spans wrapped in the ``_`` sentinel are dispatched to
  inline readers and replaced by placeholder children
- everything else passes through as Standard events

Failures follow the error policy: FAIL_FAST raises the first error,
BEST_EFFORT substitutes an ErrorMarker and logs a warning.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from yamdr.config import ErrorPolicy
from yamdr.errors import (
    BlockReadFailure,
    MalformedHeader,
    NestedExternalBlock,
    UnknownBlockType,
    YamdrError,
)
from yamdr.events import Custom, External, ExternalBlock, Separator, Standard
from yamdr.header import BlockHeader
from yamdr.readers.marker import ErrorMarker
from yamdr.tokenizer import (
    BOUNDARY_CLOSE,
    BOUNDARY_OPEN,
    custom_token,
    is_inline_expression,
)
from yamdr.utils.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from markdown_it.token import Token

    from yamdr.events import ExtendedEvent
    from yamdr.readers.protocol import CustomBlock
    from yamdr.readers.registry import ReaderRegistry

logger = get_logger(__name__)


@dataclass(slots=True)
class ClassifyContext:
    """Accumulator threaded through one classification pass."""

    registry: ReaderRegistry
    policy: ErrorPolicy = ErrorPolicy.FAIL_FAST
    events: list[ExtendedEvent] = field(default_factory=list)
    element: int = -1
    depth: int = 0

    def emit(self, event: ExtendedEvent) -> None:
        self.events.append(event)


def _lineno(token: Token) -> int | None:
    return token.map[0] + 1 if token.map else None


def _recover(
    ctx: ClassifyContext,
    error: YamdrError,
    cause: BaseException | None = None,
    *,
    inline: bool = False,
) -> ErrorMarker:
    """Apply the error policy: raise, or return a marker for the failure."""
    if ctx.policy is ErrorPolicy.FAIL_FAST:
        raise error from cause
    logger.warning("Substituting error marker: %s", error)
    return ErrorMarker(str(error), inline=inline)


def classify(
    tokens: Iterable[Token],
    registry: ReaderRegistry,
    policy: ErrorPolicy = ErrorPolicy.FAIL_FAST,
) -> list[ExtendedEvent]:
    """Classify a boundary-marked token stream into extended events.

    Args:
        tokens: Output of ``mark_boundaries``
        registry: Readers of this render
        policy: Error policy

    Returns:
        Events in document order, each top-level element preceded by its Separator

    Raises:
        UnknownBlockType: No reader claims a header (FAIL_FAST)
        BlockReadFailure: A reader failed (FAIL_FAST)
        NestedExternalBlock: An External block is nested (FAIL_FAST)
    """
    ctx = ClassifyContext(registry, policy)
    for token in tokens:
        _classify_token(ctx, token)
    logger.debug("Classified %d events in %d elements", len(ctx.events), ctx.element + 1)
    return ctx.events


def _classify_token(ctx: ClassifyContext, token: Token) -> None:
    if token.type == BOUNDARY_OPEN:
        ctx.element = token.meta["element"]
        ctx.emit(Separator(ctx.element))
    elif token.type == BOUNDARY_CLOSE:
        return
    elif token.type == "fence":
        _classify_fence(ctx, token)
    elif token.type == "inline":
        ctx.emit(Standard(_classify_inline(ctx, token)))
    else:
        ctx.depth += token.nesting
        ctx.emit(Standard(token))


def _classify_fence(ctx: ClassifyContext, token: Token) -> None:
    if not token.info.strip():
        ctx.emit(Standard(token))
        return
    try:
        header = BlockHeader.parse(token.info)
    except MalformedHeader as exc:
        logger.debug("Keeping fence as code: %s", exc)
        ctx.emit(Standard(token))
        return

    lineno = _lineno(token)
    if header.is_external:
        if ctx.depth != 0:
            ctx.emit(Custom(_recover(ctx, NestedExternalBlock(lineno)), lineno))
            return
        head = dict(header.fields)
        ctx.emit(External(ExternalBlock(head, token.content)))
        return

    block: CustomBlock | None
    try:
        block = ctx.registry.read_block(header, token.content)
    except UnknownBlockType as exc:
        block = _recover(ctx, UnknownBlockType(exc.tag, lineno), exc)
    except BlockReadFailure as exc:
        block = _recover(ctx, exc.with_location(header.tag, lineno), exc)
    if block is not None:
        ctx.emit(Custom(block, lineno))


def _classify_inline(ctx: ClassifyContext, token: Token) -> Token:
    """Replace inline expression code spans by placeholder children."""
    if not token.children or not any(
        child.type == "code_inline" and is_inline_expression(child.content)
        for child in token.children
    ):
        return token

    lineno = _lineno(token)
    children: list[Token] = []
    for child in token.children:
        if child.type != "code_inline" or not is_inline_expression(child.content):
            children.append(child)
            continue
        reader = ctx.registry.find_inline_reader(child.content)
        if reader is None:
            children.append(child)
            continue
        block: CustomBlock | None
        try:
            block = reader.read_inline(child.content)
        except BlockReadFailure as exc:
            block = _recover(ctx, exc.with_location(None, lineno), exc, inline=True)
        if block is not None:
            children.append(custom_token(block, lineno=lineno))
    return token.copy(children=children)


__all__ = ["ClassifyContext", "classify"]
