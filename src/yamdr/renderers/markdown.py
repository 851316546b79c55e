"""Markdown renderer over extended events.

Serializes the event sequence back into Markdown that markdown-it reads
into a structurally equal token stream. The output is canonical rather
than a copy of the source: ATX headings, ``___`` thematic breaks,
inline links, JSON block headers.

Design:
    One linear pass with an explicit RenderContext: a stack of open
    container frames and a per-level event counter. Every written line
    goes through a prefixing writer that emits ``> `` for each open
    block quote and the list marker (first line) or its width in spaces
    (continuation lines) for each open list item.

    Blank lines between blocks are owed rather than written: closing a
    block sets ``owe_blank`` and the next block start pays it. Inside a
    tight list item nothing is owed, so tight lists stay tight.

Thread Safety:
    All per-render state lives in RenderContext, created fresh for each
    render() call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from yamdr.errors import RenderError
from yamdr.events import Custom, External, Separator, Standard
from yamdr.stringbuilder import StringBuilder
from yamdr.tokenizer import CUSTOM_PLACEHOLDER
from yamdr.utils.text import code_span

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from markdown_it.token import Token

    from yamdr.events import ExtendedEvent

THEMATIC_BREAK = "___"

_ALIGN_MARKERS = {
    "text-align:left": ":---",
    "text-align:center": ":---:",
    "text-align:right": "---:",
}

_LIST_OPEN = ("bullet_list_open", "ordered_list_open")


@dataclass(slots=True)
class Frame:
    """An open container on the tag stack."""

    token: Token
    count: int = 0
    marker: str = ""
    marker_pending: bool = False
    tight: bool = False
    aligns: list[str] = field(default_factory=list)


@dataclass(slots=True)
class RenderContext:
    sb: StringBuilder = field(default_factory=StringBuilder)
    stack: list[Frame] = field(default_factory=list)
    root_count: int = 0
    owe_blank: bool = False
    at_line_start: bool = True
    links: list[Token] = field(default_factory=list)
    autolink_text: list[str] = field(default_factory=list)


def _is_tight(events: Sequence[ExtendedEvent], index: int) -> bool:
    """Look ahead from a list opening for the tightness markdown-it decided.

    markdown-it hides the paragraphs directly inside the items of a
    tight list (two levels below the list token).
    """
    depth = 0
    for event in events[index:]:
        if not isinstance(event, Standard):
            continue
        token = event.token
        if token.type == "paragraph_open" and depth == 2:
            return token.hidden
        depth += token.nesting
        if depth == 0:
            break
    return True


def _destination(href: str, title: str | None) -> str:
    if not href or any(ch in href for ch in " ()<>"):
        href = f"<{href}>"
    if title:
        escaped = title.replace("\\", "\\\\").replace('"', '\\"')
        return f'{href} "{escaped}"'
    return href


class MarkdownRenderer:
    """Render extended events to canonical Markdown.

    Usage:
        >>> from yamdr import parse_markdown
        >>> MarkdownRenderer().render(parse_markdown("Title\\n====="))
        '# Title\\n\\n'
    """

    __slots__ = ()

    def render(self, events: Iterable[ExtendedEvent]) -> str:
        seq = list(events)
        ctx = RenderContext()
        for index, event in enumerate(seq):
            match event:
                case Separator():
                    continue
                case Custom(block=block):
                    self._write_block(ctx, block.to_markdown())
                case External(block=block):
                    self._write_block(ctx, block.to_markdown())
                case Standard(token=token):
                    self._render_token(ctx, token, seq, index)
        if ctx.owe_blank and ctx.sb:
            ctx.sb.append("\n")
        return ctx.sb.build()

    # =========================================================================
    # Writer
    # =========================================================================

    def _prefix(self, ctx: RenderContext, *, blank: bool = False) -> str:
        parts = []
        for frame in ctx.stack:
            kind = frame.token.type
            if kind == "blockquote_open":
                parts.append("> ")
            elif kind == "list_item_open":
                if frame.marker_pending:
                    if blank:
                        break
                    parts.append(frame.marker)
                    frame.marker_pending = False
                else:
                    parts.append(" " * len(frame.marker))
        return "".join(parts)

    def _write(self, ctx: RenderContext, text: str) -> None:
        for i, piece in enumerate(text.split("\n")):
            if i:
                if ctx.at_line_start:
                    ctx.sb.append(self._prefix(ctx, blank=True).rstrip())
                ctx.sb.append("\n")
                ctx.at_line_start = True
            if piece:
                if ctx.at_line_start:
                    ctx.sb.append(self._prefix(ctx))
                    ctx.at_line_start = False
                ctx.sb.append(piece)

    def _tight(self, ctx: RenderContext) -> bool:
        """True when the innermost container is an item of a tight list."""
        for position in range(len(ctx.stack) - 1, -1, -1):
            kind = ctx.stack[position].token.type
            if kind == "blockquote_open":
                return False
            if kind == "list_item_open":
                return position > 0 and ctx.stack[position - 1].tight
        return False

    def _begin(self, ctx: RenderContext) -> None:
        """Start a block: count it and pay any owed blank line."""
        if ctx.stack:
            ctx.stack[-1].count += 1
        else:
            ctx.root_count += 1
        if ctx.owe_blank:
            if ctx.sb:
                self._write(ctx, "\n")
            ctx.owe_blank = False

    def _end(self, ctx: RenderContext) -> None:
        ctx.owe_blank = not self._tight(ctx)

    def _write_block(self, ctx: RenderContext, markdown: str) -> None:
        if not markdown:
            return
        self._begin(ctx)
        self._write(ctx, markdown if markdown.endswith("\n") else markdown + "\n")
        self._end(ctx)

    # =========================================================================
    # Block tokens
    # =========================================================================

    def _render_token(
        self,
        ctx: RenderContext,
        token: Token,
        events: Sequence[ExtendedEvent],
        index: int,
    ) -> None:
        kind = token.type
        if kind == "inline":
            self._render_inline(ctx, token.children or [])
        elif kind == "paragraph_open":
            self._begin(ctx)
            ctx.stack.append(Frame(token))
        elif kind == "paragraph_close":
            ctx.stack.pop()
            self._write(ctx, "\n")
            if token.hidden:
                ctx.owe_blank = False
            else:
                self._end(ctx)
        elif kind == "heading_open":
            self._begin(ctx)
            following = events[index + 1] if index + 1 < len(events) else None
            has_text = (
                isinstance(following, Standard)
                and following.token.type == "inline"
                and bool(following.token.children)
            )
            level = int(token.tag[1])
            self._write(ctx, "#" * level + (" " if has_text else ""))
            ctx.stack.append(Frame(token))
        elif kind == "heading_close":
            ctx.stack.pop()
            self._write(ctx, "\n")
            self._end(ctx)
        elif kind in _LIST_OPEN:
            self._begin(ctx)
            ctx.stack.append(Frame(token, tight=_is_tight(events, index)))
        elif kind in ("bullet_list_close", "ordered_list_close"):
            ctx.stack.pop()
            self._end(ctx)
        elif kind == "list_item_open":
            self._begin(ctx)
            ctx.stack.append(Frame(token, marker=self._marker(ctx, token), marker_pending=True))
        elif kind == "list_item_close":
            frame = ctx.stack[-1]
            if frame.marker_pending:
                ctx.sb.append(self._prefix(ctx).rstrip())
                ctx.sb.append("\n")
                ctx.at_line_start = True
                self._end(ctx)
            ctx.stack.pop()
        elif kind == "blockquote_open":
            self._begin(ctx)
            ctx.stack.append(Frame(token))
        elif kind == "blockquote_close":
            if ctx.stack[-1].count == 0:
                ctx.sb.append(self._prefix(ctx).rstrip())
                ctx.sb.append("\n")
                ctx.at_line_start = True
            ctx.stack.pop()
            self._end(ctx)
        elif kind == "fence":
            self._begin(ctx)
            fence = token.markup or "```"
            content = token.content
            if content and not content.endswith("\n"):
                content += "\n"
            self._write(ctx, f"{fence}{token.info}\n{content}{fence}\n")
            self._end(ctx)
        elif kind == "code_block":
            self._begin(ctx)
            for line in token.content.rstrip("\n").split("\n"):
                self._write(ctx, f"    {line}\n" if line else "\n")
            self._end(ctx)
        elif kind == "hr":
            self._begin(ctx)
            self._write(ctx, f"{THEMATIC_BREAK}\n")
            self._end(ctx)
        elif kind == "html_block":
            self._write_block(ctx, token.content)
        elif kind.startswith(("table", "thead", "tbody", "tr", "th", "td")):
            self._render_table_token(ctx, token)
        else:
            msg = f"Markdown renderer cannot serialize token {kind!r}"
            raise RenderError(msg)

    def _marker(self, ctx: RenderContext, token: Token) -> str:
        parent = ctx.stack[-1]
        if parent.token.type == "ordered_list_open":
            start = int(parent.token.attrGet("start") or 1)
            return f"{start + parent.count - 1}{token.markup or '.'} "
        return f"{token.markup or '-'} "

    def _render_table_token(self, ctx: RenderContext, token: Token) -> None:
        kind = token.type
        if kind == "table_open":
            self._begin(ctx)
            ctx.stack.append(Frame(token))
        elif kind == "table_close":
            ctx.stack.pop()
            self._end(ctx)
        elif kind in ("thead_open", "tbody_open", "tr_open"):
            ctx.stack.append(Frame(token))
        elif kind == "tr_close":
            ctx.stack.pop()
            self._write(ctx, "|\n")
        elif kind == "tbody_close":
            ctx.stack.pop()
        elif kind == "thead_close":
            ctx.stack.pop()
            table = ctx.stack[-1]
            markers = "".join(f"|{_ALIGN_MARKERS.get(a, '---')}" for a in table.aligns)
            self._write(ctx, f"{markers}|\n")
        elif kind in ("th_open", "td_open"):
            if kind == "th_open":
                # table > thead > tr > th
                ctx.stack[-3].aligns.append(str(token.attrGet("style") or ""))
            self._write(ctx, "| ")
            ctx.stack.append(Frame(token))
        elif kind in ("th_close", "td_close"):
            ctx.stack.pop()
            self._write(ctx, " ")
        else:
            msg = f"Markdown renderer cannot serialize token {kind!r}"
            raise RenderError(msg)

    # =========================================================================
    # Inline tokens
    # =========================================================================

    def _render_inline(self, ctx: RenderContext, children: Sequence[Token]) -> None:
        for child in children:
            self._render_inline_token(ctx, child)

    def _render_inline_token(self, ctx: RenderContext, token: Token) -> None:
        if ctx.links and ctx.links[-1].markup == "autolink" and token.type != "link_close":
            ctx.autolink_text.append(token.content)
            return
        match token.type:
            case "text":
                self._write(ctx, token.content)
            case "text_special":
                self._write(ctx, token.markup or token.content)
            case "softbreak":
                self._write(ctx, "\n")
            case "hardbreak":
                self._write(ctx, "\\\n")
            case "code_inline":
                self._write(ctx, code_span(token.content))
            case "html_inline":
                self._write(ctx, token.content)
            case "em_open" | "em_close" | "strong_open" | "strong_close" | "s_open" | "s_close":
                self._write(ctx, token.markup)
            case "link_open":
                ctx.links.append(token)
                self._write(ctx, "<" if token.markup == "autolink" else "[")
            case "link_close":
                link = ctx.links.pop()
                if link.markup == "autolink":
                    self._write(ctx, f"{self._autolink_target(ctx, link)}>")
                else:
                    href = str(link.attrGet("href") or "")
                    title = link.attrGet("title")
                    self._write(ctx, f"]({_destination(href, str(title) if title else None)})")
            case "image":
                self._write(ctx, "![")
                self._render_inline(ctx, token.children or [])
                src = str(token.attrGet("src") or "")
                title = token.attrGet("title")
                self._write(ctx, f"]({_destination(src, str(title) if title else None)})")
            case _ if token.type == CUSTOM_PLACEHOLDER:
                self._write(ctx, token.meta["block"].to_markdown())
            case _:
                msg = f"Markdown renderer cannot serialize inline token {token.type!r}"
                raise RenderError(msg)

    def _autolink_target(self, ctx: RenderContext, link: Token) -> str:
        # markdown-it decodes the displayed text, so it can hold characters
        # an autolink cannot; the normalized href always reads back the same.
        text = "".join(ctx.autolink_text)
        ctx.autolink_text.clear()
        if text and not any(ch.isspace() or ch in "<>" for ch in text):
            return text
        return str(link.attrGet("href") or "")
