"""Markdown text helpers: code spans and fenced blocks."""

from __future__ import annotations

import re

_BACKTICK_RUN = re.compile(r"`+")
_FENCE_LINE = re.compile(r"^ {0,3}(`{3,})", re.MULTILINE)


def code_span(content: str) -> str:
    """Serialize text as a CommonMark code span.

    The delimiter is one backtick longer than the longest run inside the
    content. Content that begins or ends with a backtick, or that is
    surrounded by spaces, gets one padding space on each side so the
    parser strips exactly what was added.

    Example:
        >>> code_span("a`b")
        '``a`b``'
        >>> code_span("`x")
        '`` `x ``'
    """
    longest = max((len(run) for run in _BACKTICK_RUN.findall(content)), default=0)
    fence = "`" * (longest + 1)
    padded = (
        content.startswith("`")
        or content.endswith("`")
        or (content.startswith(" ") and content.endswith(" ") and content.strip(" "))
    )
    if padded:
        content = f" {content} "
    return f"{fence}{content}{fence}"


def fenced(info: str, body: str) -> str:
    """Serialize a fenced code block with the given info string.

    The fence grows past any backtick fence found at a line start of the
    body, so the body can never close the block early.
    """
    longest = max((len(m.group(1)) for m in _FENCE_LINE.finditer(body)), default=0)
    fence = "`" * max(3, longest + 1)
    if body and not body.endswith("\n"):
        body += "\n"
    return f"{fence}{info}\n{body}{fence}\n"
