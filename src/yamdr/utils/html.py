"""HTML helpers shared by renderers and custom blocks."""

from __future__ import annotations

_ESCAPE_TABLE = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
    }
)


def html_escape(text: str) -> str:
    """Escape text for HTML body and attribute contexts.

    Single quotes are left alone; every attribute this package emits
    is double-quoted.

    Example:
        >>> html_escape('<a href="x">&</a>')
        '&lt;a href=&quot;x&quot;&gt;&amp;&lt;/a&gt;'
    """
    return text.translate(_ESCAPE_TABLE)


def hide_with_title(title: str, html: str) -> str:
    """Wrap rendered HTML in a collapsed ``<details>`` element."""
    return f"<details><summary>{html_escape(title)}</summary>{html}</details>"
