"""Error marker substituted for failing blocks under the best-effort policy."""

from __future__ import annotations

from dataclasses import dataclass

from yamdr.utils.html import html_escape


@dataclass(frozen=True, slots=True)
class ErrorMarker:
    """A failed block or inline expression.

    HTML and Markdown output are the same raw HTML, so the marker reads
    back as an HTML block (or inline HTML) and renders identically in
    both formats.
    """

    message: str
    inline: bool = False

    def to_html(self) -> str:
        # Collapsed whitespace keeps the HTML block from ending early.
        text = html_escape(" ".join(self.message.split()))
        if self.inline:
            return f'<span class="error">{text}</span>'
        return f'<div class="error">{text}</div>\n'

    def to_markdown(self) -> str:
        return self.to_html()
