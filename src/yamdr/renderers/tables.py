"""Table serialization shared by table-producing custom blocks."""

from __future__ import annotations

from collections.abc import Sequence

from yamdr.stringbuilder import StringBuilder
from yamdr.utils.html import html_escape


def table_html(head: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """Render a header row and body rows as an HTML table."""
    sb = StringBuilder()
    sb.append("<table><thead><tr>")
    for cell in head:
        sb.append(f"<th>{html_escape(cell)}</th>")
    sb.append("</tr></thead><tbody>")
    for row in rows:
        sb.append("<tr>")
        for cell in row:
            sb.append(f"<td>{html_escape(cell)}</td>")
        sb.append("</tr>")
    sb.append("</tbody></table>")
    return sb.build()


def _markdown_cell(text: str) -> str:
    return " ".join(text.splitlines()).replace("|", "\\|")


def table_markdown(head: Sequence[str], rows: Sequence[Sequence[str]]) -> list[str]:
    """Render a GFM pipe table, one string per line."""

    def line(cells: Sequence[str]) -> str:
        return "| " + " | ".join(_markdown_cell(cell) for cell in cells) + " |"

    return [line(head), "|" + "---|" * len(head), *(line(row) for row in rows)]
