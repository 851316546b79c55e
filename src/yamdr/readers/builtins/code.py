"""Code blocks with file name, language and line numbers.

Header fields:
    filename: Shown above the code; turns line numbers on by default
    language: Highlighting language
    numbers: Show line numbers (default: true when filename is set)
    numbers_start_at: First line number (default 1)

Example:
    ```{"t":"Code","filename":"app.py","language":"python"}
    print("hello")
    ```
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from yamdr.errors import BlockReadFailure
from yamdr.header import BlockHeader
from yamdr.highlighting import highlight
from yamdr.readers.protocol import BlockOnlyReader
from yamdr.stringbuilder import StringBuilder
from yamdr.utils.html import hide_with_title, html_escape

CODE_TAG = "Code"


@dataclass(frozen=True, slots=True)
class CodeBlock:
    header: BlockHeader
    code: str
    filename: str | None = None
    language: str = ""
    numbered: bool = False
    start: int = 1

    inline: ClassVar[bool] = False

    def to_html(self) -> str:
        sb = StringBuilder()
        data_file = f' data-file="{html_escape(self.filename)}"' if self.filename else ""
        sb.append(f'<div class="codeblock"{data_file}>')
        highlighted = highlight(self.code, self.language, show_linenos=self.numbered)
        if highlighted is not None:
            sb.append(highlighted)
        else:
            language = f" language-{html_escape(self.language)}" if self.language else ""
            numbered = ' class="numbered"' if self.numbered else ""
            sb.append(f'<pre class="code{language}"><code{numbered}>')
            for number, line in enumerate(self.code.splitlines(), start=self.start):
                if self.numbered:
                    sb.append(
                        f'<span class="line" data-linenumber="{number}">{html_escape(line)}</span>\n'
                    )
                else:
                    sb.append_line(html_escape(line))
            sb.append("</code></pre>")
        sb.append("</div>")
        html = sb.build()
        title = self.header.get_str("hidden_title")
        return hide_with_title(title, html) if title else html

    def to_markdown(self) -> str:
        return self.header.to_fence(self.code)


class CodeBlockReader(BlockOnlyReader):
    """Reads ``Code`` blocks."""

    __slots__ = ()

    def can_read_block(self, header: BlockHeader) -> bool:
        return header.tag == CODE_TAG

    def read_block(self, header: BlockHeader, body: str) -> CodeBlock:
        filename = header.get_str("filename")
        numbered = header.get("numbers", filename is not None)
        if not isinstance(numbered, bool):
            raise BlockReadFailure("'numbers' must be true or false", CODE_TAG)
        start = header.get("numbers_start_at", 1)
        if not isinstance(start, int) or isinstance(start, bool):
            raise BlockReadFailure("'numbers_start_at' must be an integer", CODE_TAG)
        return CodeBlock(
            header,
            body,
            filename=filename,
            language=header.get_str("language") or "",
            numbered=numbered,
            start=start,
        )
