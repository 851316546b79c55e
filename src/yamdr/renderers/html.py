"""HTML renderer over extended events.

Standard tokens are serialized by markdown-it's own HTML renderer. Custom
events become placeholder tokens whose render rule calls
``block.to_html()``, so custom blocks sit inside the token stream and
paragraph structure around inline expressions is kept. Separators are
zero-width and External blocks render as nothing.

Thread Safety:
    A render builds its token list locally. Renderer instances hold only
    the parser configuration and may be shared.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from yamdr.events import Custom, External, Separator, Standard
from yamdr.stringbuilder import StringBuilder
from yamdr.tokenizer import custom_token, get_parser

if TYPE_CHECKING:
    from collections.abc import Iterable

    from markdown_it import MarkdownIt
    from markdown_it.token import Token

    from yamdr.config import RenderOptions
    from yamdr.events import ExtendedEvent

STYLE = """
    html {
      font-family: sans-serif;
      font-size: 16px;
      line-height: 1.5;
    }
    h1 {
      text-decoration: underline;
    }
    td {
      padding: 8px 12px;
    }
    code {
      background-color: #dcdcdc;
      padding: 0px 4px;
      border-radius: 4px;
    }
    div.script > pre {
      background-color: #dcdcdc;
      padding: 20px;
      border-radius: 4px;
      overflow-x: auto;
      font-size: 12px;
    }
    .script-output {
      font-weight: bold;
    }
    .content {
      max-width: 1000px;
      margin: auto;
    }
    .error {
      background-color: red;
      padding: 10px;
    }
    pre {
      overflow-x: auto;
      line-height: 1;
      font-size: 0.85em;
      padding: 5px 0px;
    }
    div.codeblock > pre {
      white-space: pre;
      padding: 10px 0px;
    }
    div.codeblock::before {
      content: attr(data-file);
      font-family: monospace;
      display: block;
      margin-bottom: 2px;
    }
    div.codeblock > pre > code {
      display: block;
      margin-left: 2em;
    }
    div.codeblock > pre > code.numbered {
      margin-left: 0em;
    }
    code.numbered > span::before {
      content: attr(data-linenumber);
      text-align: right;
      min-width: 3em;
      padding-right: 1em;
      display: inline-block;
    }
"""


class HtmlRenderer:
    """Render extended events to an HTML fragment.

    Usage:
        >>> from yamdr import parse_markdown
        >>> HtmlRenderer().render(parse_markdown("# Hi"))
        '<h1>Hi</h1>\\n'
    """

    __slots__ = ("_md",)

    def __init__(self, md: MarkdownIt | None = None) -> None:
        self._md = md if md is not None else get_parser()

    def render(self, events: Iterable[ExtendedEvent]) -> str:
        tokens: list[Token] = []
        for event in events:
            match event:
                case Standard(token=token):
                    tokens.append(token)
                case Custom(block=block, lineno=lineno):
                    tokens.append(custom_token(block, lineno=lineno))
                case Separator() | External():
                    continue
        return self._md.renderer.render(tokens, self._md.options, {})


def render_page(body: str, options: RenderOptions) -> str:
    """Wrap an HTML fragment in a standalone page with the stylesheet."""
    sb = StringBuilder()
    sb.append_line("<!DOCTYPE html>")
    sb.append_line("<html>")
    sb.append_line("<head>")
    sb.append_line('<meta charset="utf-8">')
    sb.append("<style>").append(STYLE).append_line("</style>")
    if options.additional_head:
        sb.append_line(options.additional_head)
    sb.append_line("</head>")
    sb.append_line("<body>")
    if options.additional_body:
        sb.append_line(options.additional_body)
    sb.append_line('<div class="content">')
    sb.append(body)
    sb.append_line("</div>")
    sb.append_line("</body>")
    sb.append_line("</html>")
    return sb.build()
