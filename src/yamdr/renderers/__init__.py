"""yamdr renderers.

Renderers serialize extended events into an output format.

Available Renderers:
- HtmlRenderer: markdown-it HTML plus custom block HTML
- MarkdownRenderer: canonical Markdown that reads back to the same structure

Thread Safety:
All per-render state is local to each render() call.

"""

from yamdr.renderers.html import STYLE, HtmlRenderer, render_page
from yamdr.renderers.markdown import MarkdownRenderer
from yamdr.renderers.protocol import Renderer

__all__ = ["STYLE", "HtmlRenderer", "MarkdownRenderer", "Renderer", "render_page"]
