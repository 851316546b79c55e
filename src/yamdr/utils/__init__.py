"""Utility modules for yamdr.

Provides:
- html: html_escape, hide_with_title for HTML fragments
- text: code_span, fenced for Markdown serialization
- logger: get_logger for logging
"""

from yamdr.utils.html import hide_with_title, html_escape
from yamdr.utils.logger import get_logger
from yamdr.utils.text import code_span, fenced

__all__ = [
    "code_span",
    "fenced",
    "get_logger",
    "hide_with_title",
    "html_escape",
]
