"""Syntax highlighting protocol and injection for Code blocks.

When yamdr[syntax] is installed, Rosettes is used automatically.
Without a highlighter, Code blocks render escaped source with their own
line-number spans.

Usage:
    from yamdr.highlighting import set_highlighter

    def my_highlighter(code: str, language: str) -> str:
        return f'<pre class="language-{language}"><code>{code}</code></pre>'

    set_highlighter(my_highlighter)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol


class Highlighter(Protocol):
    """Protocol for syntax highlighters.

    Contract:
        - MUST return HTML with code entities escaped
        - MUST use CSS classes (not inline styles)
        - ``supports_language`` MUST NOT raise
    """

    def highlight(self, code: str, language: str, *, show_linenos: bool = False) -> str:
        """Highlight code and return HTML markup."""
        ...

    def supports_language(self, language: str) -> bool: ...


# Support for simple callable-based highlighters
type SimpleHighlighter = Callable[[str, str], str]

_highlighter: Highlighter | SimpleHighlighter | None = None
_tried_rosettes: bool = False


def set_highlighter(highlighter: Highlighter | SimpleHighlighter | None) -> None:
    """Set the global syntax highlighter.

    Args:
        highlighter: A Highlighter implementation, or a function taking
            (code, language) and returning HTML. Pass None to clear it;
            Rosettes is not probed again after an explicit None.
    """
    global _highlighter, _tried_rosettes
    _highlighter = highlighter
    _tried_rosettes = True


def reset_highlighter() -> None:
    """Forget any configured highlighter and probe for Rosettes again."""
    global _highlighter, _tried_rosettes
    _highlighter = None
    _tried_rosettes = False


def _try_import_rosettes() -> bool:
    """Try to import and configure the Rosettes highlighter."""
    global _highlighter, _tried_rosettes

    if _tried_rosettes:
        return _highlighter is not None

    _tried_rosettes = True

    try:
        import rosettes  # type: ignore[import-not-found]
    except ImportError:
        return False

    class RosettesHighlighter:
        """Rosettes-based highlighter implementing the Highlighter protocol."""

        def highlight(self, code: str, language: str, *, show_linenos: bool = False) -> str:
            result: str = rosettes.highlight(code, language=language, show_linenos=show_linenos)
            return result

        def supports_language(self, language: str) -> bool:
            result: bool = rosettes.supports_language(language)
            return result

    _highlighter = RosettesHighlighter()
    return True


def get_highlighter() -> Highlighter | SimpleHighlighter | None:
    """Get the current highlighter, loading Rosettes on first use."""
    if _highlighter is None:
        _try_import_rosettes()
    return _highlighter


def highlight(code: str, language: str, *, show_linenos: bool = False) -> str | None:
    """Highlight code with the configured highlighter.

    Returns:
        Highlighted HTML, or None when no highlighter handles the language
    """
    highlighter = get_highlighter()
    if highlighter is None or not language:
        return None
    if hasattr(highlighter, "highlight") and callable(highlighter.highlight):
        if not highlighter.supports_language(language):
            return None
        return highlighter.highlight(code, language, show_linenos=show_linenos)
    return highlighter(code, language)


def has_highlighter() -> bool:
    """Check if a syntax highlighter is available."""
    return get_highlighter() is not None
