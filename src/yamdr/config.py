"""ContextVar-based render configuration for yamdr.

RenderOptions is an immutable value passed to every pipeline entry point.
When a call does not pass options explicitly, the ambient options of the
current context are used.

Thread Safety:
    ContextVars are thread-local by design. Each thread has independent storage,
    so no locks are needed.

Usage:
    from yamdr import render_markdown
    from yamdr.config import Format, RenderOptions, render_options_context

    html = render_markdown(source, RenderOptions(standalone=True))

    with render_options_context(RenderOptions(format=Format.MARKDOWN)):
        canonical = render_markdown(source)

"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any


class Format(Enum):
    """Output format of a document-wide render."""

    HTML = "html"
    MARKDOWN = "markdown"


class ErrorPolicy(Enum):
    """How block-level failures are handled.

    FAIL_FAST propagates the first error and no document is returned.
    BEST_EFFORT replaces the failing block with an error marker and keeps going.
    """

    FAIL_FAST = "fail_fast"
    BEST_EFFORT = "best_effort"


@dataclass(frozen=True, slots=True)
class RenderOptions:
    """Immutable render configuration.

    Attributes:
        format: Output format for render_markdown
        standalone: Wrap HTML output in a complete page with the stylesheet
        additional_head: Extra HTML inserted into <head> (standalone only)
        additional_body: Extra HTML appended to <body> (standalone only)
        error_policy: FAIL_FAST or BEST_EFFORT

    """

    format: Format = Format.HTML
    standalone: bool = False
    additional_head: str | None = None
    additional_body: str | None = None
    error_policy: ErrorPolicy = ErrorPolicy.FAIL_FAST

    @classmethod
    def from_dict(cls, config_dict: Mapping[str, Any]) -> RenderOptions:
        """Create RenderOptions from a dictionary.

        Enum fields accept their string values. Unknown keys are ignored.

        Example:
            >>> options = RenderOptions.from_dict({"format": "markdown", "x": 1})
            >>> options.format
            <Format.MARKDOWN: 'markdown'>

        """
        valid_fields = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        if "format" in filtered:
            filtered["format"] = Format(filtered["format"])
        if "error_policy" in filtered:
            filtered["error_policy"] = ErrorPolicy(filtered["error_policy"])
        return cls(**filtered)

    @property
    def best_effort(self) -> bool:
        return self.error_policy is ErrorPolicy.BEST_EFFORT


# Module-level default options (reused, never recreated)
_DEFAULT_OPTIONS: RenderOptions = RenderOptions()

_render_options: ContextVar[RenderOptions] = ContextVar(
    "render_options",
    default=_DEFAULT_OPTIONS,
)


def get_render_options() -> RenderOptions:
    """Get the ambient render options of the current context."""
    return _render_options.get()


def set_render_options(options: RenderOptions) -> None:
    """Set the ambient render options for the current context."""
    _render_options.set(options)


def reset_render_options() -> None:
    """Reset the ambient render options to the defaults."""
    _render_options.set(_DEFAULT_OPTIONS)


@contextmanager
def render_options_context(options: RenderOptions) -> Iterator[None]:
    """Context manager for temporary option changes.

    Restores the previous options even if an exception is raised.

    Example:
        >>> with render_options_context(RenderOptions(standalone=True)):
        ...     get_render_options().standalone
        True

    """
    previous = _render_options.get()
    _render_options.set(options)
    try:
        yield
    finally:
        _render_options.set(previous)


def resolve_options(options: RenderOptions | None) -> RenderOptions:
    """Return options, falling back to the ambient ones."""
    return options if options is not None else _render_options.get()


__all__ = [
    "ErrorPolicy",
    "Format",
    "RenderOptions",
    "get_render_options",
    "render_options_context",
    "reset_render_options",
    "resolve_options",
    "set_render_options",
]
