"""Exception classes for yamdr.

Provides standardized exceptions for error handling throughout yamdr.
Everything raised on purpose by the pipeline derives from YamdrError.
"""

from __future__ import annotations


def _located(message: str, tag: str | None, lineno: int | None) -> str:
    location = ""
    if tag:
        location = f"{tag} block"
    if lineno is not None:
        location = f"{location} at line {lineno}" if location else f"line {lineno}"
    return f"{location}: {message}" if location else message


class YamdrError(Exception):
    """Base exception for all yamdr errors.

    Subclass this for specific error categories.
    """

    pass


class MalformedHeader(YamdrError):
    """A fence info string is not a block header.

    Raised by header parsing when the info string is not a mapping with a
    string ``t`` key. The classifier always catches it and keeps the fence
    as an ordinary code block.
    """

    def __init__(self, info: str, reason: str = "not a block header") -> None:
        self.info = info
        self.reason = reason
        super().__init__(f"{reason}: {info!r}")


class UnknownBlockType(YamdrError):
    """No registered reader claims a block header tag."""

    def __init__(self, tag: str, lineno: int | None = None) -> None:
        """Initialize unknown block type error.

        Args:
            tag: Header tag nobody claimed
            lineno: Line of the opening fence (1-indexed, optional)
        """
        self.tag = tag
        self.lineno = lineno
        super().__init__(_located(f"unknown block type {tag!r}", None, lineno))


class BlockReadFailure(YamdrError):
    """A reader failed to turn a block body into a custom block.

    Carries the header tag and the line of the opening fence so the
    message points at the offending block in the source document.
    """

    def __init__(
        self,
        message: str,
        tag: str | None = None,
        lineno: int | None = None,
    ) -> None:
        """Initialize block read failure.

        Args:
            message: Description of the failure (compile, parse or runtime)
            tag: Header tag of the failing block
            lineno: Line of the opening fence (1-indexed)
        """
        self.message = message
        self.tag = tag
        self.lineno = lineno
        super().__init__(_located(message, tag, lineno))

    def with_location(self, tag: str | None, lineno: int | None) -> BlockReadFailure:
        """Return a copy located at the given block, keeping known values."""
        return BlockReadFailure(
            self.message,
            tag=self.tag or tag,
            lineno=self.lineno if self.lineno is not None else lineno,
        )


class NestedExternalBlock(YamdrError):
    """An External block appears inside a list, quote or other container.

    External blocks are handed to an outside owner as whole top-level
    elements, so they cannot be nested.
    """

    def __init__(self, lineno: int | None = None) -> None:
        self.lineno = lineno
        super().__init__(
            _located("External blocks must be top-level elements", "External", lineno)
        )


class ScriptError(YamdrError):
    """Compilation or runtime failure inside the script engine.

    The message starts with "compilation error:" or "runtime error:".
    Readers wrap it into BlockReadFailure.
    """

    pass


class RenderError(YamdrError):
    """Error during output rendering.

    Raised when a renderer receives a token it has no serialization for.
    """

    pass


__all__ = [
    "BlockReadFailure",
    "MalformedHeader",
    "NestedExternalBlock",
    "RenderError",
    "ScriptError",
    "UnknownBlockType",
    "YamdrError",
]
