"""
Error types for arklens analysis and configuration.

Lookup misses (no alias, no declaration, unknown subtype path) are never
errors; they are reported as empty or absent results. Only violated caller
preconditions and broken configuration raise.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class ArklensError(Exception):
    """Base exception for all arklens errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class PreconditionError(ArklensError, ValueError):
    """
    Raised when a caller passes input outside an operation's domain.

    Examples:
    - Offset past the end of the text
    - Negative offset
    - Occurrence range that is inverted
    """

    pass


class OffsetError(PreconditionError):
    """Raised when an offset does not fall inside the text it refers to."""

    pass


class ConfigError(ArklensError):
    """
    Raised when configuration cannot be loaded.

    Examples:
    - Malformed TOML
    - A list setting given as a string
    - An invalid regular expression for injection call sites
    """

    pass


@dataclass
class ErrorContext:
    """
    Context information for an error.

    Attributes:
        offset: Character offset the error refers to
        length: Length of the text the offset was checked against
        file: Optional file the text came from
        snippet: Optional text surrounding the offset
    """

    offset: int | None = None
    length: int | None = None
    file: Path | None = None
    snippet: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "file.ts@120 (text length 80)"
        """
        location = str(self.file) if self.file else "<text>"
        if self.offset is not None:
            location += f"@{self.offset}"
        if self.length is not None:
            location += f" (text length {self.length})"
        if self.snippet:
            return f"{location}\n    {self.snippet}"
        return location


def make_offset_error(
    message: str,
    offset: int,
    length: int,
    file: Path | None = None,
) -> OffsetError:
    """
    Helper to create an OffsetError with context.

    Args:
        message: Error description
        offset: The offending offset
        length: Length of the text the offset should index into
        file: Optional source file path

    Returns:
        OffsetError with context attached
    """
    context = ErrorContext(offset=offset, length=length, file=file)
    return OffsetError(message, context)


def make_config_error(message: str, file: Path | None = None) -> ConfigError:
    """
    Helper to create a ConfigError with optional file context.

    Args:
        message: Error description
        file: Optional config file path

    Returns:
        ConfigError with context if a file is given
    """
    if file:
        return ConfigError(message, ErrorContext(file=file))
    return ConfigError(message)


def check_offset(offset: int, text: str, what: str = "offset") -> None:
    """Raise OffsetError unless ``0 <= offset <= len(text)``."""
    if offset < 0 or offset > len(text):
        raise make_offset_error(
            f"{what} {offset} is outside the text (valid range 0..{len(text)})",
            offset,
            len(text),
        )
