"""
Error types for theme composition, validation, and persistence.

Composition and the colour utilities never raise for malformed tokens;
they fall back and leave judgement to validation. The exceptions below are
reserved for the few places where the engine must stop: strict-mode
builds, corrupted persisted themes, and unusable configuration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .ir.validation import ValidationResult


class ThemecraftError(Exception):
    """Base exception for all themecraft errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        self.message = message
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            details = ", ".join(f"{key}={value!r}" for key, value in self.context.items())
            return f"{self.message} ({details})"
        return self.message


class CompositionError(ThemecraftError):
    """
    Raised when a composition request cannot be dispatched.

    Examples:
    - Unknown composition mode
    """

    pass


class ThemeValidationFailedError(ThemecraftError):
    """
    Raised by strict-mode builds when the built theme is invalid.

    The message joins every validation error message; the full result is
    available on ``result``.
    """

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = ", ".join(error.message for error in result.errors)
        super().__init__(f"Theme validation failed: {messages}")


class ThemeIntegrityError(ThemecraftError):
    """
    Raised when a serialized theme cannot be trusted.

    Examples:
    - Checksum does not match the embedded theme
    - Envelope missing required fields
    """

    pass


class ThemeConfigError(ThemecraftError):
    """
    Raised when a configuration or customization file cannot be used.

    Examples:
    - File not found or unreadable
    - YAML/TOML syntax errors
    - Values that fail model validation
    """

    pass
