"""
themecraft - design-token theme engine.

Builds resolved UI themes from base presets, customization patches and
display variants, validates them for structure and accessibility, and
flattens them into CSS custom properties.
"""

from __future__ import annotations

import re
from importlib.metadata import version as _metadata_version
from pathlib import Path as _Path

# Re-export commonly used types for convenience
from .core import ir
from .core.builder import ThemeBuilder, create_theme_builder, quick_theme
from .core.errors import (
    CompositionError,
    ThemeConfigError,
    ThemecraftError,
    ThemeIntegrityError,
    ThemeValidationFailedError,
)
from .core.ir import BuiltTheme, ThemeCustomization, ThemeVariant, ValidationResult


def _get_version() -> str:
    """Get version from pyproject.toml (editable) or importlib.metadata (installed)."""
    pyproject = _Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        content = pyproject.read_text()
        if match := re.search(r'^version\s*=\s*["\']([^"\']+)["\']', content, re.MULTILINE):
            return match.group(1)

    try:
        return _metadata_version("themecraft")
    except Exception:
        return "0.0.0"


__version__ = _get_version()

__all__ = [
    "__version__",
    "ir",
    "BuiltTheme",
    "ThemeBuilder",
    "ThemeCustomization",
    "ThemeVariant",
    "ValidationResult",
    "create_theme_builder",
    "quick_theme",
    "ThemecraftError",
    "CompositionError",
    "ThemeConfigError",
    "ThemeIntegrityError",
    "ThemeValidationFailedError",
]
