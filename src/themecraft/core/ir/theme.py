"""
Theme IR types: metadata, built themes, and customization patches.

A ``BuiltTheme`` is the resolved output of the composition pipeline. Token
categories are kept as JSON-like mappings because each category is an open
set of named entries (``"2xl"``, ``"DEFAULT"``, ``"cardForeground"``, ...);
the model fixes which categories exist and how they are spelled on the wire.

A ``ThemeCustomization`` is the overlay input. Every field is optional and
"set-ness" is significant: an absent field means "no change", a present
field is applied. ``to_overlay()`` exposes exactly the fields a caller set.
"""

from __future__ import annotations

import copy
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# =============================================================================
# Enums
# =============================================================================


class ThemeVariant(StrEnum):
    """Named density/accessibility profiles."""

    DEFAULT = "default"
    COMPACT = "compact"
    COMFORTABLE = "comfortable"
    HIGH_CONTRAST = "high-contrast"
    CUSTOM = "custom"


class CompositionMode(StrEnum):
    """How an overlay is combined with a base theme."""

    MERGE = "merge"
    OVERRIDE = "override"
    EXTEND = "extend"


class ColorConflictStrategy(StrEnum):
    """How conflicting colors are resolved during a merge."""

    AUTO = "auto"
    PREFER_BASE = "prefer-base"
    PREFER_OVERRIDE = "prefer-override"
    BLEND = "blend"


# Required semantic palettes, in output order
SEMANTIC_COLOR_GROUPS: tuple[str, ...] = (
    "primary",
    "secondary",
    "destructive",
    "success",
    "warning",
)

# Flat surface colors that variants adjust alongside the semantic groups
SURFACE_COLOR_KEYS: tuple[str, ...] = (
    "background",
    "foreground",
    "card",
    "cardForeground",
    "popover",
    "popoverForeground",
)

# Standard text pairs checked for contrast: (foreground key, background key)
TEXT_CONTRAST_PAIRS: tuple[tuple[str, str], ...] = (
    ("foreground", "background"),
    ("cardForeground", "card"),
    ("popoverForeground", "popover"),
    ("mutedForeground", "muted"),
    ("accentForeground", "accent"),
)

REQUIRED_CATEGORIES: tuple[str, ...] = ("colors", "typography", "spacing", "motion", "breakpoints")


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(UTC).isoformat()


# =============================================================================
# Built theme
# =============================================================================


class ThemeMeta(BaseModel):
    """Provenance of a built theme."""

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, alias_generator=to_camel, extra="allow"
    )

    name: str | None = Field(default=None, description="Human-readable theme name")
    version: str | None = Field(default=None, description="Theme version string")
    description: str | None = None
    author: str | None = None
    base_theme: str | None = Field(default=None, description="Registry name the theme extends")
    variant: ThemeVariant = Field(default=ThemeVariant.DEFAULT, description="Applied variant")
    composition_mode: CompositionMode | None = Field(
        default=None, description="Mode used for the last composition step"
    )
    customizations: dict[str, Any] = Field(
        default_factory=dict, description="Customization diff that produced the theme"
    )
    plugins: list[str] = Field(default_factory=list, description="Extension names applied")
    created_at: str | None = Field(default=None, description="Set once at instantiation")
    updated_at: str | None = Field(default=None, description="Refreshed on every step")


class BuiltTheme(BaseModel):
    """A fully resolved theme: token categories plus metadata."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    meta: ThemeMeta | None = None
    colors: dict[str, Any] | None = None
    typography: dict[str, Any] | None = None
    spacing: dict[str, Any] | None = None
    motion: dict[str, Any] | None = None
    breakpoints: dict[str, Any] | None = None
    radius: str | dict[str, Any] | None = None
    z_index: dict[str, Any] | None = Field(default=None, alias="zIndex")
    shadows: dict[str, Any] | None = None
    animations: dict[str, Any] | None = None
    borders: dict[str, Any] | None = None

    def to_tokens(self) -> dict[str, Any]:
        """Plain JSON-like mapping using wire names, absent categories dropped."""
        return copy.deepcopy(self.model_dump(by_alias=True, exclude_none=True, mode="json"))

    @classmethod
    def from_tokens(cls, tokens: dict[str, Any]) -> BuiltTheme:
        """Build a model from a JSON-like mapping (wire or field names)."""
        return cls.model_validate(copy.deepcopy(dict(tokens)))


# =============================================================================
# Customizations
# =============================================================================


class _Patch(BaseModel):
    """Base for customization patches: camelCase on the wire, extras kept."""

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, alias_generator=to_camel, extra="allow"
    )


class SurfaceColorCustomization(_Patch):
    """Surface colors set together (page, card, popover)."""

    background: str | None = None
    foreground: str | None = None
    card: str | None = None
    card_foreground: str | None = None
    popover: str | None = None
    popover_foreground: str | None = None


class BorderColorCustomization(_Patch):
    """Border colors; ``default`` maps onto the flat ``border`` color."""

    default: str | None = None
    input: str | None = None
    ring: str | None = None


class ColorPairCustomization(_Patch):
    """A background/foreground pair such as ``muted`` or ``accent``."""

    background: str | None = None
    foreground: str | None = None


class ColorCustomization(_Patch):
    """Color overrides.

    A semantic group given as a plain color string is treated as the group's
    new ``DEFAULT``; a mapping patches individual keys of the group.
    """

    primary: str | dict[str, Any] | None = None
    secondary: str | dict[str, Any] | None = None
    destructive: str | dict[str, Any] | None = None
    success: str | dict[str, Any] | None = None
    warning: str | dict[str, Any] | None = None

    background: str | None = None
    foreground: str | None = None
    card: str | None = None
    card_foreground: str | None = None
    popover: str | None = None
    popover_foreground: str | None = None

    surface: SurfaceColorCustomization | None = None
    border: BorderColorCustomization | str | None = None
    muted: ColorPairCustomization | str | None = None
    accent: ColorPairCustomization | str | None = None


class TypographyCustomization(_Patch):
    font_family: str | None = None
    font_size: dict[str, str] | None = None
    font_weight: dict[str, int | str] | None = None
    line_height: dict[str, float | str] | None = None
    letter_spacing: dict[str, str] | None = None


class MotionCustomization(_Patch):
    duration: dict[str, str] | None = None
    easing: dict[str, str] | None = None


class AnimationCustomization(_Patch):
    """Opaque animation tokens, merged like any other category."""

    duration: dict[str, str] | None = None
    easing: dict[str, str] | None = None
    keyframes: dict[str, Any] | None = None
    config: dict[str, Any] | None = None
    motion: dict[str, Any] | None = None


class ThemeCustomization(BaseModel):
    """Partial theme patch used as the overlay input to composition."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    colors: ColorCustomization | None = None
    typography: TypographyCustomization | None = None
    spacing: dict[str, str] | None = None
    motion: MotionCustomization | None = None
    breakpoints: dict[str, str] | None = None
    radius: str | dict[str, str] | None = None
    shadows: dict[str, str] | None = None
    z_index: dict[str, int] | None = Field(default=None, alias="zIndex")
    animations: AnimationCustomization | None = None
    borders: dict[str, Any] | None = None

    def to_overlay(self) -> dict[str, Any]:
        """The fields a caller actually set, with wire names.

        Categories explicitly set to ``None`` are dropped: at category level
        ``None`` means "no change".
        """
        dumped = self.model_dump(by_alias=True, exclude_unset=True, mode="json")
        return {key: value for key, value in dumped.items() if value is not None}

    def is_empty(self) -> bool:
        return not self.to_overlay()

    @classmethod
    def from_overlay(cls, overlay: dict[str, Any]) -> ThemeCustomization:
        return cls.model_validate(copy.deepcopy(dict(overlay)))


# =============================================================================
# Persisted form
# =============================================================================

SERIALIZATION_VERSION = "1.0.0"


class SerializedTheme(BaseModel):
    """Envelope for a persisted theme with an integrity checksum."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    version: str = Field(default=SERIALIZATION_VERSION)
    theme: dict[str, Any]
    checksum: str
    exported_at: str = Field(alias="exportedAt")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
