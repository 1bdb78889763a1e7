"""
Variant transforms: density and accessibility profiles.

A variant rescales a built theme's numbers: spacing and type sizes,
font weights and line heights, color saturation and lightness, animation
speed, radii and border widths, and shadow intensity. The high-contrast
variant additionally forces AAA-readable text, raises overlay layers, and
switches animations off.

Only ``rem`` lengths and ``ms`` durations are rescaled; other units pass
through unchanged. Values that fail to parse are returned as-is.
"""

from __future__ import annotations

import copy
import logging
import re
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from .color import Hsla, hsla_to_rgba, js_round, parse_color, to_hex, to_hsl
from .composition import deep_merge, ensure_accessible_colors, like_input, to_token_dict
from .ir.color import WCAGLevel
from .ir.theme import (
    SEMANTIC_COLOR_GROUPS,
    SURFACE_COLOR_KEYS,
    TEXT_CONTRAST_PAIRS,
    BuiltTheme,
    ThemeVariant,
    utc_timestamp,
)
from .ir.variant import (
    BorderProfile,
    ColorProfile,
    MotionProfile,
    ShadowProfile,
    SpacingProfile,
    TypographyProfile,
    VariantProfile,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Profiles
# =============================================================================

VARIANT_PROFILES: dict[ThemeVariant, VariantProfile] = {
    ThemeVariant.DEFAULT: VariantProfile(),
    ThemeVariant.COMPACT: VariantProfile(
        spacing=SpacingProfile(multiplier=0.75),
        typography=TypographyProfile(size_multiplier=0.875, line_height_multiplier=0.9),
        motion=MotionProfile(speed_multiplier=1.25),
        borders=BorderProfile(width_multiplier=0.75, radius_multiplier=0.75),
        shadows=ShadowProfile(intensity_multiplier=0.75, blur_multiplier=0.75),
    ),
    ThemeVariant.COMFORTABLE: VariantProfile(
        spacing=SpacingProfile(multiplier=1.25),
        typography=TypographyProfile(size_multiplier=1.125, line_height_multiplier=1.1),
        motion=MotionProfile(speed_multiplier=0.85),
        borders=BorderProfile(width_multiplier=1.25, radius_multiplier=1.25),
        shadows=ShadowProfile(intensity_multiplier=1.25, blur_multiplier=1.25),
    ),
    ThemeVariant.HIGH_CONTRAST: VariantProfile(
        spacing=SpacingProfile(multiplier=1.1),
        typography=TypographyProfile(
            size_multiplier=1.05, line_height_multiplier=1.2, font_weight_adjustment=100
        ),
        colors=ColorProfile(
            contrast_multiplier=1.5, saturation_multiplier=1.2, brightness_adjustment=0.1
        ),
        motion=MotionProfile(speed_multiplier=0.75, enable_animations=False),
        borders=BorderProfile(width_multiplier=1.5, radius_multiplier=0.75),
        shadows=ShadowProfile(intensity_multiplier=1.5, blur_multiplier=0.5),
    ),
}

# Minimum layer numbers under the high-contrast variant
HIGH_CONTRAST_LAYERS: dict[str, int] = {"modal": 2000, "popover": 1500, "tooltip": 2500}

# Contrast multipliers above this force the AAA text pass
AAA_CONTRAST_TRIGGER = 1.2


def _coerce_variant(variant: ThemeVariant | str) -> ThemeVariant | None:
    try:
        return ThemeVariant(variant)
    except ValueError:
        return None


def get_variant_profile(variant: ThemeVariant | str) -> VariantProfile:
    """Look up a named profile; unknown names fall back to the default profile."""
    resolved = _coerce_variant(variant)
    profile = VARIANT_PROFILES.get(resolved) if resolved else None
    if profile is None:
        if resolved != ThemeVariant.CUSTOM:
            logger.warning(
                f"Unknown variant '{variant}'. "
                f"Valid values: {', '.join(list_variants())}. Using default."
            )
        return VARIANT_PROFILES[ThemeVariant.DEFAULT]
    return profile


def list_variants() -> list[str]:
    return [variant.value for variant in VARIANT_PROFILES]


def resolve_profile(
    variant: ThemeVariant | str,
    custom_profile: VariantProfile | Mapping[str, Any] | None = None,
) -> VariantProfile:
    """The named profile with an optional custom profile merged over it."""
    profile = get_variant_profile(variant)
    if custom_profile is None:
        return profile
    if not isinstance(custom_profile, VariantProfile):
        custom_profile = VariantProfile.model_validate(dict(custom_profile))
    overrides = custom_profile.model_dump(exclude_unset=True)
    return VariantProfile.model_validate(deep_merge(profile.model_dump(), overrides))


# =============================================================================
# Numeric helpers
# =============================================================================

_LEADING_NUMBER = re.compile(r"^\s*(-?\d*\.?\d+)")
_RGBA_RE = re.compile(r"rgba\(([^)]+)\)")


def format_number(value: float) -> str:
    """Compact decimal form: 1.0 -> "1", 0.1875 -> "0.1875"."""
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def scale_length(value: Any, multiplier: float, units: tuple[str, ...] = ("rem",)) -> Any:
    """Multiply a CSS length carrying one of ``units``; anything else is returned unchanged."""
    if not isinstance(value, str) or multiplier == 1:
        return value
    unit = next((u for u in units if u in value), None)
    match = _LEADING_NUMBER.match(value)
    if unit is None or match is None:
        return value
    return f"{format_number(float(match.group(1)) * multiplier)}{unit}"


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


# =============================================================================
# Category transforms
# =============================================================================


def _transform_spacing(spacing: dict[str, Any], profile: SpacingProfile) -> dict[str, Any]:
    return {key: scale_length(value, profile.multiplier) for key, value in spacing.items()}


def _adjust_weight(weight: Any, adjustment: int) -> Any:
    if adjustment == 0:
        return weight
    if _is_number(weight):
        return max(100, min(900, int(weight) + adjustment))
    if isinstance(weight, str) and weight.isdigit():
        return str(max(100, min(900, int(weight) + adjustment)))
    return weight


def _transform_typography(
    typography: dict[str, Any], profile: TypographyProfile
) -> dict[str, Any]:
    result = dict(typography)
    font_size = result.get("fontSize")
    if isinstance(font_size, dict):
        result["fontSize"] = {
            key: scale_length(value, profile.size_multiplier) for key, value in font_size.items()
        }
    font_weight = result.get("fontWeight")
    if isinstance(font_weight, dict):
        result["fontWeight"] = {
            key: _adjust_weight(value, profile.font_weight_adjustment)
            for key, value in font_weight.items()
        }
    line_height = result.get("lineHeight")
    if isinstance(line_height, dict) and profile.line_height_multiplier != 1:
        result["lineHeight"] = {
            key: round(value * profile.line_height_multiplier, 4) if _is_number(value) else value
            for key, value in line_height.items()
        }
    return result


def adjust_color(value: Any, profile: ColorProfile) -> Any:
    """Scale saturation and shift lightness in HSL; unparseable values pass through."""
    color = parse_color(value)
    if color is None:
        return value
    hsl = to_hsl(color)
    saturation = min(100.0, hsl.s * profile.saturation_multiplier)
    lightness = max(0.0, min(100.0, hsl.l + profile.brightness_adjustment * 100))
    return to_hex(hsla_to_rgba(Hsla(hsl.h, saturation, lightness, hsl.a)))


def _transform_colors(colors: dict[str, Any], profile: ColorProfile) -> dict[str, Any]:
    result = copy.deepcopy(colors)
    if profile.contrast_multiplier != 1 or profile.saturation_multiplier != 1:
        for group_name in SEMANTIC_COLOR_GROUPS:
            group = result.get(group_name)
            if isinstance(group, dict):
                result[group_name] = {
                    key: adjust_color(value, profile) for key, value in group.items()
                }
        for key in SURFACE_COLOR_KEYS:
            if key in result:
                result[key] = adjust_color(result[key], profile)

    if profile.contrast_multiplier > AAA_CONTRAST_TRIGGER:
        result = ensure_accessible_colors(result, WCAGLevel.AAA, TEXT_CONTRAST_PAIRS)
    return result


def _scale_duration(value: Any, speed: float) -> Any:
    if not isinstance(value, str) or "ms" not in value or speed == 1:
        return value
    match = _LEADING_NUMBER.match(value)
    if match is None:
        return value
    return f"{js_round(float(match.group(1)) / speed)}ms"


def _transform_motion(motion: dict[str, Any], profile: MotionProfile) -> dict[str, Any]:
    result = dict(motion)
    duration = result.get("duration")
    if isinstance(duration, dict):
        if profile.enable_animations:
            result["duration"] = {
                key: _scale_duration(value, profile.speed_multiplier)
                for key, value in duration.items()
            }
        else:
            result["duration"] = {key: "0ms" for key in duration}
    return result


def _transform_radius(radius: Any, profile: BorderProfile) -> Any:
    if isinstance(radius, dict):
        return {
            key: scale_length(value, profile.radius_multiplier) for key, value in radius.items()
        }
    return scale_length(radius, profile.radius_multiplier)


def _transform_borders(borders: dict[str, Any], profile: BorderProfile) -> dict[str, Any]:
    return {
        key: scale_length(value, profile.width_multiplier, ("rem", "px"))
        if "width" in key.lower()
        else value
        for key, value in borders.items()
    }


def _scale_rgba_alpha(match: re.Match[str], intensity: float) -> str:
    parts = [part.strip() for part in match.group(1).split(",")]
    if len(parts) != 4:
        return match.group(0)
    try:
        alpha = float(parts[3])
    except ValueError:
        return match.group(0)
    scaled = min(1.0, alpha * intensity)
    return f"rgba({', '.join(parts[:3])}, {format_number(scaled)})"


def _transform_shadows(shadows: dict[str, Any], profile: ShadowProfile) -> dict[str, Any]:
    """Scale shadow strings.

    Zero intensity removes shadows. Stronger-but-tighter profiles scale the
    alpha of ``rgba(r, g, b, a)`` terms only; other color notations inside a
    shadow are left untouched.
    """
    intensity = profile.intensity_multiplier
    result = dict(shadows)
    for key, value in shadows.items():
        if key == "none" or not isinstance(value, str):
            continue
        if intensity == 0:
            result[key] = "none"
        elif intensity > 1 and profile.blur_multiplier < 1:
            result[key] = _RGBA_RE.sub(lambda m: _scale_rgba_alpha(m, intensity), value)
    return result


def _raise_layers(z_index: dict[str, Any] | None) -> dict[str, Any]:
    result = dict(z_index or {})
    for layer, minimum in HIGH_CONTRAST_LAYERS.items():
        current = result.get(layer)
        result[layer] = max(current, minimum) if _is_number(current) else minimum
    return result


# =============================================================================
# Public API
# =============================================================================


def apply_variant(
    theme: BuiltTheme | dict[str, Any],
    variant: ThemeVariant | str = ThemeVariant.DEFAULT,
    custom_profile: VariantProfile | Mapping[str, Any] | None = None,
) -> BuiltTheme | dict[str, Any]:
    """Apply a density/accessibility profile to a theme.

    Args:
        theme: Theme to transform (model or mapping).
        variant: Profile name; unknown names use the default profile.
        custom_profile: Knobs merged over the named profile.

    Returns:
        A new theme of the same kind as ``theme`` with ``meta.variant`` set.
    """
    resolved = _coerce_variant(variant) or ThemeVariant.DEFAULT
    profile = resolve_profile(variant, custom_profile)
    tokens = to_token_dict(theme)
    logger.debug(f"Applying variant '{resolved}'")

    if isinstance(tokens.get("spacing"), dict):
        tokens["spacing"] = _transform_spacing(tokens["spacing"], profile.spacing)
    if isinstance(tokens.get("typography"), dict):
        tokens["typography"] = _transform_typography(tokens["typography"], profile.typography)
    if isinstance(tokens.get("colors"), dict):
        tokens["colors"] = _transform_colors(tokens["colors"], profile.colors)
    if isinstance(tokens.get("motion"), dict):
        tokens["motion"] = _transform_motion(tokens["motion"], profile.motion)
    if tokens.get("radius") is not None:
        tokens["radius"] = _transform_radius(tokens["radius"], profile.borders)
    if isinstance(tokens.get("borders"), dict):
        tokens["borders"] = _transform_borders(tokens["borders"], profile.borders)
    if isinstance(tokens.get("shadows"), dict):
        tokens["shadows"] = _transform_shadows(tokens["shadows"], profile.shadows)
    if resolved == ThemeVariant.HIGH_CONTRAST:
        tokens["zIndex"] = _raise_layers(tokens.get("zIndex"))

    meta = dict(tokens.get("meta") or {})
    meta["variant"] = resolved.value
    meta["updatedAt"] = utc_timestamp()
    tokens["meta"] = meta
    return like_input(theme, tokens)


# =============================================================================
# Presentation helpers
# =============================================================================


def get_variant_class_names(variant: ThemeVariant | str) -> list[str]:
    """CSS class names a rendering layer can put on its root element."""
    base = [f"theme-{variant}"]
    match _coerce_variant(variant):
        case ThemeVariant.COMPACT:
            return [*base, "theme-compact", "theme-dense"]
        case ThemeVariant.COMFORTABLE:
            return [*base, "theme-comfortable", "theme-spacious"]
        case ThemeVariant.HIGH_CONTRAST:
            return [*base, "theme-high-contrast", "theme-accessible"]
        case _:
            return [*base, "theme-default"]


def get_variant_css_properties(variant: ThemeVariant | str) -> dict[str, str]:
    """Custom properties exposing a variant's multipliers."""
    profile = get_variant_profile(variant)
    return {
        "--theme-variant": str(variant),
        "--theme-spacing-multiplier": format_number(profile.spacing.multiplier),
        "--theme-typography-size-multiplier": format_number(profile.typography.size_multiplier),
        "--theme-motion-speed-multiplier": format_number(profile.motion.speed_multiplier),
        "--theme-border-radius-multiplier": format_number(profile.borders.radius_multiplier),
        "--theme-animations-enabled": "1" if profile.motion.enable_animations else "0",
    }


def is_accessibility_variant(variant: ThemeVariant | str) -> bool:
    return _coerce_variant(variant) == ThemeVariant.HIGH_CONTRAST


class VariantPreferences(BaseModel):
    """User display preferences used to recommend a variant."""

    model_config = ConfigDict(frozen=True)

    prefers_reduced_motion: bool = False
    prefers_high_contrast: bool = False
    prefers_compact_ui: bool = False
    prefers_large_text: bool = False


def get_recommended_variant(
    preferences: VariantPreferences | Mapping[str, bool],
) -> ThemeVariant:
    """Pick a variant for a set of user preferences."""
    if not isinstance(preferences, VariantPreferences):
        preferences = VariantPreferences.model_validate(dict(preferences))
    if preferences.prefers_high_contrast or preferences.prefers_reduced_motion:
        return ThemeVariant.HIGH_CONTRAST
    if preferences.prefers_compact_ui:
        return ThemeVariant.COMPACT
    if preferences.prefers_large_text:
        return ThemeVariant.COMFORTABLE
    return ThemeVariant.DEFAULT
