"""
Color scale generation and contrast math.

Derives an 11-step lightness scale and semantic role colors from a single
base color, and computes the contrast ratios the validator and the
composition pipeline use for accessibility decisions.

Contrast uses an HSL-lightness approximation rather than WCAG relative
luminance: ``(max(L) + 0.05) / (min(L) + 0.05)`` with ``L`` the rounded HSL
lightness on a 0-1 scale. Pass/fail boundaries throughout the engine are
calibrated against this formula.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field

from .color import (
    Hsla,
    Rgba,
    desaturate,
    hsla_to_rgba,
    is_dark,
    lighten,
    parse_color,
    saturate,
    to_hex,
    to_hsl,
)
from .ir.color import (
    SCALE_STEPS,
    STEP_LIGHTNESS,
    WCAG_THRESHOLDS,
    ColorScaleConfig,
    SaturationCurve,
    TextSize,
    WCAGLevel,
)

logger = logging.getLogger(__name__)

ColorInput = str | Rgba

_DEFAULT_CONFIG = ColorScaleConfig()


def _coerce(color: ColorInput) -> Rgba | None:
    if isinstance(color, Rgba):
        return color
    return parse_color(color)


# =============================================================================
# Scale generation
# =============================================================================


def _saturation_factor(lightness: float, curve: SaturationCurve) -> float:
    """Attenuation applied to saturation at a given lightness (0-100).

    Only ease-out attenuates, toward both extremes; every other curve keeps
    the base saturation.
    """
    if curve != SaturationCurve.EASE_OUT:
        return 1.0
    distance = abs(lightness / 100 - 0.5) * 2
    return 0.3 + 0.7 * (1 - distance**2)


def generate_color_scale(
    base: ColorInput, config: ColorScaleConfig | None = None
) -> dict[str, str]:
    """Generate an 11-step scale from a base color.

    The base color's hue is kept; each step gets a fixed lightness target
    and a saturation attenuated by the configured curve so very light and
    very dark steps don't look oversaturated.

    Args:
        base: Base color (any parseable notation).
        config: Scale configuration; defaults to the ease-out perceptual scale.

    Returns:
        Mapping of step keys ("50" .. "950") to hex colors.
    """
    config = config or _DEFAULT_CONFIG
    color = _coerce(base)
    if color is None:
        logger.warning(f"Unparseable base color {base!r}; generating a neutral scale")
        color = Rgba(0, 0, 0)

    hsl = to_hsl(color)
    scale: dict[str, str] = {}
    for step in SCALE_STEPS:
        lightness = STEP_LIGHTNESS[step]
        saturation = hsl.s * _saturation_factor(lightness, config.saturation_curve)
        scale[step] = to_hex(hsla_to_rgba(Hsla(hsl.h, saturation, lightness)))
    return scale


def generate_semantic_colors(base: ColorInput) -> dict[str, str]:
    """Derive role colors from a base color.

    Returns:
        Mapping with background, foreground, border, muted and accent hex colors.
        An unparseable base yields an empty mapping.
    """
    color = _coerce(base)
    if color is None:
        return {}
    return {
        "background": to_hex(desaturate(lighten(color, 0.4), 0.2)),
        "foreground": "#ffffff" if is_dark(color) else "#000000",
        "border": to_hex(desaturate(lighten(color, 0.2), 0.1)),
        "muted": to_hex(desaturate(lighten(color, 0.3), 0.3)),
        "accent": to_hex(saturate(color, 0.1)),
    }


def generate_semantic_group(
    base: ColorInput,
    config: ColorScaleConfig | None = None,
    *,
    default: str | None = None,
) -> dict[str, str]:
    """A full semantic color group: scale steps, DEFAULT and role colors.

    DEFAULT is step "500" unless an explicit ``default`` is given.
    """
    scale = generate_color_scale(base, config)
    return {
        **scale,
        "DEFAULT": default or scale["500"],
        **generate_semantic_colors(base),
    }


# =============================================================================
# Contrast
# =============================================================================


def get_contrast_ratio(first: ColorInput, second: ColorInput) -> float:
    """Contrast ratio in [1, 21] between two colors.

    Unparseable colors yield the minimum ratio of 1.0.
    """
    color_a = _coerce(first)
    color_b = _coerce(second)
    if color_a is None or color_b is None:
        return 1.0
    l1 = to_hsl(color_a).l / 100
    l2 = to_hsl(color_b).l / 100
    return (max(l1, l2) + 0.05) / (min(l1, l2) + 0.05)


def contrast_threshold(
    level: WCAGLevel | str = WCAGLevel.AA, size: TextSize | str = TextSize.NORMAL
) -> float:
    return WCAG_THRESHOLDS[WCAGLevel(level)][TextSize(size)]


def is_accessible(
    foreground: ColorInput,
    background: ColorInput,
    level: WCAGLevel | str = WCAGLevel.AA,
    size: TextSize | str = TextSize.NORMAL,
) -> bool:
    """Whether a foreground/background pair meets a WCAG level."""
    if _coerce(foreground) is None or _coerce(background) is None:
        return False
    return get_contrast_ratio(foreground, background) >= contrast_threshold(level, size)


def find_best_foreground(
    background: ColorInput,
    candidates: list[str],
    level: WCAGLevel | str = WCAGLevel.AA,
) -> str | None:
    """The highest-contrast candidate that meets ``level``, if any."""
    passing = [
        (get_contrast_ratio(candidate, background), candidate)
        for candidate in candidates
        if is_accessible(candidate, background, level)
    ]
    if not passing:
        return None
    best_ratio = max(ratio for ratio, _ in passing)
    return next(candidate for ratio, candidate in passing if ratio == best_ratio)


# =============================================================================
# Palettes
# =============================================================================


class PaletteEntry(BaseModel):
    """Scale and role colors generated for one named base color."""

    model_config = ConfigDict(frozen=True)

    scale: dict[str, str]
    semantic: dict[str, str]


class PaletteReport(BaseModel):
    """Result of checking a generated palette."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    issues: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


def generate_color_palette(
    colors: dict[str, str], config: ColorScaleConfig | None = None
) -> dict[str, PaletteEntry]:
    """Generate a scale and role colors for every named base color."""
    return {
        name: PaletteEntry(
            scale=generate_color_scale(base, config),
            semantic=generate_semantic_colors(base),
        )
        for name, base in colors.items()
    }


def validate_color_palette(palette: dict[str, PaletteEntry]) -> PaletteReport:
    """Check a generated palette for shape and readable role pairs."""
    issues: list[str] = []
    recommendations: list[str] = []

    for name, entry in palette.items():
        missing = [step for step in SCALE_STEPS if step not in entry.scale]
        if missing:
            issues.append(f"{name}: scale is missing steps {', '.join(missing)}")

        foreground = entry.semantic.get("foreground")
        background = entry.semantic.get("background")
        if foreground is None or background is None:
            issues.append(f"{name}: missing semantic foreground/background")
            continue
        if not is_accessible(foreground, background):
            ratio = get_contrast_ratio(foreground, background)
            issues.append(
                f"{name}: foreground/background contrast {ratio:.2f} is below "
                f"{contrast_threshold():.1f}"
            )
            better = find_best_foreground(background, ["#000000", "#ffffff"])
            if better:
                recommendations.append(f"Use {better} as the {name} foreground")
            else:
                recommendations.append(f"Darken or lighten the {name} background")

    return PaletteReport(valid=not issues, issues=issues, recommendations=recommendations)
