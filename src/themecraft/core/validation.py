"""
Theme validation suite.

Runs independent category validators over a theme and aggregates their
findings into a single ``ValidationResult``:

- color: parseable values, required semantic groups, text contrast, hue spread
- typography: font family and size scale
- spacing: CSS lengths and a monotonic scale
- motion: durations and easing curves
- breakpoints: CSS lengths
- accessibility: contrast failures with remediation, reduced motion
- performance: heavy shadows and oversized palettes
- structure: required categories and metadata
- custom rules supplied by the caller

Validation is a pure function of the theme: it never mutates its input and
never raises for malformed tokens. Errors make the result invalid; warnings
are advisory.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from typing import Any

from .color import js_round, parse_color, to_hsl
from .color_scale import contrast_threshold, get_contrast_ratio
from .composition import to_token_dict
from .ir.theme import (
    REQUIRED_CATEGORIES,
    SEMANTIC_COLOR_GROUPS,
    TEXT_CONTRAST_PAIRS,
    BuiltTheme,
    ThemeVariant,
)
from .ir.validation import IssueCategory, Severity, ValidationConfig, ValidationResult

logger = logging.getLogger(__name__)

SIZE_PATTERN = re.compile(r"^-?\d*\.?\d+(px|em|rem|%|vw|vh|vmin|vmax|ch|ex)$")
DURATION_PATTERN = re.compile(r"^\d*\.?\d+(ms|s)$")

VALID_EASINGS: frozenset[str] = frozenset(
    {"linear", "ease", "ease-in", "ease-out", "ease-in-out", "step-start", "step-end"}
)

MAX_DURATION_MS = 1000
MAX_SHADOW_LAYERS = 3
MAX_DISTINCT_COLORS = 200
MAX_HUE_BUCKETS = 10
MAX_SCALE_RATIO_DEVIATION = 0.2

_DEFAULT_CONFIG = ValidationConfig()


# =============================================================================
# Pattern helpers
# =============================================================================


def is_valid_size(value: Any) -> bool:
    return isinstance(value, str) and SIZE_PATTERN.match(value.strip()) is not None


def is_valid_duration(value: Any) -> bool:
    return isinstance(value, str) and DURATION_PATTERN.match(value.strip()) is not None


def is_valid_easing(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    value = value.strip()
    return value in VALID_EASINGS or value.startswith("cubic-bezier(")


def duration_to_ms(value: Any) -> float | None:
    """Duration in milliseconds, or None if the value is not a duration."""
    if not is_valid_duration(value):
        return None
    value = value.strip()
    if value.endswith("ms"):
        return float(value[:-2])
    return float(value[:-1]) * 1000


def size_to_number(value: Any) -> float | None:
    """Numeric magnitude of a CSS length (unit dropped)."""
    if not is_valid_size(value):
        return None
    match = re.match(r"^-?\d*\.?\d+", value.strip())
    return float(match.group(0)) if match else None


def iter_color_leaves(
    colors: Mapping[str, Any], prefix: str = "colors"
) -> Iterator[tuple[str, str]]:
    """Yield (path, value) for every string leaf of a color tree.

    Numbers and other non-string leaves (opacity factors and the like) are not
    colors and are skipped.
    """
    for key, value in colors.items():
        path = f"{prefix}.{key}"
        if isinstance(value, Mapping):
            yield from iter_color_leaves(value, path)
        elif isinstance(value, str):
            yield path, value


def split_shadow_layers(shadow: str) -> list[str]:
    """Split a box-shadow on top-level commas (commas inside ``rgb(...)`` don't count)."""
    layers: list[str] = []
    depth = 0
    current = ""
    for char in shadow:
        if char == "(":
            depth += 1
        elif char == ")":
            depth = max(0, depth - 1)
        if char == "," and depth == 0:
            layers.append(current.strip())
            current = ""
        else:
            current += char
    if current.strip():
        layers.append(current.strip())
    return layers


def _low_contrast_pairs(
    colors: Mapping[str, Any], threshold: float
) -> list[tuple[str, str, float]]:
    """Standard text pairs whose contrast falls below ``threshold``."""
    failing = []
    for fg_key, bg_key in TEXT_CONTRAST_PAIRS:
        foreground = colors.get(fg_key)
        background = colors.get(bg_key)
        if parse_color(foreground) is None or parse_color(background) is None:
            continue
        ratio = get_contrast_ratio(foreground, background)
        if ratio < threshold:
            failing.append((fg_key, bg_key, ratio))
    return failing


def _variant_of(tokens: Mapping[str, Any]) -> str:
    meta = tokens.get("meta")
    if isinstance(meta, Mapping):
        return str(meta.get("variant") or ThemeVariant.DEFAULT)
    return ThemeVariant.DEFAULT.value


# =============================================================================
# Category validators
# =============================================================================


def validate_colors(
    tokens: Mapping[str, Any], config: ValidationConfig, result: ValidationResult
) -> None:
    colors = tokens.get("colors")
    if not isinstance(colors, Mapping):
        return

    for path, value in iter_color_leaves(colors):
        if parse_color(value) is None:
            result.add_error(
                IssueCategory.COLOR,
                path,
                f"Invalid color value: {value!r}",
                ["Use a hex, rgb(), hsl() or oklch() color"],
            )

    for group in SEMANTIC_COLOR_GROUPS:
        if group not in colors:
            result.add_error(
                IssueCategory.STRUCTURE,
                f"colors.{group}",
                f"Missing required semantic color: {group}",
                [f"Add a '{group}' color group with at least a DEFAULT color"],
            )

    threshold = contrast_threshold(config.wcag_level)
    for fg_key, bg_key, ratio in _low_contrast_pairs(colors, threshold):
        result.add_error(
            IssueCategory.COLOR,
            f"colors.{fg_key}",
            f"Insufficient contrast ratio ({ratio:.2f}, needs {threshold:g})",
            [f"Increase the lightness difference between {fg_key} and {bg_key}"],
        )

    buckets = set()
    for _, value in iter_color_leaves(colors):
        color = parse_color(value)
        if color is not None:
            buckets.add(js_round(to_hsl(color).h / 10) * 10)
    if len(buckets) > MAX_HUE_BUCKETS:
        result.add_warning(
            IssueCategory.BEST_PRACTICE,
            "colors",
            f"Palette spans {len(buckets)} distinct hues, which may look inharmonious",
            ["Limit the palette to a few related hues"],
        )


def validate_typography(
    tokens: Mapping[str, Any], config: ValidationConfig, result: ValidationResult
) -> None:
    typography = tokens.get("typography")
    if not isinstance(typography, Mapping):
        return

    if not typography.get("fontFamily"):
        result.add_error(
            IssueCategory.TYPOGRAPHY, "typography.fontFamily", "Font family is required"
        )

    font_size = typography.get("fontSize")
    if not isinstance(font_size, Mapping) or not font_size:
        result.add_error(
            IssueCategory.TYPOGRAPHY, "typography.fontSize", "Font sizes are required"
        )
        return

    sizes: list[float] = []
    for key, value in font_size.items():
        number = size_to_number(value)
        if number is None:
            result.add_error(
                IssueCategory.TYPOGRAPHY,
                f"typography.fontSize.{key}",
                f"Invalid font size: {value!r}",
                ["Use a CSS length such as 1rem or 16px"],
            )
        elif number > 0:
            sizes.append(number)

    sizes.sort()
    ratios = [larger / smaller for smaller, larger in zip(sizes, sizes[1:], strict=False)]
    if len(ratios) >= 2:
        average = sum(ratios) / len(ratios)
        if any(abs(ratio - average) > MAX_SCALE_RATIO_DEVIATION for ratio in ratios):
            result.add_warning(
                IssueCategory.BEST_PRACTICE,
                "typography.fontSize",
                "Font size scale is inconsistent",
                ["Derive sizes from a single modular scale ratio"],
            )


def validate_spacing(
    tokens: Mapping[str, Any], config: ValidationConfig, result: ValidationResult
) -> None:
    spacing = tokens.get("spacing")
    if not isinstance(spacing, Mapping):
        return

    previous: float | None = None
    monotonic = True
    for key, value in spacing.items():
        number = size_to_number(value)
        if number is None:
            result.add_error(
                IssueCategory.SPACING,
                f"spacing.{key}",
                f"Invalid spacing value: {value!r}",
                ["Use a CSS length such as 0.5rem or 8px"],
            )
            continue
        if previous is not None and number <= previous:
            monotonic = False
        previous = number

    if not monotonic:
        result.add_warning(
            IssueCategory.BEST_PRACTICE,
            "spacing",
            "Spacing scale is not monotonically increasing",
            ["Order spacing steps from smallest to largest"],
        )


def validate_motion(
    tokens: Mapping[str, Any], config: ValidationConfig, result: ValidationResult
) -> None:
    motion = tokens.get("motion")
    if not isinstance(motion, Mapping):
        return

    duration = motion.get("duration")
    if isinstance(duration, Mapping):
        for key, value in duration.items():
            milliseconds = duration_to_ms(value)
            if milliseconds is None:
                result.add_error(
                    IssueCategory.MOTION,
                    f"motion.duration.{key}",
                    f"Invalid duration: {value!r}",
                    ["Use a time value such as 150ms or 0.3s"],
                )
            elif milliseconds > MAX_DURATION_MS:
                result.add_warning(
                    IssueCategory.PERFORMANCE,
                    f"motion.duration.{key}",
                    f"Long animation duration: {value}",
                    [f"Keep animations at or below {MAX_DURATION_MS}ms"],
                )

    easing = motion.get("easing")
    if isinstance(easing, Mapping):
        for key, value in easing.items():
            if not is_valid_easing(value):
                result.add_error(
                    IssueCategory.MOTION,
                    f"motion.easing.{key}",
                    f"Invalid easing function: {value!r}",
                    ["Use a CSS easing keyword or cubic-bezier(...)"],
                )


def validate_breakpoints(
    tokens: Mapping[str, Any], config: ValidationConfig, result: ValidationResult
) -> None:
    breakpoints = tokens.get("breakpoints")
    if not isinstance(breakpoints, Mapping):
        return
    for key, value in breakpoints.items():
        if not is_valid_size(value):
            result.add_error(
                IssueCategory.BREAKPOINT,
                f"breakpoints.{key}",
                f"Invalid breakpoint: {value!r}",
                ["Use a CSS length such as 768px"],
            )


def validate_accessibility(
    tokens: Mapping[str, Any], config: ValidationConfig, result: ValidationResult
) -> None:
    variant = _variant_of(tokens)
    high_contrast = variant == ThemeVariant.HIGH_CONTRAST

    colors = tokens.get("colors")
    if isinstance(colors, Mapping):
        threshold = contrast_threshold(config.wcag_level)
        failing = _low_contrast_pairs(colors, threshold)
        for fg_key, bg_key, ratio in failing:
            result.add_error(
                IssueCategory.ACCESSIBILITY,
                f"colors.{fg_key}",
                f"{fg_key} on {bg_key} fails WCAG {config.wcag_level} ({ratio:.2f}:1)",
                [
                    f"Raise contrast to at least {threshold:g}:1",
                    "Use pure black or white text on this background",
                    "Offer the high-contrast variant",
                ],
            )
        if failing and not high_contrast:
            result.add_warning(
                IssueCategory.ACCESSIBILITY,
                "meta.variant",
                "Low-contrast color pairs exist and no high-contrast variant is active",
                ["Apply the high-contrast variant for users who need it"],
            )

    motion = tokens.get("motion")
    duration = motion.get("duration") if isinstance(motion, Mapping) else None
    if isinstance(duration, Mapping) and not high_contrast:
        if any((duration_to_ms(value) or 0) > 0 for value in duration.values()):
            result.add_warning(
                IssueCategory.ACCESSIBILITY,
                "motion.duration",
                "Animations are enabled; respect the user's reduced-motion preference",
                ["Disable or shorten animations under prefers-reduced-motion"],
            )


def validate_performance(
    tokens: Mapping[str, Any], config: ValidationConfig, result: ValidationResult
) -> None:
    shadows = tokens.get("shadows")
    if isinstance(shadows, Mapping):
        for key, value in shadows.items():
            if isinstance(value, str) and len(split_shadow_layers(value)) > MAX_SHADOW_LAYERS:
                result.add_warning(
                    IssueCategory.PERFORMANCE,
                    f"shadows.{key}",
                    f"Shadow has more than {MAX_SHADOW_LAYERS} layers",
                    ["Reduce the number of layered shadows"],
                )

    colors = tokens.get("colors")
    if isinstance(colors, Mapping):
        distinct = {value for _, value in iter_color_leaves(colors)}
        if len(distinct) > MAX_DISTINCT_COLORS:
            result.add_warning(
                IssueCategory.PERFORMANCE,
                "colors",
                f"Theme defines {len(distinct)} distinct colors",
                [f"Keep the palette under {MAX_DISTINCT_COLORS} colors"],
            )


def validate_structure(tokens: Mapping[str, Any], result: ValidationResult) -> None:
    for category in REQUIRED_CATEGORIES:
        if tokens.get(category) is None:
            result.add_error(
                IssueCategory.STRUCTURE,
                category,
                f"Missing required theme property: {category}",
            )

    meta = tokens.get("meta")
    if not isinstance(meta, Mapping):
        result.add_error(IssueCategory.STRUCTURE, "meta", "Theme metadata is required")
        return
    for key in ("name", "version"):
        if not meta.get(key):
            result.add_warning(
                IssueCategory.BEST_PRACTICE, f"meta.{key}", f"Theme metadata has no {key}"
            )


def run_custom_rules(
    tokens: Mapping[str, Any], config: ValidationConfig, result: ValidationResult
) -> None:
    """Run caller-supplied rules; a rule that raises is reported, not propagated."""
    for rule in config.custom_rules:
        try:
            passed = rule.validator(BuiltTheme.from_tokens(dict(tokens)))
        except Exception as e:
            logger.debug(f"Custom rule '{rule.name}' raised: {e}")
            result.add_error(
                IssueCategory.GENERAL,
                rule.property,
                f"Custom rule validation failed: {rule.name}: {e}",
            )
            continue
        if passed:
            continue
        if rule.type == Severity.ERROR:
            result.add_error(IssueCategory.GENERAL, rule.property, rule.message)
        else:
            result.add_warning(IssueCategory.BEST_PRACTICE, rule.property, rule.message)


# =============================================================================
# Entry point
# =============================================================================


def validate_theme(
    theme: BuiltTheme | Mapping[str, Any], config: ValidationConfig | None = None
) -> ValidationResult:
    """Validate a theme.

    Args:
        theme: Theme to check (model or mapping).
        config: Which validators run and the WCAG level required.

    Returns:
        ValidationResult with errors and warnings.
    """
    config = config or _DEFAULT_CONFIG
    tokens = to_token_dict(theme)
    result = ValidationResult()

    if config.enable_color_validation:
        validate_colors(tokens, config, result)
    if config.enable_typography_validation:
        validate_typography(tokens, config, result)
    if config.enable_spacing_validation:
        validate_spacing(tokens, config, result)
    if config.enable_motion_validation:
        validate_motion(tokens, config, result)
    validate_breakpoints(tokens, config, result)
    if config.enable_accessibility_validation:
        validate_accessibility(tokens, config, result)
    if config.enable_performance_validation:
        validate_performance(tokens, config, result)
    validate_structure(tokens, result)
    run_custom_rules(tokens, config, result)

    if config.strict_mode and result.warnings:
        for warning in result.warnings:
            result.add_error(
                warning.category, warning.property, warning.message, warning.suggestions
            )
        result.warnings = []

    return result
