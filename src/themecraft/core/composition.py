"""
Theme composition: merge, override, and extend.

Combines a base theme with a partial overlay. Colors get special treatment
in ``merge`` mode: conflicts are resolved by a configurable strategy so a
single new brand color can regenerate a coherent scale instead of leaving
stale steps behind. Every function here works on copies; inputs are never
mutated.

Composition never raises for malformed token values. It always produces a
theme and leaves correctness to validation.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from .color import is_light, mix, parse_color, to_hex
from .color_scale import generate_semantic_group, is_accessible
from .errors import CompositionError
from .ir.color import WCAGLevel
from .ir.config import ConflictResolutionConfig
from .ir.theme import (
    SEMANTIC_COLOR_GROUPS,
    BuiltTheme,
    ColorConflictStrategy,
    CompositionMode,
    ThemeCustomization,
    utc_timestamp,
)
from .presets import DEFAULT_SHADOWS, expand_radius

logger = logging.getLogger(__name__)

ThemeLike = TypeVar("ThemeLike", BuiltTheme, dict[str, Any])

# Weight of the overlay color when blending
BLEND_RATIO = 0.5

_DEFAULT_CONFLICT_CONFIG = ConflictResolutionConfig()


# =============================================================================
# Object helpers
# =============================================================================


def to_token_dict(theme: BuiltTheme | Mapping[str, Any]) -> dict[str, Any]:
    """A deep-copied plain mapping for either a model or a mapping."""
    if isinstance(theme, BuiltTheme):
        return theme.to_tokens()
    return copy.deepcopy(dict(theme))


def like_input(original: Any, tokens: dict[str, Any]) -> Any:
    """Return ``tokens`` as the same kind of value the caller passed in."""
    if isinstance(original, BuiltTheme):
        return BuiltTheme.from_tokens(tokens)
    return tokens


def deep_merge(target: Mapping[str, Any], source: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``source`` over ``target``; source wins at leaves."""
    result = copy.deepcopy(dict(target))
    for key, value in source.items():
        current = result.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            result[key] = deep_merge(current, value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def extend_object(target: Mapping[str, Any], source: Mapping[str, Any]) -> dict[str, Any]:
    """Fill keys missing from ``target``; existing leaves are never replaced."""
    result = copy.deepcopy(dict(target))
    for key, value in source.items():
        current = result.get(key)
        if key not in result or current is None:
            result[key] = copy.deepcopy(value)
        elif isinstance(value, Mapping) and isinstance(current, Mapping):
            result[key] = extend_object(current, value)
    return result


def _stamp(tokens: dict[str, Any], mode: CompositionMode) -> dict[str, Any]:
    meta = dict(tokens.get("meta") or {})
    meta["compositionMode"] = mode.value
    meta["updatedAt"] = utc_timestamp()
    tokens["meta"] = meta
    return tokens


# =============================================================================
# Accessibility
# =============================================================================


def readable_foreground(background: Any) -> str | None:
    """Pure black on light backgrounds, pure white on dark ones."""
    color = parse_color(background)
    if color is None:
        return None
    return "#000000" if is_light(color) else "#ffffff"


def _fix_pair(
    container: dict[str, Any], fg_key: str, bg_key: str, level: WCAGLevel | str
) -> None:
    foreground = container.get(fg_key)
    background = container.get(bg_key)
    if not isinstance(foreground, str) or not isinstance(background, str):
        return
    if is_accessible(foreground, background, level):
        return
    forced = readable_foreground(background)
    if forced is not None:
        container[fg_key] = forced


def ensure_accessible_colors(
    colors: Mapping[str, Any],
    level: WCAGLevel | str = WCAGLevel.AA,
    pairs: tuple[tuple[str, str], ...] = (("foreground", "background"),),
) -> dict[str, Any]:
    """Force unreadable foregrounds to pure black or white.

    Checks each semantic group's foreground/background, then each listed
    top-level pair. A failing foreground is replaced outright rather than
    nudged toward compliance. Pairs whose background cannot be parsed are
    left alone.

    Args:
        colors: Color category mapping.
        level: WCAG level the pairs must meet (normal text).
        pairs: Top-level (foreground key, background key) pairs to check.

    Returns:
        A corrected copy of ``colors``.
    """
    result = copy.deepcopy(dict(colors))
    for group_name in SEMANTIC_COLOR_GROUPS:
        group = result.get(group_name)
        if isinstance(group, dict):
            _fix_pair(group, "foreground", "background", level)
    for fg_key, bg_key in pairs:
        _fix_pair(result, fg_key, bg_key, level)
    return result


# =============================================================================
# Color conflict strategies
# =============================================================================


def _resolve_auto(
    base: dict[str, Any], overlay: Mapping[str, Any], config: ConflictResolutionConfig
) -> dict[str, Any]:
    result = copy.deepcopy(base)
    for key, value in overlay.items():
        if isinstance(value, Mapping):
            if "DEFAULT" in value:
                default = value["DEFAULT"]
                regenerated = generate_semantic_group(default, default=default)
                result[key] = {**regenerated, **copy.deepcopy(dict(value))}
                continue
            if not config.allow_partial_overrides and key in SEMANTIC_COLOR_GROUPS:
                logger.warning(
                    f"Ignoring partial override of color group '{key}' without DEFAULT"
                )
                continue
            current = result.get(key)
            if isinstance(current, dict):
                result[key] = {**current, **copy.deepcopy(dict(value))}
            else:
                result[key] = copy.deepcopy(dict(value))
        else:
            result[key] = value
    return result


def _blend_value(base_value: str, overlay_value: str) -> str:
    base_color = parse_color(base_value)
    overlay_color = parse_color(overlay_value)
    if base_color is None or overlay_color is None:
        return overlay_value
    return to_hex(mix(base_color, overlay_color, BLEND_RATIO))


def _resolve_blend(base: dict[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    result = copy.deepcopy(base)
    for key, value in overlay.items():
        current = result.get(key)
        if isinstance(value, str) and isinstance(current, str):
            result[key] = _blend_value(current, value)
        elif isinstance(value, Mapping) and isinstance(current, dict):
            blended = dict(current)
            for sub_key, sub_value in value.items():
                sub_current = blended.get(sub_key)
                if isinstance(sub_value, str) and isinstance(sub_current, str):
                    blended[sub_key] = _blend_value(sub_current, sub_value)
                else:
                    blended[sub_key] = copy.deepcopy(sub_value)
            result[key] = blended
        else:
            result[key] = copy.deepcopy(value)
    return result


def resolve_color_conflicts(
    base_colors: Mapping[str, Any],
    overlay_colors: Mapping[str, Any],
    config: ConflictResolutionConfig | None = None,
) -> dict[str, Any]:
    """Combine two color categories under the configured strategy.

    Args:
        base_colors: Colors of the base theme.
        overlay_colors: Colors being applied.
        config: Conflict resolution settings.

    Returns:
        The resolved color mapping.
    """
    config = config or _DEFAULT_CONFLICT_CONFIG
    base = copy.deepcopy(dict(base_colors))
    strategy = config.color_conflicts

    if strategy == ColorConflictStrategy.AUTO:
        result = _resolve_auto(base, overlay_colors, config)
    elif strategy == ColorConflictStrategy.PREFER_BASE:
        result = extend_object(base, overlay_colors)
    elif strategy == ColorConflictStrategy.PREFER_OVERRIDE:
        result = deep_merge(base, overlay_colors)
    else:
        result = _resolve_blend(base, overlay_colors)

    if config.preserve_accessibility:
        result = ensure_accessible_colors(result)
    return result


# =============================================================================
# Composition modes
# =============================================================================


def merge_themes(
    base: dict[str, Any], overlay: Mapping[str, Any], config: ConflictResolutionConfig
) -> dict[str, Any]:
    """Deep merge with strategy-resolved colors."""
    result = copy.deepcopy(base)
    overlay_colors = overlay.get("colors")
    if isinstance(overlay_colors, Mapping):
        result["colors"] = resolve_color_conflicts(
            result.get("colors") or {}, overlay_colors, config
        )
    rest = {key: value for key, value in overlay.items() if key != "colors"}
    return _stamp(deep_merge(result, rest), CompositionMode.MERGE)


def override_themes(
    base: dict[str, Any], overlay: Mapping[str, Any], config: ConflictResolutionConfig
) -> dict[str, Any]:
    """Top-level replacement; metadata is kept."""
    result = copy.deepcopy(base)
    for key, value in overlay.items():
        if key == "meta":
            continue
        result[key] = copy.deepcopy(value)
    if config.preserve_accessibility and isinstance(overlay.get("colors"), Mapping):
        result["colors"] = ensure_accessible_colors(result["colors"])
    return _stamp(result, CompositionMode.OVERRIDE)


def extend_themes(base: dict[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Only add what the base does not define."""
    result = copy.deepcopy(base)
    for key, value in overlay.items():
        if key == "meta":
            continue
        current = result.get(key)
        if current is None:
            result[key] = copy.deepcopy(value)
        elif isinstance(current, Mapping) and isinstance(value, Mapping):
            result[key] = extend_object(current, value)
    return _stamp(result, CompositionMode.EXTEND)


def compose(
    base: ThemeLike,
    overlay: BuiltTheme | Mapping[str, Any],
    mode: CompositionMode | str = CompositionMode.MERGE,
    config: ConflictResolutionConfig | None = None,
) -> ThemeLike:
    """Combine a base theme with an overlay.

    Args:
        base: Theme to compose over (model or mapping).
        overlay: Partial theme applied on top.
        mode: merge, override or extend.
        config: Color conflict resolution settings.

    Returns:
        A new theme of the same kind as ``base``.

    Raises:
        CompositionError: If ``mode`` is not a known composition mode.
    """
    try:
        mode = CompositionMode(mode)
    except ValueError as e:
        raise CompositionError(
            f"Unknown composition mode: {mode}",
            {"valid": [m.value for m in CompositionMode]},
        ) from e

    config = config or _DEFAULT_CONFLICT_CONFIG
    base_tokens = to_token_dict(base)
    overlay_tokens = to_token_dict(overlay)
    logger.debug(f"Composing theme in {mode} mode ({config.color_conflicts} colors)")

    if mode == CompositionMode.MERGE:
        result = merge_themes(base_tokens, overlay_tokens, config)
    elif mode == CompositionMode.OVERRIDE:
        result = override_themes(base_tokens, overlay_tokens, config)
    else:
        result = extend_themes(base_tokens, overlay_tokens)
    return like_input(base, result)


# =============================================================================
# Customizations
# =============================================================================

_BORDER_KEYS = {"default": "border", "input": "input", "ring": "ring"}


def _pair_keys(name: str) -> dict[str, str]:
    return {"background": name, "foreground": f"{name}Foreground"}


def _color_overlay(colors: Mapping[str, Any]) -> dict[str, Any]:
    """Map a color customization onto the theme's color layout."""
    remaining = dict(colors)
    overlay: dict[str, Any] = {}

    for group in SEMANTIC_COLOR_GROUPS:
        value = remaining.pop(group, None)
        if isinstance(value, str):
            overlay[group] = {"DEFAULT": value}
        elif isinstance(value, Mapping):
            overlay[group] = dict(value)

    surface = remaining.pop("surface", None)
    if isinstance(surface, Mapping):
        overlay.update({key: value for key, value in surface.items() if value is not None})

    grouped = (
        ("border", _BORDER_KEYS),
        ("muted", _pair_keys("muted")),
        ("accent", _pair_keys("accent")),
    )
    for name, mapping in grouped:
        value = remaining.pop(name, None)
        if isinstance(value, str):
            overlay[name] = value
        elif isinstance(value, Mapping):
            for sub_key, target in mapping.items():
                if value.get(sub_key) is not None:
                    overlay[target] = value[sub_key]

    overlay.update({key: value for key, value in remaining.items() if value is not None})
    return overlay


def customization_to_overlay(
    customization: ThemeCustomization, base: Mapping[str, Any] | None = None
) -> dict[str, Any]:
    """Translate a customization patch into a composable overlay.

    Args:
        customization: The caller's patch; only fields it set are used.
        base: Theme the overlay will be applied to (supplies existing shadows).

    Returns:
        Overlay mapping in theme layout.
    """
    patch = customization.to_overlay()
    overlay: dict[str, Any] = {}
    for key, value in patch.items():
        if key == "colors":
            overlay["colors"] = _color_overlay(value)
        elif key == "radius" and isinstance(value, str):
            overlay["radius"] = expand_radius(value)
        elif key == "shadows":
            existing = (base or {}).get("shadows") or {}
            overlay["shadows"] = {**DEFAULT_SHADOWS, **existing, **value}
        else:
            overlay[key] = value
    return overlay


def apply_customizations(
    theme: ThemeLike,
    customization: ThemeCustomization | Mapping[str, Any],
    mode: CompositionMode | str = CompositionMode.MERGE,
    config: ConflictResolutionConfig | None = None,
) -> ThemeLike:
    """Apply a customization patch and record it in the theme's metadata.

    When ``prioritize_user_customizations`` is off, customized colors only
    fill gaps in the base palette.
    """
    if not isinstance(customization, ThemeCustomization):
        customization = ThemeCustomization.from_overlay(dict(customization))
    config = config or _DEFAULT_CONFLICT_CONFIG
    if not config.prioritize_user_customizations:
        config = config.model_copy(update={"color_conflicts": ColorConflictStrategy.PREFER_BASE})

    base_tokens = to_token_dict(theme)
    overlay = customization_to_overlay(customization, base_tokens)
    result = to_token_dict(compose(base_tokens, overlay, mode, config))

    meta = dict(result.get("meta") or {})
    meta["customizations"] = deep_merge(
        meta.get("customizations") or {}, customization.to_overlay()
    )
    meta["updatedAt"] = utc_timestamp()
    result["meta"] = meta
    return like_input(theme, result)
