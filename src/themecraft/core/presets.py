"""
Base theme registry.

Defines the named token sets a builder can extend: ``light`` (the default),
``dark`` and ``futuristic``. Each preset is built once from a handful of
brand colors; semantic groups are expanded into full scales with the same
generator the composition pipeline uses, so a preset and a customized theme
share one shape.

Applications may register additional token sets with
``register_base_theme``.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from .color_scale import generate_semantic_group
from .ir.theme import BuiltTheme, ThemeMeta, ThemeVariant, utc_timestamp

logger = logging.getLogger(__name__)

DEFAULT_BASE_THEME = "light"

# =============================================================================
# Shared token categories
# =============================================================================

DEFAULT_SHADOWS: dict[str, str] = {
    "xs": "0 1px 2px 0 rgb(0 0 0 / 0.05)",
    "sm": "0 1px 3px 0 rgb(0 0 0 / 0.1), 0 1px 2px -1px rgb(0 0 0 / 0.1)",
    "md": "0 4px 6px -1px rgb(0 0 0 / 0.1), 0 2px 4px -2px rgb(0 0 0 / 0.1)",
    "lg": "0 10px 15px -3px rgb(0 0 0 / 0.1), 0 4px 6px -4px rgb(0 0 0 / 0.1)",
    "xl": "0 20px 25px -5px rgb(0 0 0 / 0.1), 0 8px 10px -6px rgb(0 0 0 / 0.1)",
    "2xl": "0 25px 50px -12px rgb(0 0 0 / 0.25)",
    "inner": "inset 0 2px 4px 0 rgb(0 0 0 / 0.05)",
    "none": "none",
}

DEFAULT_Z_INDEX: dict[str, int] = {
    "hide": -1,
    "auto": 0,
    "base": 1,
    "docked": 10,
    "dropdown": 1000,
    "sticky": 1100,
    "banner": 1200,
    "overlay": 1300,
    "modal": 1400,
    "popover": 1500,
    "skipLink": 1600,
    "toast": 1700,
    "tooltip": 1800,
}


def expand_radius(medium: str) -> dict[str, str]:
    """Expand a single radius into the named radius scale, using it as ``md``."""
    return {
        "none": "0",
        "xs": "0.125rem",
        "sm": "0.25rem",
        "md": medium,
        "lg": "0.75rem",
        "xl": "1rem",
        "2xl": "1.5rem",
        "3xl": "2rem",
        "full": "9999px",
    }


def resolve_z_index(overrides: dict[str, int] | None = None) -> dict[str, int]:
    """The default layer stack with any base-theme layer numbers applied."""
    return {**DEFAULT_Z_INDEX, **(overrides or {})}


ANIMATION_TOKENS: dict[str, Any] = {
    "duration": {
        "instant": "0ms",
        "fast": "150ms",
        "normal": "300ms",
        "slow": "500ms",
        "slower": "750ms",
        "slowest": "1000ms",
    },
    "easing": {
        "linear": "linear",
        "ease": "ease",
        "easeIn": "ease-in",
        "easeOut": "ease-out",
        "easeInOut": "ease-in-out",
        "sharp": "cubic-bezier(0.4, 0.0, 0.6, 1.0)",
        "bounce": "cubic-bezier(0.68, -0.55, 0.265, 1.55)",
        "elastic": "cubic-bezier(0.175, 0.885, 0.32, 1.275)",
        "circOut": "cubic-bezier(0.075, 0.82, 0.165, 1)",
        "quartOut": "cubic-bezier(0.165, 0.84, 0.44, 1)",
        "expoOut": "cubic-bezier(0.19, 1, 0.22, 1)",
        "expoInOut": "cubic-bezier(1, 0, 0, 1)",
    },
    "keyframes": {
        "fadeIn": {"0%": {"opacity": "0"}, "100%": {"opacity": "1"}},
        "fadeOut": {"0%": {"opacity": "1"}, "100%": {"opacity": "0"}},
        "slideInUp": {
            "0%": {"transform": "translateY(100%)", "opacity": "0"},
            "100%": {"transform": "translateY(0)", "opacity": "1"},
        },
        "slideInDown": {
            "0%": {"transform": "translateY(-100%)", "opacity": "0"},
            "100%": {"transform": "translateY(0)", "opacity": "1"},
        },
        "scaleIn": {
            "0%": {"transform": "scale(0.95)", "opacity": "0"},
            "100%": {"transform": "scale(1)", "opacity": "1"},
        },
        "pulse": {
            "0%, 100%": {"opacity": "1"},
            "50%": {"opacity": "0.5"},
        },
    },
    "config": {
        "delays": {"none": "0ms", "short": "100ms", "medium": "200ms", "long": "300ms"},
        "fillModes": {
            "none": "none",
            "forwards": "forwards",
            "backwards": "backwards",
            "both": "both",
        },
        "directions": {
            "normal": "normal",
            "reverse": "reverse",
            "alternate": "alternate",
            "alternateReverse": "alternate-reverse",
        },
    },
    "motion": {
        "respectsReducedMotion": True,
        "reducedMotionDuration": "0.01ms",
        "reducedMotionEasing": "linear",
        "fallbackDuration": "150ms",
    },
}

_TYPOGRAPHY: dict[str, Any] = {
    "fontFamily": "system-ui, sans-serif",
    "fontSize": {"sm": "0.875rem", "md": "1rem", "lg": "1.125rem"},
}

_SPACING: dict[str, str] = {
    "xs": "0.25rem",
    "sm": "0.5rem",
    "md": "1rem",
    "lg": "1.5rem",
    "xl": "2rem",
}

_MOTION: dict[str, Any] = {
    "duration": {"fast": "150ms", "normal": "300ms", "slow": "500ms"},
    "easing": {"inOut": "ease-in-out"},
}

_BREAKPOINTS: dict[str, str] = {"sm": "640px", "md": "768px", "lg": "1024px", "xl": "1280px"}

# Layer numbers the base token sets pin explicitly
_BASE_LAYERS: dict[str, int] = {
    "dropdown": 1000,
    "sticky": 1100,
    "modal": 1400,
    "popover": 1500,
    "tooltip": 1800,
}

# Brand color per semantic group
_LIGHT_PALETTE: dict[str, str] = {
    "primary": "#2563eb",
    "secondary": "#475569",
    "destructive": "#dc2626",
    "success": "#059669",
    "warning": "#ea580c",
}


def _semantic_groups(
    palette: dict[str, str], overrides: dict[str, dict[str, str]] | None = None
) -> dict[str, dict[str, str]]:
    overrides = overrides or {}
    return {
        name: {**generate_semantic_group(base, default=base), **overrides.get(name, {})}
        for name, base in palette.items()
    }


# =============================================================================
# Light
# =============================================================================


def _light_tokens() -> dict[str, Any]:
    colors: dict[str, Any] = _semantic_groups(_LIGHT_PALETTE)
    colors.update(
        {
            "background": "#ffffff",
            "foreground": "#0a0a0a",
            "card": "#ffffff",
            "cardForeground": "#0a0a0a",
            "popover": "#ffffff",
            "popoverForeground": "#0a0a0a",
            "border": "#e4e4e7",
            "input": "#e4e4e7",
            "ring": _LIGHT_PALETTE["primary"],
            "muted": "#f4f4f5",
            "mutedForeground": "#27272a",
            "accent": "#f4f4f5",
            "accentForeground": "#0a0a0a",
        }
    )
    return {
        "colors": colors,
        "typography": copy.deepcopy(_TYPOGRAPHY),
        "spacing": dict(_SPACING),
        "motion": copy.deepcopy(_MOTION),
        "breakpoints": dict(_BREAKPOINTS),
        "radius": "0.5rem",
        "zIndex": resolve_z_index(_BASE_LAYERS),
        "shadows": dict(DEFAULT_SHADOWS),
        "animations": copy.deepcopy(ANIMATION_TOKENS),
        "borders": {"color": "#e4e4e7"},
    }


# =============================================================================
# Dark
# =============================================================================

_DARK_GROUP_BACKGROUNDS: dict[str, str] = {
    "primary": "#1e293b",
    "secondary": "#334155",
    "destructive": "#7f1d1d",
    "success": "#064e3b",
    "warning": "#7c2d12",
}


def _dark_tokens() -> dict[str, Any]:
    tokens = _light_tokens()
    colors: dict[str, Any] = _semantic_groups(
        _LIGHT_PALETTE,
        {
            name: {"background": background, "foreground": "#ffffff"}
            for name, background in _DARK_GROUP_BACKGROUNDS.items()
        },
    )
    colors.update(
        {
            "background": "#0a0a0a",
            "foreground": "#fafafa",
            "card": "#0a0a0a",
            "cardForeground": "#fafafa",
            "popover": "#0a0a0a",
            "popoverForeground": "#fafafa",
            "border": "#27272a",
            "input": "#27272a",
            "ring": _LIGHT_PALETTE["primary"],
            "muted": "#262626",
            "mutedForeground": "#e4e4e7",
            "accent": "#27272a",
            "accentForeground": "#fafafa",
        }
    )
    tokens["colors"] = colors
    tokens["borders"] = {"color": "#27272a"}
    return tokens


# =============================================================================
# Futuristic
# =============================================================================


def _futuristic_tokens() -> dict[str, Any]:
    tokens = _light_tokens()
    palette = {**_LIGHT_PALETTE, "primary": "#4f46e5", "secondary": "#0d9488"}
    colors: dict[str, Any] = _semantic_groups(palette)
    colors.update({key: value for key, value in tokens["colors"].items() if isinstance(value, str)})
    colors["ring"] = palette["primary"]
    tokens["colors"] = colors
    tokens["typography"]["fontFamily"] = "'Inter Variable', 'SF Pro Display', system-ui, sans-serif"
    tokens["spacing"].update({"md": "0.75rem", "lg": "1.25rem", "xl": "2rem", "2xl": "3rem"})
    tokens["motion"] = {
        "duration": {"fast": "0.15s", "normal": "0.2s", "slow": "0.3s"},
        "easing": {
            "inOut": "cubic-bezier(0.4, 0, 0.2, 1)",
            "default": "cubic-bezier(0.4, 0, 0.2, 1)",
            "bounce": "cubic-bezier(0.68, -0.55, 0.265, 1.55)",
        },
    }
    tokens["radius"] = "0.75rem"
    tokens["borders"] = {"color": palette["primary"]}
    return tokens


# =============================================================================
# Registry
# =============================================================================

_BASE_THEMES: dict[str, dict[str, Any]] = {
    "light": _light_tokens(),
    "dark": _dark_tokens(),
    "futuristic": _futuristic_tokens(),
}


def get_base_theme(name: str) -> dict[str, Any] | None:
    """
    Get a copy of a registered base token set.

    Args:
        name: Registry name ("light", "dark", "futuristic", ...)

    Returns:
        Token mapping if found, None otherwise
    """
    tokens = _BASE_THEMES.get(name)
    return copy.deepcopy(tokens) if tokens is not None else None


def list_base_themes() -> list[str]:
    """
    List registered base theme names.

    Returns:
        List of registry names
    """
    return list(_BASE_THEMES.keys())


def register_base_theme(name: str, tokens: dict[str, Any]) -> None:
    """Register (or replace) a named base token set."""
    if name in _BASE_THEMES:
        logger.debug(f"Replacing registered base theme '{name}'")
    _BASE_THEMES[name] = copy.deepcopy(dict(tokens))


def unregister_base_theme(name: str) -> None:
    _BASE_THEMES.pop(name, None)


def create_base_theme(
    source: str | dict[str, Any] = DEFAULT_BASE_THEME, *, name: str | None = None
) -> BuiltTheme:
    """Instantiate a base theme with fresh metadata.

    Unknown registry names fall back to the default base theme with a
    logged warning. ``meta.createdAt`` is stamped here and nowhere else.

    Args:
        source: Registry name or a raw token mapping.
        name: Theme name recorded in metadata.

    Returns:
        A BuiltTheme ready to compose over.
    """
    if isinstance(source, str):
        base_name = source
        tokens = get_base_theme(source)
        if tokens is None:
            logger.warning(
                f"Unknown base theme '{source}'. "
                f"Available: {', '.join(list_base_themes())}. "
                f"Falling back to '{DEFAULT_BASE_THEME}'."
            )
            base_name = DEFAULT_BASE_THEME
            tokens = get_base_theme(DEFAULT_BASE_THEME) or {}
    else:
        base_name = "custom"
        tokens = copy.deepcopy(dict(source))

    tokens.pop("meta", None)
    now = utc_timestamp()
    meta = ThemeMeta(
        name=name or f"{base_name}-theme",
        version="1.0.0",
        base_theme=base_name,
        variant=ThemeVariant.DEFAULT,
        created_at=now,
        updated_at=now,
    )
    return BuiltTheme.from_tokens({**tokens, "meta": meta.model_dump(by_alias=True)})
