"""
Flatten a built theme into CSS custom properties.

Naming convention (``--`` plus an optional namespace prefix):

    colors        --primary-500, --primary-DEFAULT, --background
    typography    --font-family, --font-size-md, --font-weight-bold,
                  --line-height-tight, --letter-spacing-wide
    spacing       --spacing-md
    motion        --duration-fast, --easing-inOut
    animations    --animation-duration-fast, --animation-easing-bounce,
                  --animation-delay-short
    breakpoints   --breakpoint-md
    radius        --radius (scalar) or --radius-md (scale)
    shadows       --shadow-lg
    zIndex        --z-index-modal
    borders       --border-color

Nested color groups are walked recursively until leaf values are found.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .composition import to_token_dict
from .ir.theme import BuiltTheme

# (category key in typography, variable stem)
_TYPOGRAPHY_SCALES: tuple[tuple[str, str], ...] = (
    ("fontSize", "font-size"),
    ("fontWeight", "font-weight"),
    ("lineHeight", "line-height"),
    ("letterSpacing", "letter-spacing"),
)


def _name(prefix: str, *parts: str) -> str:
    stem = "-".join(str(part) for part in parts if part != "")
    return f"--{prefix}-{stem}" if prefix else f"--{stem}"


def _value(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def _flatten_colors(
    colors: Mapping[str, Any], prefix: str, path: tuple[str, ...], out: dict[str, str]
) -> None:
    for key, value in colors.items():
        if isinstance(value, Mapping):
            _flatten_colors(value, prefix, (*path, key), out)
        elif value is not None:
            out[_name(prefix, *path, key)] = _value(value)


def _flatten_scale(scale: Any, prefix: str, stem: str, out: dict[str, str]) -> None:
    if not isinstance(scale, Mapping):
        return
    for key, value in scale.items():
        if value is not None and not isinstance(value, Mapping):
            out[_name(prefix, stem, key)] = _value(value)


def generate_output_variables(
    theme: BuiltTheme | Mapping[str, Any], prefix: str = ""
) -> dict[str, str]:
    """Flatten every token category into one string-keyed map.

    Args:
        theme: Built theme (model or mapping).
        prefix: Optional namespace inserted after ``--``.

    Returns:
        Mapping of custom property names to string values.
    """
    tokens = to_token_dict(theme)
    out: dict[str, str] = {}

    colors = tokens.get("colors")
    if isinstance(colors, Mapping):
        _flatten_colors(colors, prefix, (), out)

    typography = tokens.get("typography")
    if isinstance(typography, Mapping):
        if typography.get("fontFamily"):
            out[_name(prefix, "font-family")] = _value(typography["fontFamily"])
        for key, stem in _TYPOGRAPHY_SCALES:
            _flatten_scale(typography.get(key), prefix, stem, out)

    _flatten_scale(tokens.get("spacing"), prefix, "spacing", out)

    motion = tokens.get("motion")
    if isinstance(motion, Mapping):
        _flatten_scale(motion.get("duration"), prefix, "duration", out)
        _flatten_scale(motion.get("easing"), prefix, "easing", out)

    animations = tokens.get("animations")
    if isinstance(animations, Mapping):
        _flatten_scale(animations.get("duration"), prefix, "animation-duration", out)
        _flatten_scale(animations.get("easing"), prefix, "animation-easing", out)
        config = animations.get("config")
        if isinstance(config, Mapping):
            _flatten_scale(config.get("delays"), prefix, "animation-delay", out)

    _flatten_scale(tokens.get("breakpoints"), prefix, "breakpoint", out)

    radius = tokens.get("radius")
    if isinstance(radius, Mapping):
        _flatten_scale(radius, prefix, "radius", out)
    elif radius is not None:
        out[_name(prefix, "radius")] = _value(radius)

    _flatten_scale(tokens.get("shadows"), prefix, "shadow", out)
    _flatten_scale(tokens.get("zIndex"), prefix, "z-index", out)
    _flatten_scale(tokens.get("borders"), prefix, "border", out)
    return out


def to_css(variables: Mapping[str, str], selector: str = ":root") -> str:
    """Render output variables as a CSS rule block."""
    lines = [f"{selector} {{"]
    lines.extend(f"  {name}: {value};" for name, value in variables.items())
    lines.append("}")
    return "\n".join(lines)
