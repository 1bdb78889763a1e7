"""
Pure-Python color parsing and manipulation.

Parses the CSS color notations a theme may contain (hex, ``rgb()``,
``hsl()``, ``oklch()`` and the basic keywords) into an ``Rgba`` value and
provides the HSL/LAB manipulations the composition pipeline needs. No
external color libraries required.

HSL manipulations use absolute amounts on a 0-1 scale: ``lighten(c, 0.2)``
adds 20 points of HSL lightness, clamped to [0, 100].

Nothing in this module raises on bad input: parsing returns ``None``.
"""

from __future__ import annotations

import colorsys
import math
import re
from typing import NamedTuple


class Rgba(NamedTuple):
    """sRGB color with 0-255 channels (unrounded) and 0-1 alpha."""

    r: float
    g: float
    b: float
    a: float = 1.0


class Hsla(NamedTuple):
    """HSL color: hue 0-360, saturation and lightness 0-100, alpha 0-1."""

    h: float
    s: float
    l: float  # noqa: E741
    a: float = 1.0


def js_round(value: float) -> int:
    """Round half up, matching CSS/JavaScript rounding rather than banker's rounding."""
    return math.floor(value + 0.5)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# =============================================================================
# Parsing
# =============================================================================

_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_FUNC_RE = re.compile(r"^(rgba?|hsla?|oklch)\(\s*(.*?)\s*\)$", re.IGNORECASE)
_NUMBER_RE = re.compile(r"^[-+]?(\d+\.?\d*|\.\d+)(e[-+]?\d+)?$", re.IGNORECASE)

NAMED_COLORS: dict[str, Rgba] = {
    "black": Rgba(0, 0, 0),
    "white": Rgba(255, 255, 255),
    "red": Rgba(255, 0, 0),
    "green": Rgba(0, 128, 0),
    "blue": Rgba(0, 0, 255),
    "yellow": Rgba(255, 255, 0),
    "cyan": Rgba(0, 255, 255),
    "aqua": Rgba(0, 255, 255),
    "magenta": Rgba(255, 0, 255),
    "fuchsia": Rgba(255, 0, 255),
    "gray": Rgba(128, 128, 128),
    "grey": Rgba(128, 128, 128),
    "silver": Rgba(192, 192, 192),
    "maroon": Rgba(128, 0, 0),
    "olive": Rgba(128, 128, 0),
    "lime": Rgba(0, 255, 0),
    "navy": Rgba(0, 0, 128),
    "purple": Rgba(128, 0, 128),
    "teal": Rgba(0, 128, 128),
    "orange": Rgba(255, 165, 0),
    "transparent": Rgba(0, 0, 0, 0.0),
}


def _parse_number(token: str, *, percent_scale: float | None = None) -> float | None:
    """Parse a numeric CSS argument; percentages are scaled by ``percent_scale``."""
    token = token.strip()
    if token.endswith("%"):
        if percent_scale is None:
            return None
        raw = token[:-1]
        if not _NUMBER_RE.match(raw):
            return None
        return float(raw) / 100.0 * percent_scale
    if not _NUMBER_RE.match(token):
        return None
    return float(token)


def _parse_hue(token: str) -> float | None:
    token = token.strip().lower()
    for unit, factor in (("deg", 1.0), ("grad", 0.9), ("rad", 180.0 / math.pi), ("turn", 360.0)):
        if token.endswith(unit):
            value = _parse_number(token[: -len(unit)])
            return None if value is None else value * factor
    return _parse_number(token)


def _split_arguments(body: str) -> tuple[list[str], str | None]:
    """Split function arguments into channels and an optional alpha.

    Handles both ``rgb(1, 2, 3, 0.5)`` and ``rgb(1 2 3 / 50%)`` syntax.
    """
    alpha: str | None = None
    if "/" in body:
        body, alpha = body.split("/", 1)
        alpha = alpha.strip()
    channels = [part for part in re.split(r"[\s,]+", body.strip()) if part]
    if alpha is None and len(channels) == 4:
        alpha = channels.pop()
    return channels, alpha


def _parse_alpha(token: str | None) -> float | None:
    if token is None:
        return 1.0
    value = _parse_number(token, percent_scale=1.0)
    return None if value is None else _clamp(value, 0.0, 1.0)


def _parse_hex(digits: str) -> Rgba:
    if len(digits) in (3, 4):
        digits = "".join(ch * 2 for ch in digits)
    r, g, b = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
    a = int(digits[6:8], 16) / 255 if len(digits) == 8 else 1.0
    return Rgba(r, g, b, round(a, 3))


def _parse_rgb(channels: list[str], alpha: float) -> Rgba | None:
    values = [_parse_number(ch, percent_scale=255.0) for ch in channels]
    if any(value is None for value in values):
        return None
    r, g, b = (_clamp(value, 0.0, 255.0) for value in values)  # type: ignore[arg-type]
    return Rgba(r, g, b, alpha)


def _parse_hsl(channels: list[str], alpha: float) -> Rgba | None:
    hue = _parse_hue(channels[0])
    saturation = _parse_number(channels[1], percent_scale=100.0)
    lightness = _parse_number(channels[2], percent_scale=100.0)
    if hue is None or saturation is None or lightness is None:
        return None
    return hsla_to_rgba(Hsla(hue, saturation, lightness, alpha))


def _parse_oklch(channels: list[str], alpha: float) -> Rgba | None:
    lightness = _parse_number(channels[0], percent_scale=1.0)
    chroma = _parse_number(channels[1], percent_scale=0.4)
    hue = _parse_hue(channels[2])
    if lightness is None or chroma is None or hue is None:
        return None
    return oklch_to_rgba(lightness, chroma, hue, alpha)


def parse_color(value: object) -> Rgba | None:
    """Parse a CSS color string.

    Args:
        value: Candidate color (any object; non-strings never parse).

    Returns:
        The parsed color, or None if the value is not a recognised color.
    """
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None

    if match := _HEX_RE.match(text):
        return _parse_hex(match.group(1))

    if named := NAMED_COLORS.get(text.lower()):
        return named

    match = _FUNC_RE.match(text)
    if not match:
        return None
    kind = match.group(1).lower()
    channels, alpha_token = _split_arguments(match.group(2))
    if len(channels) != 3:
        return None
    alpha = _parse_alpha(alpha_token)
    if alpha is None:
        return None

    if kind.startswith("rgb"):
        return _parse_rgb(channels, alpha)
    if kind.startswith("hsl"):
        return _parse_hsl(channels, alpha)
    return _parse_oklch(channels, alpha)


def is_valid_color(value: object) -> bool:
    return parse_color(value) is not None


# =============================================================================
# Conversions
# =============================================================================


def to_hex(color: Rgba) -> str:
    """Format as ``#rrggbb`` (or ``#rrggbbaa`` when translucent)."""
    channels = [int(_clamp(js_round(channel), 0, 255)) for channel in color[:3]]
    hex_value = "#" + "".join(f"{channel:02x}" for channel in channels)
    if color.a < 1:
        hex_value += f"{int(_clamp(js_round(color.a * 255), 0, 255)):02x}"
    return hex_value


def rgba_to_hsla(color: Rgba) -> Hsla:
    """Unrounded HSL components."""
    h, l, s = colorsys.rgb_to_hls(color.r / 255, color.g / 255, color.b / 255)  # noqa: E741
    return Hsla(h * 360.0, s * 100.0, l * 100.0, color.a)


def hsla_to_rgba(color: Hsla) -> Rgba:
    hue = (color.h % 360.0) / 360.0
    saturation = _clamp(color.s, 0.0, 100.0) / 100.0
    lightness = _clamp(color.l, 0.0, 100.0) / 100.0
    r, g, b = colorsys.hls_to_rgb(hue, lightness, saturation)
    return Rgba(r * 255.0, g * 255.0, b * 255.0, _clamp(color.a, 0.0, 1.0))


def to_hsl(color: Rgba) -> Hsla:
    """HSL components rounded to whole numbers (alpha to 3 places)."""
    hsla = rgba_to_hsla(color)
    return Hsla(
        js_round(hsla.h) % 360,
        js_round(hsla.s),
        js_round(hsla.l),
        round(hsla.a, 3),
    )


def oklch_to_rgba(lightness: float, chroma: float, hue: float, alpha: float = 1.0) -> Rgba:
    """Convert OKLCH (L 0-1, C 0-0.4, H degrees) to clamped sRGB."""
    h_rad = math.radians(hue)
    a = chroma * math.cos(h_rad)
    b = chroma * math.sin(h_rad)

    l_ = (lightness + 0.3963377774 * a + 0.2158037573 * b) ** 3
    m_ = (lightness - 0.1055613458 * a - 0.0638541728 * b) ** 3
    s_ = (lightness - 0.0894841775 * a - 1.2914855480 * b) ** 3

    linear = (
        4.0767416621 * l_ - 3.3077115913 * m_ + 0.2309699292 * s_,
        -1.2684380046 * l_ + 2.6097574011 * m_ - 0.3413193965 * s_,
        -0.0041960863 * l_ - 0.7034186147 * m_ + 1.7076147010 * s_,
    )
    r, g, bl = (_clamp(_linear_to_srgb(channel), 0.0, 1.0) * 255.0 for channel in linear)
    return Rgba(r, g, bl, _clamp(alpha, 0.0, 1.0))


def _srgb_to_linear(channel: float) -> float:
    if channel <= 0.04045:
        return channel / 12.92
    return ((channel + 0.055) / 1.055) ** 2.4


def _linear_to_srgb(channel: float) -> float:
    if channel <= 0.0031308:
        return 12.92 * channel
    return 1.055 * channel ** (1 / 2.4) - 0.055


# D65 reference white
_WHITE = (0.95047, 1.0, 1.08883)


def _lab_f(t: float) -> float:
    return t ** (1 / 3) if t > 216 / 24389 else (24389 / 27 * t + 16) / 116


def _lab_f_inv(t: float) -> float:
    return t**3 if t**3 > 216 / 24389 else (116 * t - 16) / (24389 / 27)


def rgba_to_lab(color: Rgba) -> tuple[float, float, float, float]:
    """CIE L*a*b* (D65) components plus alpha."""
    r, g, b = (_srgb_to_linear(channel / 255.0) for channel in color[:3])
    x = (0.4124564 * r + 0.3575761 * g + 0.1804375 * b) / _WHITE[0]
    y = (0.2126729 * r + 0.7151522 * g + 0.0721750 * b) / _WHITE[1]
    z = (0.0193339 * r + 0.1191920 * g + 0.9503041 * b) / _WHITE[2]
    fx, fy, fz = _lab_f(x), _lab_f(y), _lab_f(z)
    return 116 * fy - 16, 500 * (fx - fy), 200 * (fy - fz), color.a


def lab_to_rgba(lightness: float, a: float, b: float, alpha: float = 1.0) -> Rgba:
    fy = (lightness + 16) / 116
    fx = fy + a / 500
    fz = fy - b / 200
    x = _lab_f_inv(fx) * _WHITE[0]
    y = _lab_f_inv(fy) * _WHITE[1]
    z = _lab_f_inv(fz) * _WHITE[2]
    linear = (
        3.2404542 * x - 1.5371385 * y - 0.4985314 * z,
        -0.9692660 * x + 1.8760108 * y + 0.0415560 * z,
        0.0556434 * x - 0.2040259 * y + 1.0572252 * z,
    )
    r, g, bl = (_clamp(_linear_to_srgb(channel), 0.0, 1.0) * 255.0 for channel in linear)
    return Rgba(r, g, bl, _clamp(alpha, 0.0, 1.0))


# =============================================================================
# Manipulation
# =============================================================================


def brightness(color: Rgba) -> float:
    """Perceived brightness (0-1) using the YIQ channel weights."""
    return (color.r * 299 + color.g * 587 + color.b * 114) / 1000 / 255


def is_dark(color: Rgba) -> bool:
    return brightness(color) < 0.5


def is_light(color: Rgba) -> bool:
    return brightness(color) >= 0.5


def adjust_hsl(
    color: Rgba,
    *,
    hue: float = 0.0,
    saturation: float = 0.0,
    lightness: float = 0.0,
) -> Rgba:
    """Shift HSL components by absolute points (hue in degrees, s/l in 0-100)."""
    hsla = rgba_to_hsla(color)
    return hsla_to_rgba(
        Hsla(
            hsla.h + hue,
            _clamp(hsla.s + saturation, 0.0, 100.0),
            _clamp(hsla.l + lightness, 0.0, 100.0),
            hsla.a,
        )
    )


def lighten(color: Rgba, amount: float = 0.1) -> Rgba:
    return adjust_hsl(color, lightness=amount * 100)


def darken(color: Rgba, amount: float = 0.1) -> Rgba:
    return adjust_hsl(color, lightness=-amount * 100)


def saturate(color: Rgba, amount: float = 0.1) -> Rgba:
    return adjust_hsl(color, saturation=amount * 100)


def desaturate(color: Rgba, amount: float = 0.1) -> Rgba:
    return adjust_hsl(color, saturation=-amount * 100)


def mix(first: Rgba, second: Rgba, ratio: float = 0.5) -> Rgba:
    """Mix two colors in CIE LAB space; ``ratio`` is the weight of ``second``."""
    ratio = _clamp(ratio, 0.0, 1.0)
    lab1 = rgba_to_lab(first)
    lab2 = rgba_to_lab(second)
    mixed = [c1 * (1 - ratio) + c2 * ratio for c1, c2 in zip(lab1, lab2, strict=True)]
    return lab_to_rgba(_clamp(mixed[0], 0.0, 100.0), mixed[1], mixed[2], mixed[3])
