"""
Color scale IR types and accessibility thresholds.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class SaturationCurve(StrEnum):
    """Saturation attenuation across the lightness scale."""

    LINEAR = "linear"
    EASE_IN = "ease-in"
    EASE_OUT = "ease-out"
    EASE_IN_OUT = "ease-in-out"


class LightnessDistribution(StrEnum):
    LINEAR = "linear"
    PERCEPTUAL = "perceptual"


class WCAGLevel(StrEnum):
    AA = "AA"
    AAA = "AAA"


class TextSize(StrEnum):
    NORMAL = "normal"
    LARGE = "large"


# Scale step keys and their fixed HSL lightness targets
SCALE_STEPS: tuple[str, ...] = (
    "50",
    "100",
    "200",
    "300",
    "400",
    "500",
    "600",
    "700",
    "800",
    "900",
    "950",
)

STEP_LIGHTNESS: dict[str, float] = {
    "50": 95.0,
    "100": 90.0,
    "200": 80.0,
    "300": 70.0,
    "400": 60.0,
    "500": 50.0,
    "600": 40.0,
    "700": 30.0,
    "800": 20.0,
    "900": 10.0,
    "950": 5.0,
}

# Minimum contrast ratios by level and text size
WCAG_THRESHOLDS: dict[WCAGLevel, dict[TextSize, float]] = {
    WCAGLevel.AA: {TextSize.NORMAL: 4.5, TextSize.LARGE: 3.0},
    WCAGLevel.AAA: {TextSize.NORMAL: 7.0, TextSize.LARGE: 4.5},
}


class ColorScaleConfig(BaseModel):
    """Configuration for scale generation.

    Step lightness is fixed by ``STEP_LIGHTNESS``. Only ``saturation_curve``
    changes the generated colors; the lightness fields are carried for
    callers that record their intent and are not applied.
    """

    model_config = ConfigDict(frozen=True)

    steps: int = Field(default=11, description="Number of scale steps (fixed at 11)")
    min_lightness: float = Field(default=5.0, ge=0.0, le=100.0)
    max_lightness: float = Field(default=95.0, ge=0.0, le=100.0)
    saturation_curve: SaturationCurve = Field(default=SaturationCurve.EASE_OUT)
    lightness_distribution: LightnessDistribution = Field(
        default=LightnessDistribution.PERCEPTUAL
    )
