"""
Variant profile IR types.

A variant profile is a bundle of numeric knobs grouped by token category.
Every knob defaults to the identity (multipliers 1, adjustments 0), so the
default profile leaves a theme's numbers untouched.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Knobs(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class SpacingProfile(_Knobs):
    multiplier: float = Field(default=1.0, gt=0.0)
    base_unit: str = Field(default="rem")


class TypographyProfile(_Knobs):
    size_multiplier: float = Field(default=1.0, gt=0.0)
    line_height_multiplier: float = Field(default=1.0, gt=0.0)
    font_weight_adjustment: int = Field(default=0, description="Added to numeric weights")


class ColorProfile(_Knobs):
    contrast_multiplier: float = Field(default=1.0, gt=0.0)
    saturation_multiplier: float = Field(default=1.0, ge=0.0)
    brightness_adjustment: float = Field(
        default=0.0, ge=-1.0, le=1.0, description="Added to HSL lightness (0-1 scale)"
    )


class MotionProfile(_Knobs):
    speed_multiplier: float = Field(default=1.0, gt=0.0)
    enable_animations: bool = Field(default=True)


class BorderProfile(_Knobs):
    width_multiplier: float = Field(default=1.0, ge=0.0)
    radius_multiplier: float = Field(default=1.0, ge=0.0)


class ShadowProfile(_Knobs):
    intensity_multiplier: float = Field(default=1.0, ge=0.0)
    blur_multiplier: float = Field(default=1.0, ge=0.0)


class VariantProfile(_Knobs):
    """Six multiplier groups applied uniformly across a theme."""

    spacing: SpacingProfile = Field(default_factory=SpacingProfile)
    typography: TypographyProfile = Field(default_factory=TypographyProfile)
    colors: ColorProfile = Field(default_factory=ColorProfile)
    motion: MotionProfile = Field(default_factory=MotionProfile)
    borders: BorderProfile = Field(default_factory=BorderProfile)
    shadows: ShadowProfile = Field(default_factory=ShadowProfile)
