"""
themecraft intermediate representation (IR) types.

Models are grouped by concern; everything is re-exported here.
"""

from .color import (
    SCALE_STEPS,
    STEP_LIGHTNESS,
    WCAG_THRESHOLDS,
    ColorScaleConfig,
    LightnessDistribution,
    SaturationCurve,
    TextSize,
    WCAGLevel,
)
from .config import BuilderConfig, ConflictResolutionConfig
from .theme import (
    REQUIRED_CATEGORIES,
    SEMANTIC_COLOR_GROUPS,
    SERIALIZATION_VERSION,
    SURFACE_COLOR_KEYS,
    TEXT_CONTRAST_PAIRS,
    AnimationCustomization,
    BorderColorCustomization,
    BuiltTheme,
    ColorConflictStrategy,
    ColorCustomization,
    ColorPairCustomization,
    CompositionMode,
    MotionCustomization,
    SerializedTheme,
    SurfaceColorCustomization,
    ThemeCustomization,
    ThemeMeta,
    ThemeVariant,
    TypographyCustomization,
    utc_timestamp,
)
from .validation import (
    CustomRule,
    IssueCategory,
    Severity,
    ValidationConfig,
    ValidationIssue,
    ValidationResult,
)
from .variant import (
    BorderProfile,
    ColorProfile,
    MotionProfile,
    ShadowProfile,
    SpacingProfile,
    TypographyProfile,
    VariantProfile,
)

__all__ = [
    # Color
    "SCALE_STEPS",
    "STEP_LIGHTNESS",
    "WCAG_THRESHOLDS",
    "ColorScaleConfig",
    "LightnessDistribution",
    "SaturationCurve",
    "TextSize",
    "WCAGLevel",
    # Config
    "BuilderConfig",
    "ConflictResolutionConfig",
    # Theme
    "REQUIRED_CATEGORIES",
    "SEMANTIC_COLOR_GROUPS",
    "SERIALIZATION_VERSION",
    "SURFACE_COLOR_KEYS",
    "TEXT_CONTRAST_PAIRS",
    "AnimationCustomization",
    "BorderColorCustomization",
    "BuiltTheme",
    "ColorConflictStrategy",
    "ColorCustomization",
    "ColorPairCustomization",
    "CompositionMode",
    "MotionCustomization",
    "SerializedTheme",
    "SurfaceColorCustomization",
    "ThemeCustomization",
    "ThemeMeta",
    "ThemeVariant",
    "TypographyCustomization",
    "utc_timestamp",
    # Validation
    "CustomRule",
    "IssueCategory",
    "Severity",
    "ValidationConfig",
    "ValidationIssue",
    "ValidationResult",
    # Variant
    "BorderProfile",
    "ColorProfile",
    "MotionProfile",
    "ShadowProfile",
    "SpacingProfile",
    "TypographyProfile",
    "VariantProfile",
]
