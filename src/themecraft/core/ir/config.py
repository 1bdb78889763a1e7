"""
Builder and composition configuration types.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .theme import ColorConflictStrategy


class ConflictResolutionConfig(BaseModel):
    """How color conflicts are resolved when composing themes."""

    model_config = ConfigDict(frozen=True)

    color_conflicts: ColorConflictStrategy = Field(
        default=ColorConflictStrategy.AUTO, description="Color conflict strategy"
    )
    preserve_accessibility: bool = Field(
        default=True, description="Force readable foregrounds after resolution"
    )
    prioritize_user_customizations: bool = Field(default=True)
    allow_partial_overrides: bool = Field(default=True)


class BuilderConfig(BaseModel):
    """Options controlling a ThemeBuilder's build pipeline."""

    model_config = ConfigDict(frozen=True)

    enable_validation: bool = Field(default=True, description="Validate after each build")
    strict_mode: bool = Field(default=False, description="Raise when validation fails")
    generate_css_variables: bool = Field(
        default=True, description="Expose output variables to after-build hooks"
    )
    accessibility_checks: bool = Field(default=True)
    enable_extensions: bool = Field(default=True, description="Run registered extension hooks")
    extension_timeout: float = Field(
        default=5.0, gt=0.0, description="Seconds allowed per extension hook"
    )
