"""
Validation IR types: issues, results, and validator configuration.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .color import WCAGLevel
from .theme import BuiltTheme


class IssueCategory(StrEnum):
    """Category tag carried by every error and warning.

    The last four are used for advisory findings; contrast failures are
    reported under ``accessibility`` as errors too.
    """

    COLOR = "color"
    TYPOGRAPHY = "typography"
    SPACING = "spacing"
    MOTION = "motion"
    BREAKPOINT = "breakpoint"
    STRUCTURE = "structure"
    GENERAL = "general"
    ACCESSIBILITY = "accessibility"
    PERFORMANCE = "performance"
    COMPATIBILITY = "compatibility"
    BEST_PRACTICE = "best-practice"


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


class ValidationIssue(BaseModel):
    """A single validation error or warning."""

    model_config = ConfigDict(frozen=True)

    category: IssueCategory
    property: str = Field(description="Dotted path of the offending token")
    message: str
    suggestions: tuple[str, ...] = Field(default=())
    severity: Severity = Field(default=Severity.ERROR)


class ValidationResult:
    """Aggregated result of a validation run.

    Errors block (``valid`` is False); warnings are advisory only.
    """

    def __init__(self) -> None:
        self.errors: list[ValidationIssue] = []
        self.warnings: list[ValidationIssue] = []

    def add_error(
        self,
        category: IssueCategory,
        property: str,
        message: str,
        suggestions: list[str] | tuple[str, ...] = (),
    ) -> None:
        self.errors.append(
            ValidationIssue(
                category=category,
                property=property,
                message=message,
                suggestions=tuple(suggestions),
                severity=Severity.ERROR,
            )
        )

    def add_warning(
        self,
        category: IssueCategory,
        property: str,
        message: str,
        suggestions: list[str] | tuple[str, ...] = (),
    ) -> None:
        self.warnings.append(
            ValidationIssue(
                category=category,
                property=property,
                message=message,
                suggestions=tuple(suggestions),
                severity=Severity.WARNING,
            )
        )

    def extend(self, other: ValidationResult) -> None:
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    @property
    def valid(self) -> bool:
        return self.is_valid

    def errors_for(self, property: str) -> list[ValidationIssue]:
        """Errors whose property path equals or sits under ``property``."""
        return [
            error
            for error in self.errors
            if error.property == property or error.property.startswith(f"{property}.")
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.is_valid,
            "errors": [error.model_dump(mode="json") for error in self.errors],
            "warnings": [warning.model_dump(mode="json") for warning in self.warnings],
        }

    def __repr__(self) -> str:
        return f"ValidationResult(errors={len(self.errors)}, warnings={len(self.warnings)})"


class CustomRule(BaseModel):
    """Caller-supplied predicate run against the built theme."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: Severity = Field(default=Severity.ERROR)
    validator: Callable[[BuiltTheme], bool]
    message: str
    property: str = Field(default="theme", description="Path reported on failure")


class ValidationConfig(BaseModel):
    """Which category validators run, and how strictly."""

    model_config = ConfigDict(frozen=True)

    enable_color_validation: bool = True
    enable_typography_validation: bool = True
    enable_spacing_validation: bool = True
    enable_motion_validation: bool = True
    enable_accessibility_validation: bool = True
    enable_performance_validation: bool = True
    strict_mode: bool = Field(default=False, description="Report warnings as errors")
    wcag_level: WCAGLevel = Field(default=WCAGLevel.AA)
    custom_rules: tuple[CustomRule, ...] = Field(default=())
