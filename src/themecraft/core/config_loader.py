"""
Theme configuration files.

A configuration file describes a theme declaratively: which base theme it
extends, the variant and composition mode, conflict resolution, builder
options, and the customization patch. YAML and TOML are both accepted:

    # theme.yaml
    extends: dark
    variant: compact
    builder:
      strict_mode: true
    customizations:
      colors:
        primary: "#7c3aed"
      radius: 0.375rem
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ThemeConfigError
from .ir.config import BuilderConfig, ConflictResolutionConfig
from .ir.theme import CompositionMode, ThemeCustomization, ThemeVariant
from .ir.validation import ValidationConfig
from .presets import DEFAULT_BASE_THEME

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")
TOML_SUFFIXES = (".toml",)


class ThemeConfigFile(BaseModel):
    """Declarative theme configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    extends: str = Field(default=DEFAULT_BASE_THEME, description="Base theme registry name")
    name: str | None = Field(default=None, description="Name recorded in theme metadata")
    version: str | None = None
    description: str | None = None
    author: str | None = None
    variant: ThemeVariant = Field(default=ThemeVariant.DEFAULT)
    composition_mode: CompositionMode = Field(default=CompositionMode.MERGE)
    conflict_resolution: ConflictResolutionConfig = Field(
        default_factory=ConflictResolutionConfig
    )
    builder: BuilderConfig = Field(default_factory=BuilderConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    customizations: ThemeCustomization = Field(default_factory=ThemeCustomization)


def _read_data(path: Path) -> Any:
    suffix = path.suffix.lower()
    if suffix in YAML_SUFFIXES:
        try:
            return yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ThemeConfigError(f"Invalid YAML in {path}: {e}") from e
    if suffix in TOML_SUFFIXES:
        try:
            with path.open("rb") as f:
                return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ThemeConfigError(f"Invalid TOML in {path}: {e}") from e
    raise ThemeConfigError(
        f"Unsupported configuration format: {path.suffix or '(none)'}",
        {"supported": [*YAML_SUFFIXES, *TOML_SUFFIXES]},
    )


def load_theme_config(path: Path | str) -> ThemeConfigFile:
    """Load a theme configuration file.

    Args:
        path: YAML or TOML file.

    Returns:
        ThemeConfigFile instance. An empty file yields the defaults.

    Raises:
        ThemeConfigError: If the file is missing, unreadable, or invalid.
    """
    path = Path(path)
    if not path.exists():
        raise ThemeConfigError(f"Theme configuration not found: {path}")

    data = _read_data(path)
    if not data:
        logger.warning(f"Empty theme configuration at {path}, using defaults")
        return ThemeConfigFile()
    if not isinstance(data, dict):
        raise ThemeConfigError(f"Theme configuration must be a mapping: {path}")

    try:
        config = ThemeConfigFile.model_validate(data)
    except ValidationError as e:
        raise ThemeConfigError(f"Invalid theme configuration in {path}: {e}") from e

    logger.info(f"Loaded theme configuration from {path}")
    return config


def save_theme_config(config: ThemeConfigFile, path: Path | str) -> Path:
    """Save a theme configuration as YAML.

    Custom validation rules are code, not data, and are not written.

    Returns:
        Path to the saved file.
    """
    path = Path(path)
    data = config.model_dump(
        mode="json",
        exclude={"validation": {"custom_rules"}},
        exclude_none=True,
    )
    data["customizations"] = config.customizations.to_overlay()

    path.write_text(
        yaml.dump(
            data,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        ),
        encoding="utf-8",
    )

    logger.info(f"Saved theme configuration to {path}")
    return path
