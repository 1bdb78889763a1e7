"""
Environment configuration for theme builds.

Two environment variables adjust how strictly builds treat validation:

    THEMECRAFT_ENV     development (default) | test | production
    THEMECRAFT_STRICT  1/true/yes/on or 0/false/no/off

Production builds are strict unless the builder configuration sets
``strict_mode`` explicitly. ``THEMECRAFT_STRICT`` wins over both.

Usage:
    from themecraft.core.environment import resolve_builder_config

    config = resolve_builder_config(BuilderConfig())
"""

from __future__ import annotations

import logging
import os
from enum import StrEnum

from .ir.config import BuilderConfig

logger = logging.getLogger(__name__)


class ThemecraftEnv(StrEnum):
    """Runtime environment values."""

    DEVELOPMENT = "development"
    TEST = "test"
    PRODUCTION = "production"


THEMECRAFT_ENV_VAR = "THEMECRAFT_ENV"
THEMECRAFT_STRICT_VAR = "THEMECRAFT_STRICT"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def get_themecraft_env() -> ThemecraftEnv:
    """Get the current environment from THEMECRAFT_ENV.

    Returns:
        ThemecraftEnv: development, test, or production.
        Defaults to development if THEMECRAFT_ENV is not set or invalid.
    """
    env_value = os.environ.get(THEMECRAFT_ENV_VAR, "").lower().strip()

    if env_value in ("production", "prod"):
        return ThemecraftEnv.PRODUCTION
    elif env_value in ("test", "testing"):
        return ThemecraftEnv.TEST
    elif env_value in ("development", "dev", ""):
        return ThemecraftEnv.DEVELOPMENT
    else:
        logger.warning(
            "Unknown THEMECRAFT_ENV value '%s'. "
            "Valid values: development, test, production. Defaulting to development.",
            env_value,
        )
        return ThemecraftEnv.DEVELOPMENT


def strict_mode_override() -> bool | None:
    """Strict mode forced by THEMECRAFT_STRICT, or None when unset/unrecognised."""
    value = os.environ.get(THEMECRAFT_STRICT_VAR, "").lower().strip()
    if not value:
        return None
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    logger.warning("Ignoring unrecognised THEMECRAFT_STRICT value '%s'", value)
    return None


def resolve_builder_config(config: BuilderConfig | None = None) -> BuilderConfig:
    """Apply environment overrides to a builder configuration."""
    config = config or BuilderConfig()
    override = strict_mode_override()
    if override is not None:
        strict = override
    elif "strict_mode" in config.model_fields_set:
        strict = config.strict_mode
    else:
        strict = get_themecraft_env() == ThemecraftEnv.PRODUCTION

    if strict == config.strict_mode:
        return config
    return config.model_copy(update={"strict_mode": strict})
