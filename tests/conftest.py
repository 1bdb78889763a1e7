"""Shared pytest fixtures for themecraft tests."""

from pathlib import Path
from typing import Any

import pytest

from themecraft.core.ir import BuiltTheme
from themecraft.core.presets import create_base_theme


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Builds must not pick up strictness from the developer's shell."""
    monkeypatch.delenv("THEMECRAFT_ENV", raising=False)
    monkeypatch.delenv("THEMECRAFT_STRICT", raising=False)


@pytest.fixture
def light_theme() -> BuiltTheme:
    """Return the bundled light theme with fresh metadata."""
    return create_base_theme("light")


@pytest.fixture
def dark_theme() -> BuiltTheme:
    return create_base_theme("dark")


@pytest.fixture
def light_tokens(light_theme: BuiltTheme) -> dict[str, Any]:
    """Return the light theme as a plain token mapping."""
    return light_theme.to_tokens()


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """Return a temporary directory for configuration files."""
    directory = tmp_path / "themes"
    directory.mkdir()
    return directory
