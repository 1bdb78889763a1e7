"""Tests for environment overrides and theme configuration files."""

import logging

import pytest

from themecraft.core.builder import ThemeBuilder
from themecraft.core.config_loader import (
    ThemeConfigFile,
    load_theme_config,
    save_theme_config,
)
from themecraft.core.environment import (
    ThemecraftEnv,
    get_themecraft_env,
    resolve_builder_config,
    strict_mode_override,
)
from themecraft.core.errors import ThemeConfigError
from themecraft.core.ir import (
    BuilderConfig,
    ColorConflictStrategy,
    CompositionMode,
    ThemeCustomization,
    ThemeVariant,
    WCAGLevel,
)

# =============================================================================
# Environment
# =============================================================================


class TestGetThemecraftEnv:
    """Tests for get_themecraft_env."""

    def test_default_is_development(self):
        assert get_themecraft_env() == ThemecraftEnv.DEVELOPMENT

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("production", ThemecraftEnv.PRODUCTION),
            ("PROD", ThemecraftEnv.PRODUCTION),
            ("testing", ThemecraftEnv.TEST),
            (" dev ", ThemecraftEnv.DEVELOPMENT),
        ],
    )
    def test_aliases(self, monkeypatch, value, expected):
        monkeypatch.setenv("THEMECRAFT_ENV", value)

        assert get_themecraft_env() == expected

    def test_unknown_value_warns(self, monkeypatch, caplog):
        monkeypatch.setenv("THEMECRAFT_ENV", "staging")

        with caplog.at_level(logging.WARNING):
            assert get_themecraft_env() == ThemecraftEnv.DEVELOPMENT

        assert "Unknown THEMECRAFT_ENV value 'staging'" in caplog.text


class TestStrictModeOverride:
    """Tests for strict_mode_override and resolve_builder_config."""

    def test_unset(self):
        assert strict_mode_override() is None

    @pytest.mark.parametrize("value", ["1", "true", "YES", "on"])
    def test_truthy(self, monkeypatch, value):
        monkeypatch.setenv("THEMECRAFT_STRICT", value)

        assert strict_mode_override() is True

    @pytest.mark.parametrize("value", ["0", "false", "No", "off"])
    def test_falsy(self, monkeypatch, value):
        monkeypatch.setenv("THEMECRAFT_STRICT", value)

        assert strict_mode_override() is False

    def test_unrecognised_ignored(self, monkeypatch, caplog):
        monkeypatch.setenv("THEMECRAFT_STRICT", "maybe")

        with caplog.at_level(logging.WARNING):
            assert strict_mode_override() is None

        assert "maybe" in caplog.text

    def test_resolve_keeps_defaults(self):
        config = BuilderConfig()

        assert resolve_builder_config(config) is config

    def test_production_makes_default_strict(self, monkeypatch):
        monkeypatch.setenv("THEMECRAFT_ENV", "production")

        assert resolve_builder_config().strict_mode is True

    def test_explicit_setting_beats_production(self, monkeypatch):
        monkeypatch.setenv("THEMECRAFT_ENV", "production")

        config = resolve_builder_config(BuilderConfig(strict_mode=False))

        assert config.strict_mode is False

    def test_strict_variable_beats_explicit_setting(self, monkeypatch):
        monkeypatch.setenv("THEMECRAFT_STRICT", "off")

        config = resolve_builder_config(BuilderConfig(strict_mode=True, extension_timeout=2.0))

        assert config.strict_mode is False
        assert config.extension_timeout == 2.0


# =============================================================================
# Configuration files
# =============================================================================

YAML_CONFIG = """\
extends: dark
name: acme
author: Design Systems
variant: compact
composition_mode: merge
conflict_resolution:
  color_conflicts: prefer-override
builder:
  extension_timeout: 2.5
validation:
  wcag_level: AAA
customizations:
  colors:
    primary: "#7c3aed"
  spacing:
    md: 1.25rem
  radius: 0.375rem
"""

TOML_CONFIG = """\
extends = "futuristic"
variant = "comfortable"

[builder]
strict_mode = true

[customizations.colors]
primary = "#0d9488"

[customizations.zIndex]
modal = 5000
"""


class TestLoadThemeConfig:
    """Tests for load_theme_config."""

    def test_yaml(self, config_dir, caplog):
        path = config_dir / "theme.yaml"
        path.write_text(YAML_CONFIG)

        with caplog.at_level(logging.INFO):
            config = load_theme_config(path)

        assert config.extends == "dark"
        assert config.name == "acme"
        assert config.variant == ThemeVariant.COMPACT
        assert config.composition_mode == CompositionMode.MERGE
        assert config.conflict_resolution.color_conflicts == ColorConflictStrategy.PREFER_OVERRIDE
        assert config.builder.extension_timeout == 2.5
        assert config.validation.wcag_level == WCAGLevel.AAA
        assert config.customizations.to_overlay() == {
            "colors": {"primary": "#7c3aed"},
            "spacing": {"md": "1.25rem"},
            "radius": "0.375rem",
        }
        assert "Loaded theme configuration" in caplog.text

    def test_toml(self, config_dir):
        path = config_dir / "theme.toml"
        path.write_text(TOML_CONFIG)

        config = load_theme_config(path)

        assert config.extends == "futuristic"
        assert config.builder.strict_mode is True
        assert config.customizations.to_overlay() == {
            "colors": {"primary": "#0d9488"},
            "zIndex": {"modal": 5000},
        }

    def test_missing_file(self, config_dir):
        with pytest.raises(ThemeConfigError, match="not found"):
            load_theme_config(config_dir / "nope.yaml")

    def test_empty_file_uses_defaults(self, config_dir, caplog):
        path = config_dir / "empty.yml"
        path.write_text("")

        with caplog.at_level(logging.WARNING):
            config = load_theme_config(path)

        assert config == ThemeConfigFile()
        assert "Empty theme configuration" in caplog.text

    def test_invalid_yaml(self, config_dir):
        path = config_dir / "broken.yaml"
        path.write_text("extends: [dark\n")

        with pytest.raises(ThemeConfigError, match="Invalid YAML"):
            load_theme_config(path)

    def test_invalid_toml(self, config_dir):
        path = config_dir / "broken.toml"
        path.write_text("extends = \n")

        with pytest.raises(ThemeConfigError, match="Invalid TOML"):
            load_theme_config(path)

    def test_unsupported_suffix(self, config_dir):
        path = config_dir / "theme.json"
        path.write_text("{}")

        with pytest.raises(ThemeConfigError) as exc_info:
            load_theme_config(path)

        assert exc_info.value.context["supported"] == [".yaml", ".yml", ".toml"]

    def test_non_mapping(self, config_dir):
        path = config_dir / "list.yaml"
        path.write_text("- dark\n- light\n")

        with pytest.raises(ThemeConfigError, match="must be a mapping"):
            load_theme_config(path)

    def test_unknown_key_rejected(self, config_dir):
        path = config_dir / "theme.yaml"
        path.write_text("extends: dark\npalette: {}\n")

        with pytest.raises(ThemeConfigError, match="Invalid theme configuration"):
            load_theme_config(path)

    def test_unknown_variant_rejected(self, config_dir):
        path = config_dir / "theme.yaml"
        path.write_text("variant: roomy\n")

        with pytest.raises(ThemeConfigError):
            load_theme_config(path)


class TestSaveThemeConfig:
    """Tests for save_theme_config."""

    def test_round_trip(self, config_dir):
        config = ThemeConfigFile(
            extends="dark",
            name="acme",
            variant=ThemeVariant.HIGH_CONTRAST,
            customizations=ThemeCustomization.model_validate(
                {"colors": {"primary": "#7c3aed"}, "zIndex": {"modal": 5000}}
            ),
        )

        path = save_theme_config(config, config_dir / "saved.yaml")
        reloaded = load_theme_config(path)

        assert reloaded.extends == "dark"
        assert reloaded.name == "acme"
        assert reloaded.variant == ThemeVariant.HIGH_CONTRAST
        assert reloaded.customizations.to_overlay() == config.customizations.to_overlay()

    def test_written_as_plain_yaml(self, config_dir):
        path = save_theme_config(ThemeConfigFile(extends="dark"), config_dir / "saved.yaml")

        text = path.read_text()

        assert text.startswith("extends: dark\n")
        assert "customizations: {}" in text
        assert "custom_rules" not in text


class TestFromConfigFile:
    """Tests for ThemeBuilder.from_config_file."""

    def test_builds_configured_theme(self, config_dir):
        path = config_dir / "theme.yaml"
        path.write_text(YAML_CONFIG)

        builder = ThemeBuilder.from_config_file(path)
        theme = builder.build_sync()

        assert theme.meta.base_theme == "dark"
        assert theme.meta.name == "acme"
        assert theme.meta.author == "Design Systems"
        assert theme.meta.variant == ThemeVariant.COMPACT
        assert theme.colors["primary"]["DEFAULT"] == "#7c3aed"
        assert theme.spacing["md"] == "0.9375rem"
        assert builder.config.extension_timeout == 2.5

    def test_toml_builder_is_strict(self, config_dir):
        path = config_dir / "theme.toml"
        path.write_text(TOML_CONFIG)

        builder = ThemeBuilder.from_config_file(path)

        assert builder.config.strict_mode is True
        assert builder.variant == ThemeVariant.COMFORTABLE

    def test_config_validation_level_applies(self, config_dir):
        path = config_dir / "theme.yaml"
        path.write_text("validation:\n  wcag_level: AAA\n")

        builder = ThemeBuilder.from_config_file(path)
        builder.build_sync()

        assert builder.validation_result.errors_for("colors.mutedForeground")

    def test_missing_file(self, config_dir):
        with pytest.raises(ThemeConfigError):
            ThemeBuilder.from_config_file(config_dir / "missing.toml")
