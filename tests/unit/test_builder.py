"""Unit tests for ThemeBuilder."""

import asyncio
import logging

import pytest

from themecraft.core.builder import ThemeBuilder, create_theme_builder, quick_theme
from themecraft.core.errors import (
    CompositionError,
    ThemeIntegrityError,
    ThemeValidationFailedError,
)
from themecraft.core.events import BuilderEventType
from themecraft.core.extensions import ExtensionPriority, ThemeExtension
from themecraft.core.ir import (
    BuilderConfig,
    BuiltTheme,
    ColorConflictStrategy,
    CompositionMode,
    CustomRule,
    ThemeCustomization,
    ThemeVariant,
    ValidationConfig,
)

# =============================================================================
# Configuration Tests
# =============================================================================


class TestFluentConfiguration:
    """Tests for the immutable fluent API."""

    def test_with_calls_return_new_builders(self):
        builder = ThemeBuilder()

        customized = builder.with_colors({"primary": "#7c3aed"})

        assert customized is not builder
        assert builder.build_sync().colors["primary"]["DEFAULT"] == "#2563eb"
        assert customized.build_sync().colors["primary"]["DEFAULT"] == "#7c3aed"

    def test_defaults_to_light(self):
        theme = ThemeBuilder().build_sync()

        assert theme.meta.base_theme == "light"
        assert theme.colors["background"] == "#ffffff"

    def test_extends_named_theme(self):
        theme = ThemeBuilder().extends("dark").build_sync()

        assert theme.meta.base_theme == "dark"
        assert theme.colors["background"] == "#0a0a0a"

    def test_extends_unknown_falls_back(self, caplog):
        with caplog.at_level(logging.WARNING):
            theme = ThemeBuilder().extends("cyberpunk").build_sync()

        assert theme.meta.base_theme == "light"
        assert "Unknown base theme 'cyberpunk'" in caplog.text

    def test_extends_built_theme(self, dark_theme):
        theme = ThemeBuilder().extends(dark_theme).build_sync()

        assert theme.colors == dark_theme.colors
        assert theme.meta.created_at == dark_theme.meta.created_at

    def test_extends_raw_tokens(self, light_tokens):
        del light_tokens["meta"]
        light_tokens["colors"]["ring"] = "#7c3aed"

        theme = ThemeBuilder().extends(light_tokens).build_sync()

        assert theme.colors["ring"] == "#7c3aed"
        assert theme.meta.base_theme == "custom"

    def test_customizations_accumulate(self):
        theme = (
            ThemeBuilder()
            .with_spacing({"md": "2rem"})
            .with_spacing({"lg": "3rem"})
            .with_typography({"fontFamily": "Inter, sans-serif"})
            .with_motion({"duration": {"fast": "100ms"}})
            .with_breakpoints({"2xl": "1536px"})
            .with_z_index({"modal": 5000})
            .with_shadows({"lg": "none"})
            .build_sync()
        )

        assert theme.spacing["md"] == "2rem"
        assert theme.spacing["lg"] == "3rem"
        assert theme.typography["fontFamily"] == "Inter, sans-serif"
        assert theme.motion["duration"]["fast"] == "100ms"
        assert theme.breakpoints["2xl"] == "1536px"
        assert theme.z_index["modal"] == 5000
        assert theme.shadows["lg"] == "none"

    def test_with_radius_scalar_expands(self):
        theme = ThemeBuilder().with_radius("0.25rem").build_sync()

        assert theme.radius["md"] == "0.25rem"
        assert theme.radius["none"] == "0"

    def test_with_animations(self):
        theme = ThemeBuilder().with_animations({"duration": {"fast": "90ms"}}).build_sync()

        assert theme.animations["duration"]["fast"] == "90ms"
        assert theme.animations["duration"]["slow"] == "500ms"

    def test_with_customizations_bulk(self):
        customization = ThemeCustomization(
            colors={"primary": "#7c3aed"}, spacing={"md": "2rem"}
        )

        theme = ThemeBuilder().with_customizations(customization).build_sync()

        assert theme.colors["primary"]["DEFAULT"] == "#7c3aed"
        assert theme.spacing["md"] == "2rem"
        assert theme.meta.customizations["spacing"] == {"md": "2rem"}

    def test_invalid_customization_rejected(self):
        with pytest.raises(ValueError):
            ThemeBuilder().with_customizations({"fonts": {}})

    def test_with_variant(self):
        theme = ThemeBuilder().with_variant("compact").build_sync()

        assert theme.meta.variant == ThemeVariant.COMPACT
        assert theme.spacing["md"] == "0.75rem"

    def test_with_custom_variant_profile(self):
        theme = (
            ThemeBuilder()
            .with_variant(ThemeVariant.CUSTOM, {"spacing": {"multiplier": 2}})
            .build_sync()
        )

        assert theme.spacing["md"] == "2rem"
        assert theme.meta.variant == ThemeVariant.CUSTOM

    def test_with_composition_mode(self):
        theme = (
            ThemeBuilder()
            .with_composition_mode(CompositionMode.EXTEND)
            .with_spacing({"md": "9rem", "3xl": "4rem"})
            .build_sync()
        )

        assert theme.spacing["md"] == "1rem"
        assert theme.spacing["3xl"] == "4rem"
        assert theme.meta.composition_mode == CompositionMode.EXTEND

    def test_unknown_composition_mode(self):
        with pytest.raises(CompositionError):
            ThemeBuilder().with_composition_mode("splice")

    def test_with_conflict_resolution_partial(self):
        builder = ThemeBuilder().with_conflict_resolution(
            {"color_conflicts": ColorConflictStrategy.PREFER_BASE}
        )

        theme = builder.with_colors({"surface": {"background": "#000000"}}).build_sync()

        assert theme.colors["background"] == "#ffffff"

    def test_with_meta(self):
        theme = ThemeBuilder().with_meta({"name": "acme", "author": "Design"}).build_sync()

        assert theme.meta.name == "acme"
        assert theme.meta.author == "Design"
        assert theme.meta.version == "1.0.0"

    def test_clone_is_independent(self):
        builder = ThemeBuilder().with_spacing({"md": "2rem"})

        clone = builder.clone().with_spacing({"md": "3rem"})

        assert builder.build_sync().spacing["md"] == "2rem"
        assert clone.build_sync().spacing["md"] == "3rem"

    def test_reset_keeps_base(self):
        builder = ThemeBuilder().extends("dark").with_spacing({"md": "2rem"}).with_variant(
            "compact"
        )

        theme = builder.reset().build_sync()

        assert theme.colors["background"] == "#0a0a0a"
        assert theme.spacing["md"] == "1rem"
        assert theme.meta.variant == ThemeVariant.DEFAULT


# =============================================================================
# Build Tests
# =============================================================================


class TestBuildSync:
    """Tests for build_sync and caching."""

    def test_caches_result(self):
        builder = ThemeBuilder()

        assert not builder.is_cached()
        first = builder.build_sync()

        assert builder.is_cached()
        assert builder.build_sync() is first

    def test_metadata_stamped(self):
        theme = ThemeBuilder().build_sync()

        assert theme.meta.name == "light-theme"
        assert theme.meta.created_at is not None
        assert theme.meta.updated_at >= theme.meta.created_at
        assert theme.meta.composition_mode == CompositionMode.MERGE

    def test_builds_do_not_alias(self):
        builder = ThemeBuilder()

        first = builder.build_sync()
        second = builder.clone().build_sync()

        first.colors["background"] = "#123456"
        assert second.colors["background"] == "#ffffff"

    def test_skips_extensions_with_warning(self, caplog):
        extension = ThemeExtension(
            name="ring", before_build=lambda ctx: {"colors": {"ring": "#ff00aa"}}
        )
        builder = ThemeBuilder().with_extension(extension)

        with caplog.at_level(logging.WARNING):
            theme = builder.build_sync()

        assert theme.colors["ring"] == "#2563eb"
        assert theme.meta.plugins == []
        assert "skips 1 registered extension" in caplog.text


class TestStrictMode:
    """Tests for strict and non-strict failure semantics."""

    def _broken(self, config=None):
        return ThemeBuilder(config).with_colors({"border": {"ring": "blurple"}})

    def test_non_strict_returns_invalid_theme(self):
        builder = self._broken()

        theme = builder.build_sync()

        assert theme.colors["ring"] == "blurple"
        assert not builder.validation_result.is_valid

    def test_strict_raises(self):
        builder = self._broken(BuilderConfig(strict_mode=True))

        with pytest.raises(ThemeValidationFailedError) as exc_info:
            builder.build_sync()

        assert str(exc_info.value) == "Theme validation failed: Invalid color value: 'blurple'"
        assert not exc_info.value.result.is_valid
        assert not builder.is_cached()

    @pytest.mark.asyncio
    async def test_strict_async_raises(self):
        builder = self._broken(BuilderConfig(strict_mode=True))

        with pytest.raises(ThemeValidationFailedError):
            await builder.build()

    def test_strict_without_validation_returns(self):
        builder = self._broken(BuilderConfig(strict_mode=True, enable_validation=False))

        assert builder.build_sync().colors["ring"] == "blurple"

    def test_strict_warnings_do_not_block(self):
        theme = ThemeBuilder(BuilderConfig(strict_mode=True)).build_sync()

        assert isinstance(theme, BuiltTheme)

    def test_custom_validation_config(self):
        rule = CustomRule(name="named", validator=lambda t: False, message="Name required")
        builder = ThemeBuilder(BuilderConfig(strict_mode=True)).with_validation_config(
            ValidationConfig(custom_rules=(rule,))
        )

        with pytest.raises(ThemeValidationFailedError, match="Name required"):
            builder.build_sync()

    def test_production_env_defaults_to_strict(self, monkeypatch):
        monkeypatch.setenv("THEMECRAFT_ENV", "production")

        assert ThemeBuilder().config.strict_mode is True
        assert ThemeBuilder(BuilderConfig(strict_mode=False)).config.strict_mode is False


class TestAsyncBuild:
    """Tests for the extension-hook build path."""

    @pytest.mark.asyncio
    async def test_build_without_extensions_matches_sync(self):
        builder = ThemeBuilder().with_colors({"primary": "#7c3aed"}).with_variant("compact")

        built = await builder.build()
        expected = builder.clone().build_sync()

        assert built.colors == expected.colors
        assert built.spacing == expected.spacing

    @pytest.mark.asyncio
    async def test_before_build_patch_is_customized_over(self):
        extension = ThemeExtension(
            name="base-spacing",
            before_build=lambda ctx: {"spacing": {"md": "5rem", "lg": "6rem"}},
        )
        builder = ThemeBuilder().with_extension(extension).with_spacing({"md": "2rem"})

        theme = await builder.build()

        assert theme.spacing["md"] == "2rem"
        assert theme.spacing["lg"] == "6rem"

    @pytest.mark.asyncio
    async def test_after_build_sees_variables(self):
        seen = {}

        def hook(ctx):
            seen["background"] = ctx.output_variables["--background"]
            seen["variant"] = ctx.variant
            return {"colors": {"ring": "#ff00aa"}}

        builder = (
            ThemeBuilder()
            .with_variant("compact")
            .with_extension(ThemeExtension(name="after", after_build=hook))
        )

        theme = await builder.build()

        assert seen == {"background": "#ffffff", "variant": "compact"}
        assert theme.colors["ring"] == "#ff00aa"
        assert theme.meta.plugins == ["after"]

    @pytest.mark.asyncio
    async def test_failing_extension_does_not_abort(self):
        def broken(ctx):
            raise RuntimeError("boom")

        builder = (
            ThemeBuilder()
            .with_extension(ThemeExtension(name="broken", before_build=broken))
            .with_extension(
                ThemeExtension(
                    name="ok",
                    after_build=lambda ctx: {"colors": {"ring": "#ff00aa"}},
                    priority=ExtensionPriority.LOW,
                )
            )
        )

        theme = await builder.build()

        assert theme.colors["ring"] == "#ff00aa"

    @pytest.mark.asyncio
    async def test_timed_out_extension_discarded(self):
        async def slow(ctx):
            await asyncio.sleep(5)
            return {"colors": {"ring": "#000000"}}

        builder = ThemeBuilder(BuilderConfig(extension_timeout=0.05)).with_extension(
            ThemeExtension(name="slow", before_build=slow)
        )

        theme = await builder.build()

        assert theme.colors["ring"] == "#2563eb"

    @pytest.mark.asyncio
    async def test_extensions_disabled(self):
        builder = ThemeBuilder(BuilderConfig(enable_extensions=False)).with_extension(
            ThemeExtension(name="ring", after_build=lambda ctx: {"colors": {"ring": "#ff00aa"}})
        )

        theme = await builder.build()

        assert theme.colors["ring"] == "#2563eb"

    @pytest.mark.asyncio
    async def test_preview_does_not_cache(self):
        builder = ThemeBuilder()

        await builder.preview()

        assert not builder.is_cached()

    @pytest.mark.asyncio
    async def test_build_and_validate(self):
        theme, result = await ThemeBuilder().build_and_validate()

        assert isinstance(theme, BuiltTheme)
        assert result.is_valid

    def test_with_extension_replaces_same_name(self):
        first = ThemeExtension(name="ring")
        second = ThemeExtension(name="ring", version="2.0.0")

        builder = ThemeBuilder().with_extension(first).with_extension(second)

        assert builder.extensions == (second,)
        assert builder.without_extension("ring").extensions == ()

    @pytest.mark.asyncio
    async def test_build_after_build_sync_runs_hooks(self):
        builder = ThemeBuilder().with_extension(
            ThemeExtension(name="ring", before_build=lambda ctx: {"colors": {"ring": "#ff00aa"}})
        )

        plain = builder.build_sync()
        hooked = await builder.build()

        assert plain.colors["ring"] == "#2563eb"
        assert hooked.colors["ring"] == "#ff00aa"
        assert hooked.meta.plugins == ["ring"]
        assert await builder.build() is hooked
        assert builder.build_sync() is plain

    @pytest.mark.asyncio
    async def test_build_without_hooks_shares_sync_cache(self):
        builder = ThemeBuilder()

        theme = await builder.build()

        assert builder.build_sync() is theme
        assert theme.meta.plugins == []

    @pytest.mark.asyncio
    async def test_validate_prefers_hooked_theme(self):
        builder = ThemeBuilder().with_extension(
            ThemeExtension(name="ring", after_build=lambda ctx: {"colors": {"ring": "blurple"}})
        )

        builder.build_sync()
        await builder.build()

        assert [error.property for error in builder.validate().errors] == ["colors.ring"]


class TestEvents:
    """Tests for builder lifecycle listeners."""

    def _recorder(self):
        seen = []
        return seen, seen.append

    def test_theme_built(self):
        seen, listener = self._recorder()
        builder = ThemeBuilder().add_listener(BuilderEventType.THEME_BUILT, listener)

        theme = builder.build_sync()
        builder.build_sync()

        assert [event.type for event in seen] == [BuilderEventType.THEME_BUILT]
        assert seen[0].data["theme"] is theme

    def test_customization_applied(self):
        seen, listener = self._recorder()

        ThemeBuilder().add_listener("customization-applied", listener).with_spacing(
            {"md": "2rem"}
        ).build_sync()

        assert seen[0].data["customization"].to_overlay() == {"spacing": {"md": "2rem"}}

    def test_no_customization_event_without_overlay(self):
        seen, listener = self._recorder()

        ThemeBuilder().add_listener("customization-applied", listener).build_sync()

        assert seen == []

    def test_validation_events(self):
        errors, on_error = self._recorder()
        warnings, on_warning = self._recorder()
        builder = (
            ThemeBuilder()
            .add_listener(BuilderEventType.VALIDATION_ERROR, on_error)
            .add_listener(BuilderEventType.VALIDATION_WARNING, on_warning)
            .with_colors({"border": {"ring": "blurple"}})
        )

        builder.build_sync()

        assert [issue.property for issue in errors[0].data["errors"]] == ["colors.ring"]
        assert warnings[0].data["warnings"]

    def test_plugin_events(self):
        seen, listener = self._recorder()
        extension = ThemeExtension(name="ring")
        builder = (
            ThemeBuilder()
            .add_listener(BuilderEventType.PLUGIN_REGISTERED, listener)
            .add_listener(BuilderEventType.PLUGIN_UNREGISTERED, listener)
        )

        builder.with_extension(extension).without_extension("ring").without_extension("ring")

        assert [event.type for event in seen] == [
            BuilderEventType.PLUGIN_REGISTERED,
            BuilderEventType.PLUGIN_UNREGISTERED,
        ]
        assert seen[0].data["plugin"] is extension
        assert seen[1].data["plugin_name"] == "ring"

    def test_listeners_are_per_builder(self):
        seen, listener = self._recorder()
        base = ThemeBuilder()

        listening = base.add_listener(BuilderEventType.THEME_BUILT, listener)
        base.build_sync()
        muted = listening.remove_listener(BuilderEventType.THEME_BUILT, listener)
        muted.build_sync()

        assert seen == []
        listening.clone().build_sync()
        assert len(seen) == 1

    def test_failing_listener_does_not_break_build(self, caplog):
        def broken(event):
            raise RuntimeError("boom")

        builder = ThemeBuilder().add_listener(BuilderEventType.THEME_BUILT, broken)

        with caplog.at_level(logging.WARNING):
            theme = builder.build_sync()

        assert isinstance(theme, BuiltTheme)
        assert "Listener for 'theme-built' failed: boom" in caplog.text

    def test_unknown_event_rejected(self):
        with pytest.raises(ValueError):
            ThemeBuilder().add_listener("theme-exploded", print)


# =============================================================================
# Validation, Persistence and Output Tests
# =============================================================================


class TestBuilderServices:
    """Tests for validate, serialize, deserialize and generate_css_variables."""

    def test_validate_given_theme(self, light_tokens):
        del light_tokens["colors"]["warning"]

        result = ThemeBuilder().validate(light_tokens)

        assert [error.property for error in result.errors] == ["colors.warning"]

    def test_validate_without_build(self):
        builder = ThemeBuilder()

        assert builder.validate().is_valid
        assert not builder.is_cached()

    def test_serialize_round_trip(self):
        builder = ThemeBuilder().extends("dark").with_variant("comfortable")
        data = builder.serialize()

        restored = ThemeBuilder.deserialize(data)

        assert restored.is_cached()
        assert restored.build_sync().to_tokens() == builder.build_sync().to_tokens()

    def test_deserialize_rejects_tampering(self):
        data = ThemeBuilder().serialize()
        data["theme"]["spacing"]["md"] = "4rem"

        with pytest.raises(ThemeIntegrityError):
            ThemeBuilder.deserialize(data)

    def test_deserialized_builder_can_be_customized(self):
        data = ThemeBuilder().extends("dark").serialize()

        theme = ThemeBuilder.deserialize(data).with_spacing({"md": "2rem"}).build_sync()

        assert theme.spacing["md"] == "2rem"
        assert theme.colors["background"] == "#0a0a0a"

    def test_generate_css_variables(self):
        variables = ThemeBuilder().with_radius("0.25rem").generate_css_variables()

        assert variables["--radius-md"] == "0.25rem"
        assert variables["--background"] == "#ffffff"

    def test_generate_css_variables_prefix(self, light_theme):
        variables = ThemeBuilder().generate_css_variables(light_theme, prefix="tc")

        assert variables["--tc-background"] == "#ffffff"


class TestFactories:
    """Tests for the module-level factories."""

    def test_create(self):
        builder = ThemeBuilder.create(BuilderConfig(enable_validation=False))

        assert builder.config.enable_validation is False
        assert isinstance(create_theme_builder(), ThemeBuilder)

    @pytest.mark.parametrize("preset", ["light", "dark", "futuristic"])
    def test_quick_theme_presets(self, preset):
        assert quick_theme(preset).build_sync().meta.base_theme == preset

    def test_quick_theme_high_contrast(self):
        theme = quick_theme("high-contrast").build_sync()

        assert theme.meta.base_theme == "light"
        assert theme.meta.variant == ThemeVariant.HIGH_CONTRAST
        assert theme.motion["duration"]["normal"] == "0ms"
