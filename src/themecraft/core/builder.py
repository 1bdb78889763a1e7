"""
Fluent theme builder.

A ThemeBuilder accumulates a base theme, customization patches, a variant
and composition settings, then resolves them into a BuiltTheme. Builders are
immutable: every ``with_*`` call returns a new builder, so a configured
builder can be shared and branched freely.

    theme = (
        ThemeBuilder()
        .extends("dark")
        .with_colors({"primary": "#7c3aed"})
        .with_variant("compact")
        .build_sync()
    )

Two build paths share one pipeline:

- ``build_sync()`` composes the theme directly and ignores extensions.
- ``await build()`` runs before-build extension hooks, the same pipeline,
  then after-build hooks.

Each builder caches its last built theme, one per path. Because
configuration calls return new builders, a cached theme is never stale.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from . import events
from .composition import apply_customizations, deep_merge, to_token_dict
from .config_loader import load_theme_config
from .css_variables import generate_output_variables
from .environment import resolve_builder_config
from .errors import CompositionError, ThemeValidationFailedError
from .events import BuilderEventType, Listener, ListenerTable
from .extensions import HookPhase, ThemeExtension, run_extension_hooks
from .ir.config import BuilderConfig, ConflictResolutionConfig
from .ir.theme import (
    BuiltTheme,
    CompositionMode,
    ThemeCustomization,
    ThemeMeta,
    ThemeVariant,
    utc_timestamp,
)
from .ir.validation import ValidationConfig, ValidationResult
from .ir.variant import VariantProfile
from .presets import DEFAULT_BASE_THEME, create_base_theme
from .serialization import deserialize_theme, serialize_theme
from .validation import validate_theme
from .variants import apply_variant

logger = logging.getLogger(__name__)

ThemeSource = str | BuiltTheme | Mapping[str, Any]
Patch = Mapping[str, Any] | BaseModel


class ThemeBuilder:
    """Immutable, fluent builder for resolved themes."""

    def __init__(self, config: BuilderConfig | None = None):
        self._config = resolve_builder_config(config)
        self._base: BuiltTheme = create_base_theme(DEFAULT_BASE_THEME)
        self._overlay: dict[str, Any] = {}
        self._variant: ThemeVariant | str = ThemeVariant.DEFAULT
        self._custom_profile: VariantProfile | Mapping[str, Any] | None = None
        self._composition_mode = CompositionMode.MERGE
        self._conflict_resolution = ConflictResolutionConfig()
        self._validation_config: ValidationConfig | None = None
        self._meta: dict[str, Any] = {}
        self._extensions: tuple[ThemeExtension, ...] = ()
        self._listeners: ListenerTable = {}
        self._built: BuiltTheme | None = None
        self._built_with_hooks: BuiltTheme | None = None
        self._validation_result: ValidationResult | None = None

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def create(cls, config: BuilderConfig | None = None) -> ThemeBuilder:
        return cls(config)

    @classmethod
    def from_config_file(cls, path: Path | str) -> ThemeBuilder:
        """Create a builder from a YAML or TOML theme configuration file.

        Raises:
            ThemeConfigError: If the file cannot be loaded.
        """
        file_config = load_theme_config(path)
        builder = (
            cls(file_config.builder)
            .extends(file_config.extends)
            .with_variant(file_config.variant)
            .with_composition_mode(file_config.composition_mode)
            .with_conflict_resolution(file_config.conflict_resolution)
        )
        if "validation" in file_config.model_fields_set:
            builder = builder.with_validation_config(file_config.validation)
        if not file_config.customizations.is_empty():
            builder = builder.with_customizations(file_config.customizations)

        meta = {
            key: getattr(file_config, key)
            for key in ("name", "version", "description", "author")
            if getattr(file_config, key) is not None
        }
        if meta:
            builder = builder.with_meta(meta)
        return builder

    def _evolve(self, **changes: Any) -> ThemeBuilder:
        """Copy this builder with some attributes replaced and the cache cleared."""
        clone = copy.copy(self)
        for attr, value in changes.items():
            setattr(clone, f"_{attr}", value)
        clone._built = None
        clone._built_with_hooks = None
        clone._validation_result = None
        return clone

    def clone(self) -> ThemeBuilder:
        """An independent builder with the same configuration and no cached theme."""
        return self._evolve(overlay=copy.deepcopy(self._overlay), meta=copy.deepcopy(self._meta))

    def reset(self) -> ThemeBuilder:
        """Drop customizations, variant and composition settings; keep the base theme."""
        return self._evolve(
            overlay={},
            variant=ThemeVariant.DEFAULT,
            custom_profile=None,
            composition_mode=CompositionMode.MERGE,
            conflict_resolution=ConflictResolutionConfig(),
            meta={},
        )

    # =========================================================================
    # Configuration
    # =========================================================================

    @property
    def config(self) -> BuilderConfig:
        return self._config

    @property
    def variant(self) -> ThemeVariant | str:
        return self._variant

    @property
    def composition_mode(self) -> CompositionMode:
        return self._composition_mode

    @property
    def extensions(self) -> tuple[ThemeExtension, ...]:
        return self._extensions

    @property
    def validation_result(self) -> ValidationResult | None:
        """Result of the most recent validation on this builder."""
        return self._validation_result

    def extends(self, source: ThemeSource) -> ThemeBuilder:
        """Start from a registered base theme, a built theme, or raw tokens.

        Unknown registry names fall back to the default base theme with a
        logged warning. A mapping carrying ``meta`` and ``colors`` is taken
        as an already built theme.
        """
        if isinstance(source, str):
            base = create_base_theme(source)
        elif isinstance(source, BuiltTheme):
            base = BuiltTheme.from_tokens(source.to_tokens())
        elif source.get("meta") and source.get("colors"):
            base = BuiltTheme.from_tokens(dict(source))
        else:
            base = create_base_theme(dict(source))
        return self._evolve(base=base)

    def _with_patch(self, patch: Mapping[str, Any]) -> ThemeBuilder:
        customization = ThemeCustomization.model_validate(patch)
        return self._evolve(overlay=deep_merge(self._overlay, customization.to_overlay()))

    def with_colors(self, colors: Patch) -> ThemeBuilder:
        return self._with_patch({"colors": colors})

    def with_typography(self, typography: Patch) -> ThemeBuilder:
        return self._with_patch({"typography": typography})

    def with_spacing(self, spacing: Mapping[str, str]) -> ThemeBuilder:
        return self._with_patch({"spacing": spacing})

    def with_motion(self, motion: Patch) -> ThemeBuilder:
        return self._with_patch({"motion": motion})

    def with_breakpoints(self, breakpoints: Mapping[str, str]) -> ThemeBuilder:
        return self._with_patch({"breakpoints": breakpoints})

    def with_radius(self, radius: str | Mapping[str, str]) -> ThemeBuilder:
        """Set the radius scale; a single value becomes the ``md`` step."""
        return self._with_patch({"radius": radius})

    def with_shadows(self, shadows: Mapping[str, str]) -> ThemeBuilder:
        return self._with_patch({"shadows": shadows})

    def with_z_index(self, z_index: Mapping[str, int]) -> ThemeBuilder:
        return self._with_patch({"zIndex": z_index})

    def with_animations(self, animations: Patch) -> ThemeBuilder:
        return self._with_patch({"animations": animations})

    def with_customizations(
        self, customizations: ThemeCustomization | Mapping[str, Any]
    ) -> ThemeBuilder:
        """Merge a bulk customization patch into the pending customizations."""
        if isinstance(customizations, ThemeCustomization):
            overlay = customizations.to_overlay()
        else:
            overlay = ThemeCustomization.model_validate(dict(customizations)).to_overlay()
        return self._evolve(overlay=deep_merge(self._overlay, overlay))

    def with_variant(
        self,
        variant: ThemeVariant | str,
        custom_profile: VariantProfile | Mapping[str, Any] | None = None,
    ) -> ThemeBuilder:
        return self._evolve(variant=variant, custom_profile=custom_profile)

    def with_composition_mode(self, mode: CompositionMode | str) -> ThemeBuilder:
        try:
            resolved = CompositionMode(mode)
        except ValueError as e:
            raise CompositionError(
                f"Unknown composition mode: {mode}",
                {"valid": [m.value for m in CompositionMode]},
            ) from e
        return self._evolve(composition_mode=resolved)

    def with_conflict_resolution(
        self, config: ConflictResolutionConfig | Mapping[str, Any]
    ) -> ThemeBuilder:
        """Replace the conflict settings, or update them from a partial mapping."""
        if not isinstance(config, ConflictResolutionConfig):
            config = ConflictResolutionConfig.model_validate(
                {**self._conflict_resolution.model_dump(), **dict(config)}
            )
        return self._evolve(conflict_resolution=config)

    def with_validation_config(self, config: ValidationConfig) -> ThemeBuilder:
        return self._evolve(validation_config=config)

    def with_meta(self, meta: ThemeMeta | Mapping[str, Any]) -> ThemeBuilder:
        """Metadata fields stamped onto every theme this builder produces."""
        if not isinstance(meta, ThemeMeta):
            meta = ThemeMeta.model_validate(dict(meta))
        fields = meta.model_dump(by_alias=True, exclude_unset=True, mode="json")
        return self._evolve(meta={**self._meta, **fields})

    def with_extension(self, extension: ThemeExtension) -> ThemeBuilder:
        """Register an extension; one with the same name is replaced."""
        kept = tuple(ext for ext in self._extensions if ext.name != extension.name)
        if len(kept) != len(self._extensions):
            logger.debug(f"Replacing extension '{extension.name}'")
        builder = self._evolve(extensions=(*kept, extension))
        builder._emit(BuilderEventType.PLUGIN_REGISTERED, plugin=extension)
        return builder

    def without_extension(self, name: str) -> ThemeBuilder:
        kept = tuple(ext for ext in self._extensions if ext.name != name)
        builder = self._evolve(extensions=kept)
        if len(kept) != len(self._extensions):
            builder._emit(BuilderEventType.PLUGIN_UNREGISTERED, plugin_name=name)
        return builder

    # =========================================================================
    # Events
    # =========================================================================

    def add_listener(self, event: BuilderEventType | str, listener: Listener) -> ThemeBuilder:
        """A builder that also notifies ``listener`` of ``event``.

        Raises:
            ValueError: If ``event`` is not a known event type.
        """
        return self._evolve(listeners=events.add_listener(self._listeners, event, listener))

    def remove_listener(
        self, event: BuilderEventType | str, listener: Listener
    ) -> ThemeBuilder:
        return self._evolve(listeners=events.remove_listener(self._listeners, event, listener))

    def _emit(self, event: BuilderEventType, **data: Any) -> None:
        events.emit(self._listeners, event, **data)

    # =========================================================================
    # Pipeline
    # =========================================================================

    def _compose(self, tokens: dict[str, Any], plugins: list[str]) -> dict[str, Any]:
        """Customize, apply the variant, and stamp metadata.

        This is the only composition path; both build methods go through it.
        ``plugins`` names the extensions whose hooks take part in this build.
        """
        if self._overlay:
            customization = ThemeCustomization.from_overlay(self._overlay)
            tokens = apply_customizations(
                tokens,
                customization,
                self._composition_mode,
                self._conflict_resolution,
            )
            self._emit(BuilderEventType.CUSTOMIZATION_APPLIED, customization=customization)
        if self._variant != ThemeVariant.DEFAULT or self._custom_profile is not None:
            tokens = apply_variant(tokens, self._variant, self._custom_profile)

        now = utc_timestamp()
        meta = dict(tokens.get("meta") or {})
        meta.setdefault("createdAt", now)
        meta.update(self._meta)
        meta["variant"] = str(meta.get("variant") or ThemeVariant.DEFAULT)
        meta["compositionMode"] = self._composition_mode.value
        meta["plugins"] = plugins
        meta["updatedAt"] = now
        tokens["meta"] = meta
        return tokens

    def _hooks_enabled(self) -> bool:
        return bool(self._extensions) and self._config.enable_extensions

    def _finish(self, theme: BuiltTheme) -> BuiltTheme:
        """Validate a freshly built theme; strict mode raises on errors."""
        if self._config.enable_validation:
            result = self.validate(theme)
            if self._config.strict_mode and not result.is_valid:
                logger.info(
                    f"Strict build of '{theme.meta.name if theme.meta else 'theme'}' failed "
                    f"with {len(result.errors)} validation error(s)"
                )
                raise ThemeValidationFailedError(result)
        self._emit(BuilderEventType.THEME_BUILT, theme=theme)
        return theme

    def _assemble(self) -> BuiltTheme:
        return BuiltTheme.from_tokens(self._compose(self._base.to_tokens(), []))

    def build_sync(self) -> BuiltTheme:
        """Build without running extension hooks.

        Skipped extensions are not recorded in ``meta.plugins``.

        Returns:
            The built theme, cached on this builder.

        Raises:
            ThemeValidationFailedError: In strict mode, if the theme is invalid.
        """
        if self._built is not None:
            logger.debug("Returning cached theme")
            return self._built
        if self._hooks_enabled():
            logger.warning(
                f"build_sync() skips {len(self._extensions)} registered extension(s); "
                "use 'await build()' to run them"
            )
        self._built = self._finish(self._assemble())
        return self._built

    async def _build_with_hooks(self) -> BuiltTheme:
        if not self._hooks_enabled():
            return self._finish(self._assemble())

        timeout = self._config.extension_timeout
        tokens = await run_extension_hooks(
            self._extensions,
            HookPhase.BEFORE_BUILD,
            self._base.to_tokens(),
            timeout=timeout,
            variant=self._variant,
        )
        tokens = self._compose(tokens, [ext.name for ext in self._extensions])
        variables = (
            generate_output_variables(tokens) if self._config.generate_css_variables else None
        )
        tokens = await run_extension_hooks(
            self._extensions,
            HookPhase.AFTER_BUILD,
            tokens,
            timeout=timeout,
            variant=self._variant,
            output_variables=variables,
        )
        return self._finish(BuiltTheme.from_tokens(tokens))

    async def build(self) -> BuiltTheme:
        """Build, running before/after extension hooks around composition.

        Hook failures and timeouts are logged and skipped. A theme cached by
        ``build_sync()`` is only reused when there are no hooks to run.

        Raises:
            ThemeValidationFailedError: In strict mode, if the theme is invalid.
        """
        if not self._hooks_enabled():
            return self.build_sync()
        if self._built_with_hooks is not None:
            logger.debug("Returning cached theme")
            return self._built_with_hooks
        self._built_with_hooks = await self._build_with_hooks()
        return self._built_with_hooks

    async def preview(self) -> BuiltTheme:
        """Build through the hook pipeline without caching the result."""
        return await self._build_with_hooks()

    async def build_and_validate(self) -> tuple[BuiltTheme, ValidationResult]:
        theme = await self.build()
        return theme, self.validate(theme)

    def is_cached(self) -> bool:
        return self._built is not None or self._built_with_hooks is not None

    # =========================================================================
    # Validation, persistence, output
    # =========================================================================

    def _effective_validation_config(self) -> ValidationConfig:
        if self._validation_config is not None:
            return self._validation_config
        return ValidationConfig(enable_accessibility_validation=self._config.accessibility_checks)

    def validate(self, theme: BuiltTheme | Mapping[str, Any] | None = None) -> ValidationResult:
        """Validate ``theme``, or this builder's built theme.

        The hook-path theme is preferred over the ``build_sync()`` one. Without
        a cached theme the builder's configuration is composed afresh (not
        cached) so validation itself never raises.
        """
        if theme is None:
            theme = self._built_with_hooks or self._built or self._assemble()
        result = validate_theme(theme, self._effective_validation_config())
        self._validation_result = result
        if result.errors:
            logger.debug(f"Validation found {len(result.errors)} error(s)")
            self._emit(BuilderEventType.VALIDATION_ERROR, errors=list(result.errors))
        if result.warnings:
            self._emit(BuilderEventType.VALIDATION_WARNING, warnings=list(result.warnings))
        return result

    def serialize(self, theme: BuiltTheme | Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Persistable envelope ``{version, theme, checksum, exportedAt}``."""
        target = theme if theme is not None else self.build_sync()
        return serialize_theme(target).to_dict()

    @classmethod
    def deserialize(
        cls, data: Mapping[str, Any] | str, config: BuilderConfig | None = None
    ) -> ThemeBuilder:
        """Restore a builder whose base and cached theme are the persisted theme.

        Raises:
            ThemeIntegrityError: If the checksum does not match.
        """
        theme = deserialize_theme(data)
        builder = cls(config)._evolve(base=theme)
        builder._built = theme
        return builder

    def generate_css_variables(
        self, theme: BuiltTheme | Mapping[str, Any] | None = None, prefix: str = ""
    ) -> dict[str, str]:
        target = theme if theme is not None else self.build_sync()
        return generate_output_variables(to_token_dict(target), prefix)

    def __repr__(self) -> str:
        base = self._base.meta.base_theme if self._base.meta else None
        return (
            f"ThemeBuilder(base={base!r}, variant={str(self._variant)!r}, "
            f"mode={self._composition_mode.value!r}, extensions={len(self._extensions)})"
        )


def create_theme_builder(config: BuilderConfig | None = None) -> ThemeBuilder:
    return ThemeBuilder.create(config)


def quick_theme(preset: str = DEFAULT_BASE_THEME) -> ThemeBuilder:
    """A builder for a common starting point.

    ``high-contrast`` is the light theme with the high-contrast variant;
    any other value is a base theme name.
    """
    if preset == ThemeVariant.HIGH_CONTRAST:
        return ThemeBuilder().extends(DEFAULT_BASE_THEME).with_variant(ThemeVariant.HIGH_CONTRAST)
    return ThemeBuilder().extends(preset)
