"""Unit tests for theme composition and customization."""

import copy

import pytest

from themecraft.core.composition import (
    apply_customizations,
    compose,
    deep_merge,
    ensure_accessible_colors,
    extend_object,
    resolve_color_conflicts,
)
from themecraft.core.errors import CompositionError
from themecraft.core.ir import (
    BuiltTheme,
    ColorConflictStrategy,
    CompositionMode,
    ConflictResolutionConfig,
    ThemeCustomization,
)


def _leaves(tree, prefix=()):
    for key, value in tree.items():
        if isinstance(value, dict):
            yield from _leaves(value, (*prefix, key))
        else:
            yield (*prefix, key), value


def _without_timestamps(tokens):
    tokens = copy.deepcopy(tokens)
    tokens["meta"].pop("updatedAt", None)
    return tokens


# =============================================================================
# Helper Tests
# =============================================================================


class TestObjectHelpers:
    """Tests for deep_merge and extend_object."""

    def test_deep_merge_source_wins(self):
        target = {"a": {"b": 1, "c": 2}, "d": 3}

        merged = deep_merge(target, {"a": {"b": 10}, "e": 5})

        assert merged == {"a": {"b": 10, "c": 2}, "d": 3, "e": 5}
        assert target == {"a": {"b": 1, "c": 2}, "d": 3}

    def test_extend_object_fills_gaps_only(self):
        extended = extend_object({"a": {"b": 1}, "n": None}, {"a": {"b": 2, "c": 3}, "n": 4})

        assert extended == {"a": {"b": 1, "c": 3}, "n": 4}


# =============================================================================
# Accessibility Tests
# =============================================================================


class TestEnsureAccessibleColors:
    """Tests for ensure_accessible_colors."""

    def test_grey_pair_forced_to_black(self):
        """#777777 on #888888 is unreadable; the light background gets black text."""
        fixed = ensure_accessible_colors({"foreground": "#777777", "background": "#888888"})

        assert fixed["foreground"] == "#000000"

    def test_dark_background_gets_white(self):
        fixed = ensure_accessible_colors({"foreground": "#333333", "background": "#222222"})

        assert fixed["foreground"] == "#ffffff"

    def test_readable_pair_untouched(self):
        colors = {"foreground": "#0a0a0a", "background": "#ffffff"}

        assert ensure_accessible_colors(colors) == colors

    def test_unparseable_background_skipped(self):
        colors = {"foreground": "#777777", "background": "var(--bg)"}

        assert ensure_accessible_colors(colors) == colors

    def test_group_pairs_checked(self):
        fixed = ensure_accessible_colors(
            {"primary": {"foreground": "#ffffff", "background": "#eeeeee"}}
        )

        assert fixed["primary"]["foreground"] == "#000000"


# =============================================================================
# Conflict Strategy Tests
# =============================================================================


class TestResolveColorConflicts:
    """Tests for the four color conflict strategies."""

    def test_auto_regenerates_group_from_default(self, light_tokens):
        base = light_tokens["colors"]

        resolved = resolve_color_conflicts(base, {"primary": {"DEFAULT": "#7c3aed"}})

        assert resolved["primary"]["DEFAULT"] == "#7c3aed"
        assert resolved["primary"]["500"] != base["primary"]["500"]
        assert set(base["primary"]) <= set(resolved["primary"])

    def test_auto_partial_override_merges(self, light_tokens):
        base = light_tokens["colors"]

        resolved = resolve_color_conflicts(base, {"primary": {"500": "#000000"}})

        assert resolved["primary"]["500"] == "#000000"
        assert resolved["primary"]["600"] == base["primary"]["600"]

    def test_auto_partial_override_rejected(self, light_tokens):
        base = light_tokens["colors"]
        config = ConflictResolutionConfig(allow_partial_overrides=False)

        resolved = resolve_color_conflicts(base, {"primary": {"500": "#000000"}}, config)

        assert resolved["primary"]["500"] == base["primary"]["500"]

    def test_prefer_base(self):
        config = ConflictResolutionConfig(
            color_conflicts=ColorConflictStrategy.PREFER_BASE, preserve_accessibility=False
        )

        resolved = resolve_color_conflicts(
            {"background": "#ffffff"}, {"background": "#000000", "ring": "#2563eb"}, config
        )

        assert resolved == {"background": "#ffffff", "ring": "#2563eb"}

    def test_prefer_override(self):
        config = ConflictResolutionConfig(
            color_conflicts=ColorConflictStrategy.PREFER_OVERRIDE, preserve_accessibility=False
        )

        resolved = resolve_color_conflicts(
            {"primary": {"500": "#111111", "600": "#222222"}},
            {"primary": {"500": "#333333"}},
            config,
        )

        assert resolved == {"primary": {"500": "#333333", "600": "#222222"}}

    def test_blend(self):
        config = ConflictResolutionConfig(
            color_conflicts=ColorConflictStrategy.BLEND, preserve_accessibility=False
        )

        resolved = resolve_color_conflicts(
            {"background": "#ffffff"}, {"background": "#000000", "ring": "#2563eb"}, config
        )

        assert resolved["background"] not in ("#ffffff", "#000000")
        assert resolved["ring"] == "#2563eb"


# =============================================================================
# Composition Mode Tests
# =============================================================================


class TestCompose:
    """Tests for compose in merge, override and extend modes."""

    def test_merge_preserves_accessibility(self, light_theme):
        """Overriding both surface colors with an unreadable pair forces black text."""
        overlay = {"colors": {"foreground": "#777777", "background": "#888888"}}

        result = compose(light_theme, overlay, CompositionMode.MERGE)

        assert result.colors["background"] == "#888888"
        assert result.colors["foreground"] in ("#000000", "#ffffff")

    def test_returns_same_kind(self, light_theme, light_tokens):
        overlay = {"spacing": {"md": "2rem"}}

        assert isinstance(compose(light_theme, overlay), BuiltTheme)
        assert isinstance(compose(light_tokens, overlay), dict)

    def test_does_not_mutate_input(self, light_tokens):
        snapshot = copy.deepcopy(light_tokens)

        compose(light_tokens, {"colors": {"primary": "#000000"}, "spacing": {"md": "3rem"}})

        assert light_tokens == snapshot

    def test_merge_deep_merges_categories(self, light_tokens):
        result = compose(light_tokens, {"spacing": {"md": "2rem"}})

        assert result["spacing"]["md"] == "2rem"
        assert result["spacing"]["lg"] == light_tokens["spacing"]["lg"]
        assert result["meta"]["compositionMode"] == "merge"

    def test_override_replaces_categories(self, light_tokens):
        result = compose(light_tokens, {"spacing": {"md": "2rem"}}, "override")

        assert result["spacing"] == {"md": "2rem"}
        assert result["meta"]["name"] == light_tokens["meta"]["name"]

    def test_override_idempotent(self, light_tokens):
        overlay = {
            "colors": {"foreground": "#777777", "background": "#888888"},
            "spacing": {"md": "2rem"},
        }

        once = compose(light_tokens, overlay, "override")
        twice = compose(once, overlay, "override")

        assert _without_timestamps(once) == _without_timestamps(twice)

    def test_extend_is_non_destructive(self, light_tokens):
        overlay = {
            "colors": {"primary": {"500": "#000000"}, "brandNew": "#123456"},
            "spacing": {"md": "9rem", "3xl": "4rem"},
            "radius": "2rem",
        }

        result = compose(light_tokens, overlay, CompositionMode.EXTEND)

        base = {key: value for key, value in light_tokens.items() if key != "meta"}
        result_leaves = dict(_leaves(result))
        for path, value in _leaves(base):
            assert result_leaves[path] == value
        assert result["colors"]["brandNew"] == "#123456"
        assert result["spacing"]["3xl"] == "4rem"

    def test_unknown_mode_raises(self, light_tokens):
        with pytest.raises(CompositionError, match="Unknown composition mode"):
            compose(light_tokens, {}, "splice")


# =============================================================================
# Customization Tests
# =============================================================================


class TestApplyCustomizations:
    """Tests for apply_customizations."""

    def test_group_string_becomes_default(self, light_theme):
        customization = ThemeCustomization(colors={"primary": "#7c3aed"})

        result = apply_customizations(light_theme, customization)

        assert result.colors["primary"]["DEFAULT"] == "#7c3aed"
        assert result.meta.customizations == {"colors": {"primary": "#7c3aed"}}

    def test_surface_and_pair_mapping(self, light_tokens):
        customization = {
            "colors": {
                "surface": {"card": "#fafafa"},
                "border": {"default": "#d4d4d8", "ring": "#7c3aed"},
                "muted": {"background": "#eeeeee", "foreground": "#111111"},
            }
        }

        result = apply_customizations(light_tokens, customization)

        colors = result["colors"]
        assert colors["card"] == "#fafafa"
        assert colors["border"] == "#d4d4d8"
        assert colors["ring"] == "#7c3aed"
        assert colors["muted"] == "#eeeeee"
        assert colors["mutedForeground"] == "#111111"

    def test_scalar_radius_expands(self, light_tokens):
        result = apply_customizations(light_tokens, {"radius": "0.25rem"})

        assert result["radius"]["md"] == "0.25rem"
        assert result["radius"]["full"] == "9999px"

    def test_shadows_merge_over_defaults(self, light_tokens):
        result = apply_customizations(light_tokens, {"shadows": {"lg": "none"}})

        assert result["shadows"]["lg"] == "none"
        assert result["shadows"]["xs"] == light_tokens["shadows"]["xs"]

    def test_user_customizations_not_prioritized(self, light_tokens):
        config = ConflictResolutionConfig(prioritize_user_customizations=False)

        result = apply_customizations(
            light_tokens, {"colors": {"background": "#000000"}}, config=config
        )

        assert result["colors"]["background"] == "#ffffff"

    def test_unknown_category_rejected(self, light_tokens):
        with pytest.raises(ValueError):
            apply_customizations(light_tokens, {"fonts": {}})
