"""Core themecraft functionality: colour scales, composition, variants, validation, building."""

from . import ir
from .builder import ThemeBuilder, create_theme_builder, quick_theme
from .color_scale import (
    find_best_foreground,
    generate_color_palette,
    generate_color_scale,
    generate_semantic_colors,
    get_contrast_ratio,
    is_accessible,
    validate_color_palette,
)
from .composition import (
    apply_customizations,
    compose,
    ensure_accessible_colors,
    resolve_color_conflicts,
)
from .config_loader import ThemeConfigFile, load_theme_config, save_theme_config
from .css_variables import generate_output_variables, to_css
from .errors import (
    CompositionError,
    ThemeConfigError,
    ThemecraftError,
    ThemeIntegrityError,
    ThemeValidationFailedError,
)
from .events import BuilderEvent, BuilderEventType
from .extensions import ExtensionContext, ExtensionPriority, ThemeExtension
from .presets import create_base_theme, get_base_theme, list_base_themes, register_base_theme
from .serialization import deserialize_theme, serialize_theme
from .validation import validate_theme
from .variants import apply_variant, get_recommended_variant, get_variant_profile

__all__ = [
    "ir",
    # Builder
    "ThemeBuilder",
    "create_theme_builder",
    "quick_theme",
    # Colour
    "find_best_foreground",
    "generate_color_palette",
    "generate_color_scale",
    "generate_semantic_colors",
    "get_contrast_ratio",
    "is_accessible",
    "validate_color_palette",
    # Composition
    "apply_customizations",
    "compose",
    "ensure_accessible_colors",
    "resolve_color_conflicts",
    # Config
    "ThemeConfigFile",
    "load_theme_config",
    "save_theme_config",
    # Output
    "generate_output_variables",
    "to_css",
    # Errors
    "CompositionError",
    "ThemeConfigError",
    "ThemecraftError",
    "ThemeIntegrityError",
    "ThemeValidationFailedError",
    # Events
    "BuilderEvent",
    "BuilderEventType",
    # Extensions
    "ExtensionContext",
    "ExtensionPriority",
    "ThemeExtension",
    # Presets
    "create_base_theme",
    "get_base_theme",
    "list_base_themes",
    "register_base_theme",
    # Persistence
    "deserialize_theme",
    "serialize_theme",
    # Validation and variants
    "validate_theme",
    "apply_variant",
    "get_recommended_variant",
    "get_variant_profile",
]
