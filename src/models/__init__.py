"""
Shared data models for the greetings app.
"""

from .contact import (
    AVATAR_COLORS,
    DEFAULT_MEMORIES,
    DEFAULT_RELATIONSHIP,
    PRESET_RELATIONSHIPS,
    Contact,
    ContactDraft,
    ContactUpdate,
    normalize_inputs,
    random_avatar_color,
)
from .errors import (
    ConfigurationError,
    ContactNotFoundError,
    GeminiError,
    GenerationFailed,
    GenerationInProgress,
    GreetingsError,
    InputValidationError,
    PersistenceError,
)
from .greetings import (
    CREATIVE_VARIANT_COUNT,
    CreativeVariant,
    GeneratedGreetings,
    GreetingStyle,
)

__all__ = [
    "AVATAR_COLORS",
    "CREATIVE_VARIANT_COUNT",
    "DEFAULT_MEMORIES",
    "DEFAULT_RELATIONSHIP",
    "PRESET_RELATIONSHIPS",
    "ConfigurationError",
    "Contact",
    "ContactDraft",
    "ContactNotFoundError",
    "ContactUpdate",
    "CreativeVariant",
    "GeminiError",
    "GeneratedGreetings",
    "GenerationFailed",
    "GenerationInProgress",
    "GreetingStyle",
    "GreetingsError",
    "InputValidationError",
    "PersistenceError",
    "normalize_inputs",
    "random_avatar_color",
]
