"""Shared constants for the application."""

from flowerbase.constants.categories import (
    CATEGORIES,
    VALID_CATEGORIES,
    normalize_category,
    validate_category,
)
from flowerbase.constants.languages import (
    LANGUAGES,
    BASE_LANGUAGE,
    BASE_LANGUAGE_CODE,
    resolve_language,
    is_base_language,
)

__all__ = [
    'CATEGORIES',
    'VALID_CATEGORIES',
    'normalize_category',
    'validate_category',
    'LANGUAGES',
    'BASE_LANGUAGE',
    'BASE_LANGUAGE_CODE',
    'resolve_language',
    'is_base_language',
]
