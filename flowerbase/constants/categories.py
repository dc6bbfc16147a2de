"""Plant category constants: single source of truth for the backend.

Must stay in sync with the category picker of the flower form.
"""

# Canonical spelling, in picker order
CATEGORIES = [
    'Flower',
    'Fruit',
    'Vegetable',
    'Herb',
    'Tree',
    'Shrub',
    'Succulent',
    'Cactus',
    'Vine',
    'Fern',
    'Other',
]

VALID_CATEGORIES = set(CATEGORIES)

# Lowercase key -> canonical spelling
_CATEGORY_LOOKUP = {c.lower(): c for c in CATEGORIES}


def normalize_category(category: str) -> str:
    """Normalize a category value.

    - Strips whitespace
    - Maps any casing onto the canonical spelling
    - Returns the stripped value as-is if unknown
    """
    key = category.strip()
    return _CATEGORY_LOOKUP.get(key.lower(), key)


def validate_category(category: str) -> tuple[str, str | None]:
    """Validate and normalize a category.

    An empty category is valid (the field is optional).

    Returns:
        (normalized_value, error_message)
        error_message is None when valid.
    """
    if not category or not category.strip():
        return '', None
    normalized = normalize_category(category)
    if normalized not in VALID_CATEGORIES:
        return normalized, (
            f"Invalid category '{category}'. "
            f"Valid categories: {', '.join(CATEGORIES)}"
        )
    return normalized, None
