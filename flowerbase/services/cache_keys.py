"""Cache key scheme for AI-generated flower content.

Keys look like ``flora_ai:translate:<flower_id>:hi``. Every component is
percent-encoded, so a ``:`` inside a flower id or variant can never make two
distinct inputs produce the same key.
"""

from urllib.parse import quote

CACHE_PREFIX = 'flora_ai'

KIND_TRANSLATE = 'translate'
KIND_SUMMARIZE = 'summarize'


def _encode(component) -> str:
    return quote(str(component), safe='')


def derive_key(kind: str, flower_id: str, variant: str = '', prefix: str = CACHE_PREFIX) -> str:
    """Build the cache key for one (operation, flower, variant) tuple.

    Args:
        kind: Operation kind ('translate' or 'summarize')
        flower_id: Flower ID
        variant: Sub-variant, e.g. the target language code. Empty for
            operations with a single variant per flower.
        prefix: Namespace shared by every key of one cache

    Returns:
        Cache key string
    """
    variant = '' if variant is None else variant
    return ':'.join(_encode(part) for part in (prefix, kind, flower_id, variant))


def namespace_prefix(prefix: str = CACHE_PREFIX) -> str:
    """Prefix matched by every key of the namespace."""
    return f"{_encode(prefix)}:"


def translation_key(flower_id: str, language_code: str) -> str:
    return derive_key(KIND_TRANSLATE, flower_id, language_code)


def summary_key(flower_id: str) -> str:
    return derive_key(KIND_SUMMARIZE, flower_id)
