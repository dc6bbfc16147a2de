"""Cached access to AI translations and summaries of a flower.

Lookups go cache first (see ``cache_keys`` for the key layout), then the
provider on a miss. Successful provider results are written back. Provider
failures are returned as an error on the outcome instead of being raised,
so callers can keep showing the original content.
"""

import logging
from collections import namedtuple

from flowerbase.constants import resolve_language, is_base_language
from flowerbase.exceptions import ProviderError, ProviderNotConfiguredError, ProviderResponseError
from flowerbase.services import gemini, translation
from flowerbase.services.ai_cache import get_ai_cache
from flowerbase.services.cache_keys import summary_key, translation_key

logger = logging.getLogger(__name__)

NOT_CONFIGURED = 'not_configured'

ContentOutcome = namedtuple('ContentOutcome', ['data', 'error', 'cached'])


def _translation_is_valid(data) -> bool:
    return isinstance(data, dict) and bool(data) and all(isinstance(v, str) for v in data.values())


def get_translated_content(flower: dict, language, cache=None) -> ContentOutcome:
    """Translated fields of ``flower`` in ``language``.

    The base language needs no translation and yields ``data=None`` without
    touching the cache or the provider.
    """
    lang = resolve_language(language)
    if lang is None:
        return ContentOutcome(None, f'Unsupported language: {language}', False)
    if is_base_language(lang.translation_code):
        return ContentOutcome(None, None, False)

    cache = cache or get_ai_cache()
    key = translation_key(flower['id'], lang.translation_code)

    cached = cache.get(key)
    if _translation_is_valid(cached):
        logger.debug(f"Translation cache hit: {key}")
        return ContentOutcome(cached, None, True)

    if not translation.is_translation_enabled():
        return ContentOutcome(None, NOT_CONFIGURED, False)

    try:
        translated = translation.translate_flower(flower, lang.translation_code)
    except ProviderNotConfiguredError:
        return ContentOutcome(None, NOT_CONFIGURED, False)
    except ProviderError as e:
        logger.warning(f"Translation of flower {flower['id']} to {lang.name} failed: {e}")
        return ContentOutcome(None, str(e), False)

    if not _translation_is_valid(translated):
        return ContentOutcome(None, 'Translation returned no content', False)

    cache.put(key, translated)
    return ContentOutcome(translated, None, False)


def get_summary_content(flower: dict, cache=None) -> ContentOutcome:
    """Summarized or expanded content for ``flower``."""
    cache = cache or get_ai_cache()
    key = summary_key(flower['id'])

    cached = cache.get(key)
    if cached is not None:
        try:
            summary = gemini.validate_summary(cached)
            logger.debug(f"Summary cache hit: {key}")
            return ContentOutcome(summary, None, True)
        except ProviderResponseError:
            logger.warning(f"Ignoring malformed cached summary: {key}")

    if not gemini.is_gemini_configured():
        return ContentOutcome(None, NOT_CONFIGURED, False)

    try:
        summary = gemini.summarize_flower_content(flower)
    except ProviderNotConfiguredError:
        return ContentOutcome(None, NOT_CONFIGURED, False)
    except ProviderError as e:
        logger.warning(f"Summary of flower {flower['id']} failed: {e}")
        return ContentOutcome(None, str(e), False)

    cache.put(key, summary)
    return ContentOutcome(summary, None, False)
