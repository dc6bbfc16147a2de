"""Flower translation with swappable providers."""
import os
import re
import logging
import requests

from flowerbase.constants import resolve_language, is_base_language
from flowerbase.exceptions import (
    ProviderNotConfiguredError,
    ProviderResponseError,
    ProviderUnavailableError,
)
from flowerbase.services import gemini

logger = logging.getLogger(__name__)

# Configuration - change this to switch providers
TRANSLATION_SERVICE = os.environ.get('TRANSLATION_SERVICE', 'gemini')

MYMEMORY_URL = 'https://api.mymemory.translated.net/get'
MYMEMORY_TIMEOUT = float(os.environ.get('MYMEMORY_TIMEOUT', 10))

# MyMemory rejects queries over 500 chars
MAX_CHUNK_SIZE = 450

_SENTENCE_RE = re.compile(r'[^.!?]+[.!?]+|[^.!?]+$')


def is_translation_enabled() -> bool:
    """Check if the configured translation provider can be used."""
    if TRANSLATION_SERVICE == 'gemini':
        return gemini.is_gemini_configured()
    if TRANSLATION_SERVICE == 'mymemory':
        return True
    return False


def split_text(text: str, max_size: int = MAX_CHUNK_SIZE) -> list:
    """Split text into chunks of at most ``max_size`` chars on sentence ends.

    A single sentence longer than ``max_size`` is cut into fixed-size pieces.
    """
    if len(text) <= max_size:
        return [text]

    chunks = []
    current = ''
    for sentence in _SENTENCE_RE.findall(text) or [text]:
        if len(current + sentence) > max_size:
            if current.strip():
                chunks.append(current.strip())
            current = sentence
            while len(current) > max_size:
                chunks.append(current[:max_size])
                current = current[max_size:]
        else:
            current += sentence
    if current.strip():
        chunks.append(current.strip())
    return chunks


def mymemory_translate(text: str, target_code: str) -> str:
    """Translate text using the free MyMemory API.

    Raises:
        ProviderUnavailableError: network failure, quota warning or API error
    """
    if not text:
        return ''
    if is_base_language(target_code):
        return text

    translated = []
    for chunk in split_text(text):
        try:
            response = requests.get(
                MYMEMORY_URL,
                params={'q': chunk, 'langpair': f'en|{target_code}'},
                timeout=MYMEMORY_TIMEOUT,
            )
            data = response.json()
        except requests.Timeout as e:
            logger.warning("MyMemory timeout")
            raise ProviderUnavailableError('Translation timed out') from e
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"MyMemory error: {e}")
            raise ProviderUnavailableError(f'Translation failed: {e}') from e

        result = (data.get('responseData') or {}).get('translatedText') or ''
        if data.get('responseStatus') != 200 or \
                'QUERY LENGTH LIMIT EXCEEDED' in result or 'MYMEMORY WARNING' in result:
            logger.warning(f"MyMemory rejected request: {result[:120]}")
            raise ProviderUnavailableError('Translation API limit or error')

        translated.append(result)

    return ' '.join(translated)


def mymemory_translate_flower(flower: dict, target_code: str) -> dict:
    """Translate each displayable field separately."""
    return {
        field: mymemory_translate(flower.get(field) or '', target_code)
        for field in gemini.TRANSLATED_FIELDS
        if flower.get(field)
    }


def translate_flower(flower: dict, target_language):
    """
    Translate a flower with the configured provider.

    Args:
        flower: Flower dict
        target_language: Language name or code

    Returns:
        Dict of translated fields, or None for the base language

    Raises:
        ValueError: unsupported language
        ProviderError: provider not configured or failed
    """
    language = resolve_language(target_language)
    if language is None:
        raise ValueError(f'Unsupported language: {target_language}')

    if is_base_language(language.translation_code):
        return None

    if TRANSLATION_SERVICE == 'gemini':
        translated = gemini.translate_flower_content(flower, language.translation_code)
    elif TRANSLATION_SERVICE == 'mymemory':
        translated = mymemory_translate_flower(flower, language.translation_code)
    else:
        raise ProviderNotConfiguredError(f'Unknown translation service: {TRANSLATION_SERVICE}')

    if not translated:
        raise ProviderResponseError('Translation returned no fields')
    return translated
