"""Assemble the detail screen of one flower.

Runs the same transitions the browser would (select flower, pick a
language, ask for a summary) through ``view_state.update``, fetches the AI
content for each request and merges everything into one response.

Language is applied before the summary, so an expanded summary wins over a
translation requested in the same call.
"""

import logging

from flowerbase.constants import resolve_language, is_base_language
from flowerbase.services import ai_content
from flowerbase.services.content_resolution import (
    narration_text,
    resolve_parents,
    resolve_view_content,
)
from flowerbase.view_state import AppState, update

logger = logging.getLogger(__name__)


def _complete(state, kind, flower_id, outcome, language=None):
    """Feed a finished AI request back into the state."""
    action = {'flower_id': flower_id, 'language': language}
    if outcome.error:
        action.update(type=f'{kind}_failed', error=outcome.error)
    else:
        action.update(type=f'{kind}_succeeded', data=outcome.data)
    return update(state, action)


def build_detail_view(flower: dict, language=None, summary: bool = False,
                      all_flowers=None, cache=None) -> dict:
    """Resolved content, AI request states and narration for one flower.

    Raises:
        ValueError: unsupported language
    """
    lang = resolve_language(language)
    if lang is None:
        raise ValueError(f'Unsupported language: {language}')

    flower_id = flower['id']
    state = update(AppState(), {'type': 'select_flower', 'flower_id': flower_id})
    cached = {}

    if not is_base_language(lang.translation_code):
        state = update(state, {'type': 'language_selected', 'language': lang.translation_code})
        outcome = ai_content.get_translated_content(flower, lang.translation_code, cache=cache)
        state = _complete(state, 'translation', flower_id, outcome, lang.translation_code)
        cached['translation'] = outcome.cached

    if summary:
        state = update(state, {'type': 'summary_requested'})
        outcome = ai_content.get_summary_content(flower, cache=cache)
        state = _complete(state, 'summary', flower_id, outcome)
        cached['summary'] = outcome.cached

    content = resolve_view_content(
        flower,
        translated=state.translated_content,
        ai_content=state.summary_content,
        language=state.language,
    )

    errors = {}
    if state.translation.error:
        errors['translation'] = state.translation.error
    if state.summary.error:
        errors['summary'] = state.summary.error

    speech_lang = resolve_language(state.language)
    return {
        'flower': flower,
        'content': content,
        'parents': resolve_parents(flower, all_flowers or []),
        'narration': {
            'text': narration_text(content['fields']),
            'speechLang': speech_lang.speech_code,
        },
        'state': state.to_dict(),
        'cached': cached,
        'errors': errors,
    }
