"""
Tests for the application view state and its transitions.
"""

import pytest

from flowerbase.view_state import (
    FAILED,
    IDLE,
    IN_FLIGHT,
    SUCCEEDED,
    VIEW_DETAIL,
    VIEW_FORM,
    VIEW_GALLERY,
    AppState,
    update,
)

EXPANDED = {'type': 'expanded', 'keyPoints': ['a'], 'description': 'Long'}
SUMMARIZED = {'type': 'summarized', 'keyPoints': ['a'], 'quickCare': 'Water'}


def dispatch(state, *actions):
    for action in actions:
        state = update(state, action)
    return state


@pytest.fixture
def detail():
    return update(AppState(), {'type': 'select_flower', 'flower_id': 'rose'})


class TestNavigation:

    def test_initial_state(self):
        state = AppState()

        assert state.view == VIEW_GALLERY
        assert state.language == 'en'
        assert state.translation.status == IDLE

    def test_select_flower(self, detail):
        assert detail.view == VIEW_DETAIL
        assert detail.selected_flower_id == 'rose'
        assert detail.view_only is False

    def test_open_shared_is_view_only(self):
        state = update(AppState(), {'type': 'open_shared', 'flower_id': 'rose'})

        assert state.view == VIEW_DETAIL
        assert state.view_only is True

    def test_new_flower_closes_sidebar(self):
        state = dispatch(AppState(), {'type': 'toggle_sidebar'}, {'type': 'new_flower'})

        assert state.view == VIEW_FORM
        assert state.sidebar_open is False
        assert state.editing_flower_id is None

    def test_edit_flower(self, detail):
        state = update(detail, {'type': 'edit_flower', 'flower_id': 'rose'})

        assert state.view == VIEW_FORM
        assert state.editing_flower_id == 'rose'
        assert state.selected_flower_id is None

    def test_deleting_selected_flower_returns_to_gallery(self, detail):
        state = update(detail, {'type': 'flower_deleted', 'flower_id': 'rose'})

        assert state.view == VIEW_GALLERY
        assert state.selected_flower_id is None

    def test_deleting_other_flower_keeps_detail(self, detail):
        assert update(detail, {'type': 'flower_deleted', 'flower_id': 'lily'}) == detail

    def test_navigation_discards_content_state(self, detail):
        state = dispatch(
            detail,
            {'type': 'language_selected', 'language': 'Hindi'},
            {'type': 'translation_succeeded', 'flower_id': 'rose', 'language': 'hi', 'data': {'name': 'गुलाब'}},
            {'type': 'back_to_gallery'},
        )

        assert state.language == 'en'
        assert state.translation.status == IDLE
        assert state.translated_content is None

    def test_panels(self):
        state = dispatch(AppState(), {'type': 'toggle_sidebar'}, {'type': 'open_settings'})

        assert state.show_settings is True
        assert state.sidebar_open is False
        state = dispatch(state, {'type': 'close_settings'}, {'type': 'open_chat'})
        assert state.show_settings is False
        assert state.show_chat is True

    def test_unknown_action(self):
        with pytest.raises(ValueError):
            update(AppState(), {'type': 'fly_away'})


class TestTranslation:

    def test_request_is_tagged(self, detail):
        state = update(detail, {'type': 'language_selected', 'language': 'Hindi'})

        assert state.language == 'hi'
        assert state.translation.status == IN_FLIGHT
        assert state.translation.flower_id == 'rose'
        assert state.translation.variant == 'hi'

    def test_success_then_reset(self, detail):
        state = dispatch(
            detail,
            {'type': 'language_selected', 'language': 'Hindi'},
            {'type': 'translation_succeeded', 'flower_id': 'rose', 'language': 'Hindi', 'data': {'name': 'गुलाब'}},
        )
        assert state.translation.status == SUCCEEDED
        assert state.translated_content == {'name': 'गुलाब'}

        state = update(state, {'type': 'language_selected', 'language': 'English'})
        assert state.language == 'en'
        assert state.translated_content is None

    def test_late_response_for_previous_language_is_discarded(self, detail):
        state = dispatch(
            detail,
            {'type': 'language_selected', 'language': 'Hindi'},
            {'type': 'language_selected', 'language': 'Malayalam'},
            {'type': 'translation_succeeded', 'flower_id': 'rose', 'language': 'ml', 'data': {'name': 'റോസ്'}},
        )
        late = update(state, {
            'type': 'translation_succeeded', 'flower_id': 'rose', 'language': 'hi', 'data': {'name': 'गुलाब'},
        })

        assert late == state
        assert late.language == 'ml'
        assert late.translated_content == {'name': 'റോസ്'}

    def test_response_for_other_flower_is_discarded(self, detail):
        state = dispatch(
            detail,
            {'type': 'language_selected', 'language': 'Hindi'},
            {'type': 'select_flower', 'flower_id': 'lily'},
            {'type': 'language_selected', 'language': 'Hindi'},
        )
        stale = update(state, {
            'type': 'translation_succeeded', 'flower_id': 'rose', 'language': 'hi', 'data': {'name': 'गुलाब'},
        })

        assert stale.translation.status == IN_FLIGHT
        assert stale.translation.flower_id == 'lily'

    def test_failure_keeps_originals_and_sets_error(self, detail):
        state = dispatch(
            detail,
            {'type': 'language_selected', 'language': 'Hindi'},
            {'type': 'translation_failed', 'flower_id': 'rose', 'language': 'hi', 'error': 'quota'},
        )

        assert state.translation.status == FAILED
        assert state.translation.error == 'quota'
        assert state.translated_content is None

    def test_unsupported_language(self, detail):
        with pytest.raises(ValueError):
            update(detail, {'type': 'language_selected', 'language': 'Klingon'})


class TestSummary:

    def test_summary_lifecycle(self, detail):
        state = update(detail, {'type': 'summary_requested'})
        assert state.summary.status == IN_FLIGHT

        state = update(state, {'type': 'summary_succeeded', 'flower_id': 'rose', 'data': SUMMARIZED})
        assert state.summary_content == SUMMARIZED

        state = update(state, {'type': 'summary_reset'})
        assert state.summary.status == IDLE

    def test_summarized_coexists_with_translation(self, detail):
        state = dispatch(
            detail,
            {'type': 'language_selected', 'language': 'hi'},
            {'type': 'translation_succeeded', 'flower_id': 'rose', 'language': 'hi', 'data': {'name': 'गुलाब'}},
            {'type': 'summary_requested'},
            {'type': 'summary_succeeded', 'flower_id': 'rose', 'data': SUMMARIZED},
        )

        assert state.translated_content == {'name': 'गुलाब'}
        assert state.summary_content == SUMMARIZED

    def test_expanded_clears_translation(self, detail):
        state = dispatch(
            detail,
            {'type': 'language_selected', 'language': 'hi'},
            {'type': 'translation_succeeded', 'flower_id': 'rose', 'language': 'hi', 'data': {'name': 'गुलाब'}},
            {'type': 'summary_requested'},
            {'type': 'summary_succeeded', 'flower_id': 'rose', 'data': EXPANDED},
        )

        assert state.language == 'en'
        assert state.translated_content is None
        assert state.summary_content == EXPANDED

    def test_expanded_discards_translation_still_in_flight(self, detail):
        state = dispatch(
            detail,
            {'type': 'language_selected', 'language': 'hi'},
            {'type': 'summary_requested'},
            {'type': 'summary_succeeded', 'flower_id': 'rose', 'data': EXPANDED},
            {'type': 'translation_succeeded', 'flower_id': 'rose', 'language': 'hi', 'data': {'name': 'गुलाब'}},
        )

        assert state.translated_content is None
        assert state.summary_content == EXPANDED

    def test_selecting_language_clears_expanded(self, detail):
        state = dispatch(
            detail,
            {'type': 'summary_requested'},
            {'type': 'summary_succeeded', 'flower_id': 'rose', 'data': EXPANDED},
            {'type': 'language_selected', 'language': 'ml'},
        )

        assert state.summary.status == IDLE
        assert state.translation.status == IN_FLIGHT

    def test_resetting_summary_keeps_language(self, detail):
        state = dispatch(
            detail,
            {'type': 'language_selected', 'language': 'hi'},
            {'type': 'translation_succeeded', 'flower_id': 'rose', 'language': 'hi', 'data': {'name': 'गुलाब'}},
            {'type': 'summary_requested'},
            {'type': 'summary_succeeded', 'flower_id': 'rose', 'data': SUMMARIZED},
            {'type': 'summary_reset'},
        )

        assert state.language == 'hi'
        assert state.translated_content == {'name': 'गुलाब'}
        assert state.summary_content is None

    def test_failure(self, detail):
        state = dispatch(
            detail,
            {'type': 'summary_requested'},
            {'type': 'summary_failed', 'flower_id': 'rose', 'error': 'network'},
        )

        assert state.summary.status == FAILED
        assert state.summary.error == 'network'
        assert state.summary_content is None


class TestSerialization:

    def test_round_trip(self, detail):
        state = dispatch(
            detail,
            {'type': 'language_selected', 'language': 'hi'},
            {'type': 'summary_requested'},
        )

        assert AppState.from_dict(state.to_dict()) == state

    def test_empty_dict_is_initial_state(self):
        assert AppState.from_dict({}) == AppState()
        assert AppState.from_dict(None) == AppState()

    def test_unknown_view_rejected(self):
        with pytest.raises(ValueError):
            AppState.from_dict({'view': 'settings'})

    def test_non_object_state_rejected(self):
        with pytest.raises(ValueError):
            AppState.from_dict('garbage')

    def test_non_object_request_state_rejected(self):
        with pytest.raises(ValueError):
            AppState.from_dict({'summary': 'in_flight'})

    def test_non_string_action_type_rejected(self):
        with pytest.raises(ValueError):
            update(AppState(), {'type': ['select_flower']})

    def test_non_object_action_rejected(self):
        with pytest.raises(ValueError):
            update(AppState(), 'select_flower')
