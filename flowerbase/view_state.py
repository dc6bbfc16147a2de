"""Application view state and its transitions.

The browser keeps one ``AppState`` and feeds every user event or finished
request through ``update(state, action)``. States are immutable and
round-trip through ``to_dict``/``from_dict``, so the client can hold them as
plain JSON.

AI requests are tracked as ``RequestState`` values tagged with the flower
and variant (language code for translations) they were issued for. A
completion whose tag does not match the current in-flight request is stale
and is dropped.
"""

from dataclasses import dataclass, field, replace, asdict
from typing import Optional

from flowerbase.constants import resolve_language, is_base_language, BASE_LANGUAGE_CODE

VIEW_GALLERY = 'gallery'
VIEW_FORM = 'form'
VIEW_DETAIL = 'detail'
VIEWS = (VIEW_GALLERY, VIEW_FORM, VIEW_DETAIL)

IDLE = 'idle'
IN_FLIGHT = 'in_flight'
SUCCEEDED = 'succeeded'
FAILED = 'failed'

CONTENT_EXPANDED = 'expanded'


@dataclass(frozen=True)
class RequestState:
    status: str = IDLE
    flower_id: Optional[str] = None
    variant: str = ''
    data: Optional[dict] = None
    error: Optional[str] = None

    def is_pending_for(self, flower_id, variant='') -> bool:
        return (
            self.status == IN_FLIGHT
            and self.flower_id == flower_id
            and self.variant == (variant or '')
        )

    @classmethod
    def from_dict(cls, data):
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ValueError('Request state must be an object')
        return cls(
            status=data.get('status', IDLE),
            flower_id=data.get('flower_id'),
            variant=data.get('variant') or '',
            data=data.get('data'),
            error=data.get('error'),
        )


@dataclass(frozen=True)
class AppState:
    view: str = VIEW_GALLERY
    selected_flower_id: Optional[str] = None
    editing_flower_id: Optional[str] = None
    view_only: bool = False
    sidebar_open: bool = False
    show_settings: bool = False
    show_chat: bool = False
    language: str = BASE_LANGUAGE_CODE
    translation: RequestState = field(default_factory=RequestState)
    summary: RequestState = field(default_factory=RequestState)

    @property
    def translated_content(self):
        return self.translation.data if self.translation.status == SUCCEEDED else None

    @property
    def summary_content(self):
        return self.summary.data if self.summary.status == SUCCEEDED else None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ValueError('State must be an object')
        view = data.get('view', VIEW_GALLERY)
        if view not in VIEWS:
            raise ValueError(f'Unknown view: {view}')
        lang = resolve_language(data.get('language'))
        return cls(
            view=view,
            selected_flower_id=data.get('selected_flower_id'),
            editing_flower_id=data.get('editing_flower_id'),
            view_only=bool(data.get('view_only', False)),
            sidebar_open=bool(data.get('sidebar_open', False)),
            show_settings=bool(data.get('show_settings', False)),
            show_chat=bool(data.get('show_chat', False)),
            language=lang.translation_code if lang else BASE_LANGUAGE_CODE,
            translation=RequestState.from_dict(data.get('translation')),
            summary=RequestState.from_dict(data.get('summary')),
        )


def _clear_content(state: AppState) -> AppState:
    """Drop transient content state (on navigation)."""
    return replace(
        state,
        language=BASE_LANGUAGE_CODE,
        translation=RequestState(),
        summary=RequestState(),
        show_chat=False,
    )


def _select_flower(state, action):
    state = _clear_content(state)
    return replace(
        state,
        view=VIEW_DETAIL,
        selected_flower_id=action['flower_id'],
        editing_flower_id=None,
    )


def _open_shared(state, action):
    return replace(_select_flower(state, action), view_only=True, sidebar_open=False)


def _back_to_gallery(state, action):
    state = _clear_content(state)
    return replace(
        state,
        view=VIEW_GALLERY,
        selected_flower_id=None,
        editing_flower_id=None,
    )


def _new_flower(state, action):
    state = _clear_content(state)
    return replace(
        state,
        view=VIEW_FORM,
        selected_flower_id=None,
        editing_flower_id=None,
        sidebar_open=False,
    )


def _edit_flower(state, action):
    state = _clear_content(state)
    return replace(
        state,
        view=VIEW_FORM,
        selected_flower_id=None,
        editing_flower_id=action['flower_id'],
    )


def _flower_deleted(state, action):
    if state.selected_flower_id == action['flower_id'] or state.editing_flower_id == action['flower_id']:
        return _back_to_gallery(state, action)
    return state


def _language_selected(state, action):
    lang = resolve_language(action.get('language'))
    if lang is None:
        raise ValueError(f"Unsupported language: {action.get('language')}")

    if is_base_language(lang.translation_code):
        return _language_reset(state, action)

    summary = state.summary
    # Expanded and translated content are mutually exclusive
    if summary.status == SUCCEEDED and (summary.data or {}).get('type') == CONTENT_EXPANDED:
        summary = RequestState()

    return replace(
        state,
        language=lang.translation_code,
        translation=RequestState(
            status=IN_FLIGHT,
            flower_id=state.selected_flower_id,
            variant=lang.translation_code,
        ),
        summary=summary,
    )


def _translation_succeeded(state, action):
    lang = resolve_language(action.get('language'))
    variant = lang.translation_code if lang else action.get('language')
    if not state.translation.is_pending_for(action.get('flower_id'), variant):
        return state
    return replace(
        state,
        translation=replace(state.translation, status=SUCCEEDED, data=action.get('data'), error=None),
    )


def _translation_failed(state, action):
    lang = resolve_language(action.get('language'))
    variant = lang.translation_code if lang else action.get('language')
    if not state.translation.is_pending_for(action.get('flower_id'), variant):
        return state
    return replace(
        state,
        translation=replace(
            state.translation,
            status=FAILED,
            data=None,
            error=action.get('error') or 'Translation failed',
        ),
    )


def _language_reset(state, action):
    return replace(state, language=BASE_LANGUAGE_CODE, translation=RequestState())


def _summary_requested(state, action):
    return replace(
        state,
        summary=RequestState(status=IN_FLIGHT, flower_id=state.selected_flower_id),
    )


def _summary_succeeded(state, action):
    if not state.summary.is_pending_for(action.get('flower_id')):
        return state

    data = action.get('data')
    state = replace(
        state,
        summary=replace(state.summary, status=SUCCEEDED, data=data, error=None),
    )
    if (data or {}).get('type') == CONTENT_EXPANDED:
        # Also invalidates any translation still in flight
        state = _language_reset(state, action)
    return state


def _summary_failed(state, action):
    if not state.summary.is_pending_for(action.get('flower_id')):
        return state
    return replace(
        state,
        summary=replace(
            state.summary,
            status=FAILED,
            data=None,
            error=action.get('error') or 'Summary failed',
        ),
    )


def _summary_reset(state, action):
    return replace(state, summary=RequestState())


def _toggle(attr, value=None):
    def handler(state, action):
        new_value = (not getattr(state, attr)) if value is None else value
        return replace(state, **{attr: new_value})
    return handler


_HANDLERS = {
    'select_flower': _select_flower,
    'open_shared': _open_shared,
    'back_to_gallery': _back_to_gallery,
    'new_flower': _new_flower,
    'edit_flower': _edit_flower,
    'flower_deleted': _flower_deleted,
    'toggle_sidebar': _toggle('sidebar_open'),
    'close_sidebar': _toggle('sidebar_open', False),
    'open_settings': lambda state, action: replace(state, show_settings=True, sidebar_open=False),
    'close_settings': _toggle('show_settings', False),
    'open_chat': _toggle('show_chat', True),
    'close_chat': _toggle('show_chat', False),
    'language_selected': _language_selected,
    'translation_succeeded': _translation_succeeded,
    'translation_failed': _translation_failed,
    'language_reset': _language_reset,
    'summary_requested': _summary_requested,
    'summary_succeeded': _summary_succeeded,
    'summary_failed': _summary_failed,
    'summary_reset': _summary_reset,
}

ACTION_TYPES = tuple(_HANDLERS)


def update(state: AppState, action: dict) -> AppState:
    """Apply one action and return the new state.

    Raises:
        ValueError: unknown action type or unsupported language
        KeyError: action without a required ``flower_id``
    """
    if not isinstance(action, dict):
        raise ValueError('Action must be an object')
    action_type = action.get('type')
    handler = _HANDLERS.get(action_type) if isinstance(action_type, str) else None
    if handler is None:
        raise ValueError(f"Unknown action type: {action.get('type')}")
    return handler(state, action)
