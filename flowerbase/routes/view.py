"""View-state route: apply one action to a client-held application state."""

from flask import Blueprint, request, jsonify

from flowerbase.view_state import ACTION_TYPES, AppState, update

view_bp = Blueprint('view', __name__)


@view_bp.route('/update', methods=['POST'])
def update_view():
    """Body: {"state": {...} | null, "action": {"type": ..., ...}}"""
    data = request.get_json(silent=True) or {}
    action = data.get('action')
    if not isinstance(action, dict):
        return jsonify({'error': 'action is required', 'actions': list(ACTION_TYPES)}), 400

    try:
        state = AppState.from_dict(data.get('state'))
        new_state = update(state, action)
    except (ValueError, KeyError) as e:
        return jsonify({'error': f'Invalid action: {e}'}), 400

    return jsonify({'state': new_state.to_dict()}), 200
