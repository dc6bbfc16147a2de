"""AI routes: translation, summaries, the Flora chat assistant and photo analysis.

Every endpoint answers 503 when the provider is not configured, so the UI
can hide the AI entry points instead of showing errors.
"""

from functools import wraps

from flask import Blueprint, request, jsonify, current_app

from flowerbase.constants import resolve_language
from flowerbase.exceptions import ProviderError, StoreError
from flowerbase.services import ai_content, flower_store, gemini, translation

ai_bp = Blueprint('ai', __name__)

NOT_CONFIGURED_RESPONSE = {'error': 'AI features are not configured', 'code': 'not_configured'}

CHAT_APOLOGY = '😔 Sorry, I had trouble processing that. Please try again!'


def ai_required(f):
    """Reject the request with 503 when Gemini has no API key."""
    @wraps(f)
    def decorated(*args, **kwargs):
        if not gemini.is_gemini_configured():
            return jsonify(NOT_CONFIGURED_RESPONSE), 503
        return f(*args, **kwargs)
    return decorated


def _load_flower(flower_id):
    """Returns (flower, error_response)."""
    if not flower_id:
        return None, (jsonify({'error': 'flower_id is required'}), 400)
    try:
        flower = flower_store.get_flower(flower_id)
    except StoreError as e:
        return None, (jsonify({'error': str(e)}), 500)
    if not flower:
        return None, (jsonify({'error': 'Flower not found'}), 404)
    return flower, None


def _outcome_response(outcome, **extra):
    if outcome.error == ai_content.NOT_CONFIGURED:
        return jsonify(NOT_CONFIGURED_RESPONSE), 503
    if outcome.error:
        return jsonify({'error': outcome.error, 'fallback': 'original', **extra}), 502
    return jsonify({'data': outcome.data, 'cached': outcome.cached, **extra}), 200


@ai_bp.route('/translate', methods=['POST'])
def translate():
    """Translate a flower.

    Body: {"flower_id": "...", "language": "Hindi" | "hi" | "hi-IN"}
    """
    data = request.get_json(silent=True) or {}
    lang = resolve_language(data.get('language'))
    if lang is None:
        return jsonify({'error': f"Unsupported language: {data.get('language')}"}), 400

    if not translation.is_translation_enabled():
        return jsonify(NOT_CONFIGURED_RESPONSE), 503

    flower, error = _load_flower(data.get('flower_id'))
    if error:
        return error

    outcome = ai_content.get_translated_content(flower, lang.translation_code)
    return _outcome_response(outcome, language=lang.translation_code, flower_id=flower['id'])


@ai_bp.route('/summarize', methods=['POST'])
@ai_required
def summarize():
    """Summarize (long content) or expand (short content) a flower.

    Body: {"flower_id": "..."}
    """
    data = request.get_json(silent=True) or {}
    flower, error = _load_flower(data.get('flower_id'))
    if error:
        return error

    outcome = ai_content.get_summary_content(flower)
    return _outcome_response(outcome, flower_id=flower['id'])


@ai_bp.route('/chat', methods=['POST'])
@ai_required
def chat():
    """Ask Flora a question.

    Body: {"message": "...", "flower_id": optional, "history": [{"role", "content"}]}
    An empty message returns the greeting for the session.
    """
    data = request.get_json(silent=True) or {}
    message = (data.get('message') or '').strip()

    flower = None
    if data.get('flower_id'):
        flower, error = _load_flower(data.get('flower_id'))
        if error:
            return error

    if not message:
        return jsonify({'reply': gemini.chat_greeting(flower), 'greeting': True}), 200

    history = data.get('history') or []
    if not isinstance(history, list):
        return jsonify({'error': 'history must be a list'}), 400

    try:
        reply = gemini.chat_with_flora(message, flower, history)
        return jsonify({'reply': reply}), 200
    except ProviderError as e:
        current_app.logger.warning(f"Flora chat error: {e}")
        return jsonify({'reply': CHAT_APOLOGY, 'error': str(e)}), 502


def _image_from_request():
    data = request.get_json(silent=True) or {}
    image = data.get('image')
    if not isinstance(image, str) or not image.strip():
        return None
    return image


@ai_bp.route('/describe', methods=['POST'])
@ai_required
def describe():
    """Generate flower form fields from a photo. Body: {"image": "<data URL>"}"""
    image = _image_from_request()
    if image is None:
        return jsonify({'error': 'image is required'}), 400

    try:
        return jsonify(gemini.generate_flower_description(image)), 200
    except ProviderError as e:
        current_app.logger.warning(f"Description generation error: {e}")
        return jsonify({'error': str(e)}), 502


@ai_bp.route('/identify', methods=['POST'])
@ai_required
def identify():
    """Identify the flower in a photo. Body: {"image": "<data URL>"}"""
    image = _image_from_request()
    if image is None:
        return jsonify({'error': 'image is required'}), 400

    try:
        return jsonify(gemini.identify_flower(image)), 200
    except ProviderError as e:
        current_app.logger.warning(f"Flower identification error: {e}")
        return jsonify({'error': str(e)}), 502


@ai_bp.route('/facts', methods=['GET'])
@ai_required
def facts():
    """Fun facts about a flower. Query params: name"""
    name = (request.args.get('name') or '').strip()
    if not name:
        return jsonify({'error': 'name is required'}), 400
    return jsonify({'name': name, 'facts': gemini.get_flower_facts(name)}), 200


@ai_bp.route('/care', methods=['GET'])
@ai_required
def care():
    """Care recommendations. Query params: name, climate (optional)"""
    name = (request.args.get('name') or '').strip()
    if not name:
        return jsonify({'error': 'name is required'}), 400

    climate = (request.args.get('climate') or '').strip()
    try:
        tips = gemini.get_care_recommendations(name, climate)
        return jsonify({'name': name, 'climate': climate, 'recommendations': tips}), 200
    except ProviderError as e:
        current_app.logger.warning(f"Care recommendations error: {e}")
        return jsonify({'error': str(e)}), 502
