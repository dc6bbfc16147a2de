"""Settings routes: feature flags, storage statistics and cache maintenance."""

from flask import Blueprint, jsonify

from flowerbase.constants import CATEGORIES, LANGUAGES
from flowerbase.exceptions import StoreError
from flowerbase.services import flower_store, gemini, translation
from flowerbase.services.ai_cache import get_ai_cache
from flowerbase.services.storage import is_storage_configured

settings_bp = Blueprint('settings', __name__)


@settings_bp.route('/features', methods=['GET'])
def get_features():
    """Which optional features the UI should offer."""
    return jsonify({
        'ai': gemini.is_gemini_configured(),
        'translation': translation.is_translation_enabled(),
        'translationService': translation.TRANSLATION_SERVICE,
        'storage': is_storage_configured(),
        'languages': [
            {'name': lang.name, 'label': lang.label, 'speechCode': lang.speech_code, 'code': lang.translation_code}
            for lang in LANGUAGES
        ],
        'categories': CATEGORIES,
    }), 200


@settings_bp.route('/stats', methods=['GET'])
def get_stats():
    """Catalog size and AI cache usage."""
    try:
        catalog = flower_store.get_catalog_stats()
    except StoreError as e:
        return jsonify({'error': 'Failed to load storage statistics', 'detail': str(e)}), 500

    return jsonify({
        'catalog': catalog,
        'cache': get_ai_cache().stats(),
    }), 200


@settings_bp.route('/cache/sweep', methods=['POST'])
def sweep_cache():
    """Drop expired AI cache entries now."""
    cache = get_ai_cache()
    removed = cache.sweep()
    return jsonify({'removed': removed, 'cache': cache.stats()}), 200
