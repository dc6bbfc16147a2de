"""Flower routes: catalog CRUD, resolved detail content and sharing."""

import re

from flask import Blueprint, request, jsonify, current_app

from flowerbase.constants import resolve_language
from flowerbase.exceptions import StoreError, ValidationError
from flowerbase.services import flower_store
from flowerbase.services.content_resolution import resolve_fields, share_text
from flowerbase.services.detail_view import build_detail_view

flowers_bp = Blueprint('flowers', __name__)
shared_bp = Blueprint('shared', __name__)

TRUE_VALUES = ('1', 'true', 'yes')


def build_share_url(flower_id: str) -> str:
    """Link that opens the flower read-only (encoded into the QR code)."""
    base = current_app.config.get('APP_BASE_URL') or request.url_root
    return f"{base}?flower={flower_id}"


def qr_file_name(name: str) -> str:
    slug = re.sub(r'\s+', '-', name.strip())
    return f"{slug}-QR.png"


@flowers_bp.route('', methods=['GET'])
def get_flowers():
    """Get all flowers, newest first."""
    try:
        flowers = flower_store.list_flowers()
        return jsonify({'flowers': flowers, 'total': len(flowers)}), 200
    except StoreError as e:
        return jsonify({'error': 'Failed to load flowers. Please check your connection.', 'detail': str(e)}), 500


@flowers_bp.route('/<flower_id>', methods=['GET'])
def get_flower(flower_id):
    """Get a specific flower by ID."""
    try:
        flower = flower_store.get_flower(flower_id)
        if not flower:
            return jsonify({'error': 'Flower not found'}), 404
        return jsonify(flower), 200
    except StoreError as e:
        return jsonify({'error': str(e)}), 500


@flowers_bp.route('', methods=['POST'])
def create_flower():
    """Create a new flower."""
    data = request.get_json(silent=True)
    try:
        flower = flower_store.create_flower(data)
        return jsonify({
            'message': 'Flower created successfully',
            'flower': flower
        }), 201
    except ValidationError as e:
        return jsonify({'error': str(e), 'field': e.field}), 400
    except StoreError as e:
        return jsonify({'error': f'Failed to save flower. Please try again. ({e})'}), 500


@flowers_bp.route('/<flower_id>', methods=['PUT'])
def update_flower(flower_id):
    """Update an existing flower."""
    data = request.get_json(silent=True)
    try:
        flower = flower_store.update_flower(flower_id, data)
        if flower is None:
            return jsonify({'error': 'Flower not found'}), 404
        return jsonify({
            'message': 'Flower updated successfully',
            'flower': flower
        }), 200
    except ValidationError as e:
        return jsonify({'error': str(e), 'field': e.field}), 400
    except StoreError as e:
        return jsonify({'error': f'Failed to update flower. Please try again. ({e})'}), 500


@flowers_bp.route('/<flower_id>', methods=['DELETE'])
def delete_flower(flower_id):
    """Delete a flower."""
    try:
        if not flower_store.delete_flower(flower_id):
            return jsonify({'error': 'Flower not found'}), 404
        return jsonify({'message': 'Flower deleted successfully'}), 200
    except StoreError as e:
        return jsonify({'error': f'Failed to delete flower. Please try again. ({e})'}), 500


@flowers_bp.route('/<flower_id>/content', methods=['GET'])
def get_flower_content(flower_id):
    """Resolved detail content for a flower.

    Query params:
    - language: name or code of the display language (default: English)
    - summary: '1' to add AI summarized/expanded content

    AI failures never fail the request: the original content is returned
    and the failure is reported under 'errors'.
    """
    language = request.args.get('language')
    summary = request.args.get('summary', '').lower() in TRUE_VALUES

    if resolve_language(language) is None:
        return jsonify({'error': f'Unsupported language: {language}'}), 400

    try:
        flower = flower_store.get_flower(flower_id)
        if not flower:
            return jsonify({'error': 'Flower not found'}), 404
        all_flowers = flower_store.list_flowers() if flower.get('parental') else []
    except StoreError as e:
        return jsonify({'error': str(e)}), 500

    view = build_detail_view(flower, language=language, summary=summary, all_flowers=all_flowers)
    return jsonify(view), 200


@flowers_bp.route('/<flower_id>/narration', methods=['GET'])
def get_flower_narration(flower_id):
    """Voice-over text for a flower in the requested language."""
    language = request.args.get('language')
    if resolve_language(language) is None:
        return jsonify({'error': f'Unsupported language: {language}'}), 400

    try:
        flower = flower_store.get_flower(flower_id)
        if not flower:
            return jsonify({'error': 'Flower not found'}), 404
    except StoreError as e:
        return jsonify({'error': str(e)}), 500

    view = build_detail_view(flower, language=language)
    return jsonify({
        **view['narration'],
        'errors': view['errors'],
    }), 200


@flowers_bp.route('/<flower_id>/share', methods=['GET'])
def share_flower(flower_id):
    """Share link and QR payload for a flower."""
    try:
        flower = flower_store.get_flower(flower_id)
        if not flower:
            return jsonify({'error': 'Flower not found'}), 404
    except StoreError as e:
        return jsonify({'error': str(e)}), 500

    url = build_share_url(flower_id)
    return jsonify({
        'url': url,
        'qrValue': url,
        'qrFileName': qr_file_name(flower['name']),
        'text': share_text(resolve_fields(flower), url),
    }), 200


@shared_bp.route('', methods=['GET'])
def get_shared_flower():
    """Resolve a share link (?flower=<id>) to the flower, read-only."""
    flower_id = request.args.get('flower')
    if not flower_id:
        return jsonify({'error': 'Missing flower parameter'}), 400

    try:
        flower = flower_store.get_flower(flower_id)
    except StoreError as e:
        return jsonify({'error': str(e)}), 500

    if not flower:
        return jsonify({'error': 'Flower not found'}), 404
    return jsonify({'flower': flower, 'viewOnly': True}), 200
