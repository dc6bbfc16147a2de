"""Record store for flowers: database rows plus photos in blob storage.

Every record leaving this module has gone through ``migrate_legacy_image``,
so downstream code only ever sees the canonical schema (``images`` list, no
``image`` key).
"""

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from flowerbase import db
from flowerbase.constants import validate_category
from flowerbase.exceptions import StoreError, ValidationError
from flowerbase.models import Flower, migrate_legacy_image
from flowerbase.models.flower import generate_flower_id
from flowerbase.services import images as image_utils
from flowerbase.services import storage

logger = logging.getLogger(__name__)

# API field -> model attribute
TEXT_FIELDS = {
    'type': 'type',
    'color': 'color',
    'category': 'category',
    'parental': 'parental',
    'bloomingSeason': 'blooming_season',
    'careInstructions': 'care_instructions',
    'description': 'description',
}


def _load(flower: Flower) -> dict:
    return migrate_legacy_image(flower.to_dict())


def validate_flower_data(data: dict) -> dict:
    """Validate submitted flower fields and return the cleaned values.

    Raises:
        ValidationError: missing name, non-string field or unknown category
    """
    if not isinstance(data, dict):
        raise ValidationError('Flower data must be an object')

    name = data.get('name')
    if not isinstance(name, str) or not name.strip():
        raise ValidationError('Please enter a flower name', field='name')

    cleaned = {'name': name.strip()}
    for field in TEXT_FIELDS:
        value = data.get(field)
        if value is None:
            value = ''
        if not isinstance(value, str):
            raise ValidationError(f'{field} must be a string', field=field)
        cleaned[field] = value

    category, error = validate_category(cleaned['category'])
    if error:
        raise ValidationError(error, field='category')
    cleaned['category'] = category

    if 'images' in data:
        submitted = data.get('images') or []
        if isinstance(submitted, str):
            submitted = [submitted]
        if not isinstance(submitted, list) or not all(isinstance(i, str) for i in submitted):
            raise ValidationError('images must be a list of strings', field='images')
        cleaned['images'] = submitted

    return cleaned


def _resolve_images(submitted: list, flower_id: str) -> list:
    """Upload inline images and keep already-resolved URLs unchanged.

    Raises:
        ValidationError: an inline image cannot be decoded
        StoreError: an upload failed
    """
    urls = []
    for index, img in enumerate(submitted):
        if not image_utils.is_data_url(img):
            urls.append(img)
            continue

        try:
            raw = image_utils.decode_data_url(img)
        except ValueError as e:
            raise ValidationError(str(e), field='images')

        try:
            compressed = image_utils.compress_image(raw)
        except Exception as e:
            raise ValidationError(f'Image could not be processed: {e}', field='images')

        url, error = storage.upload_flower_image(compressed, flower_id, index)
        if error:
            raise StoreError(f'Error uploading image: {error}')
        urls.append(url)
    return urls


def list_flowers() -> list:
    """All flowers, newest created first."""
    try:
        flowers = Flower.query.order_by(Flower.created_at.desc()).all()
        return [_load(f) for f in flowers]
    except SQLAlchemyError as e:
        logger.error(f"Error getting flowers: {e}")
        raise StoreError('Failed to load flowers') from e


def get_flower(flower_id: str):
    """Single flower by ID, or None."""
    try:
        flower = db.session.get(Flower, flower_id)
        return _load(flower) if flower else None
    except SQLAlchemyError as e:
        logger.error(f"Error getting flower {flower_id}: {e}")
        raise StoreError('Failed to load flower') from e


def create_flower(data: dict) -> dict:
    """Validate, upload photos and persist a new flower."""
    cleaned = validate_flower_data(data)
    flower_id = generate_flower_id()
    image_urls = _resolve_images(cleaned.get('images', []), flower_id)

    try:
        flower = Flower(id=flower_id, name=cleaned['name'], images=image_urls)
        for field, attr in TEXT_FIELDS.items():
            setattr(flower, attr, cleaned[field])

        db.session.add(flower)
        db.session.commit()
        logger.info(f"Created flower {flower_id} ({flower.name}) with {len(image_urls)} image(s)")
        return _load(flower)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error adding flower: {e}")
        raise StoreError('Failed to save flower') from e


def update_flower(flower_id: str, data: dict):
    """Update an existing flower. Returns None if it does not exist.

    Images are only touched when the submitted data carries an ``images``
    key; URLs already in storage pass through unchanged.
    """
    cleaned = validate_flower_data(data)

    try:
        flower = db.session.get(Flower, flower_id)
    except SQLAlchemyError as e:
        logger.error(f"Error getting flower {flower_id}: {e}")
        raise StoreError('Failed to load flower') from e

    if flower is None:
        return None

    image_urls = None
    if 'images' in cleaned:
        image_urls = _resolve_images(cleaned['images'], flower_id)

    try:
        flower.name = cleaned['name']
        for field, attr in TEXT_FIELDS.items():
            setattr(flower, attr, cleaned[field])
        if image_urls is not None:
            flower.images = image_urls
            flower.image = None
        flower.updated_at = datetime.utcnow()

        db.session.commit()
        logger.info(f"Updated flower {flower_id}")
        return _load(flower)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error updating flower: {e}")
        raise StoreError('Failed to update flower') from e


def delete_flower(flower_id: str) -> bool:
    """Delete a flower. Returns False if it does not exist.

    Photos uploaded to our bucket are removed afterwards on a best-effort
    basis; a storage failure is logged and does not undo the delete.
    """
    try:
        flower = db.session.get(Flower, flower_id)
        if flower is None:
            return False

        image_urls = _load(flower)['images']
        db.session.delete(flower)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error deleting flower: {e}")
        raise StoreError('Failed to delete flower') from e

    owned = [u for u in image_urls if f'/{storage.FLOWER_BUCKET}/' in u]
    if owned:
        ok, error = storage.delete_flower_images(owned)
        if not ok:
            logger.warning(f"Images of deleted flower {flower_id} were not removed: {error}")

    logger.info(f"Deleted flower {flower_id}")
    return True


def get_catalog_stats() -> dict:
    """Counts shown on the settings screen."""
    try:
        flowers = Flower.query.all()
    except SQLAlchemyError as e:
        logger.error(f"Error computing catalog stats: {e}")
        raise StoreError('Failed to load statistics') from e

    records = [_load(f) for f in flowers]
    data_size = sum(
        len(r['name']) + sum(len(r[field]) for field in TEXT_FIELDS)
        for r in records
    )
    return {
        'flowerCount': len(records),
        'imageCount': sum(len(r['images']) for r in records),
        'dataSizeKB': round(data_size / 1024, 2),
        'storageConfigured': storage.is_storage_configured(),
    }
