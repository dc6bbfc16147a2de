"""Flower model for the catalog."""

from datetime import datetime
from uuid import uuid4
from flowerbase import db


def generate_flower_id() -> str:
    return uuid4().hex


class Flower(db.Model):
    """A single catalog entry with descriptive fields and photos."""

    __tablename__ = 'flowers'

    id = db.Column(db.String(32), primary_key=True, default=generate_flower_id)
    name = db.Column(db.String(255), nullable=False, index=True)
    type = db.Column(db.String(255), default='', nullable=False)
    color = db.Column(db.String(255), default='', nullable=False)
    category = db.Column(db.String(50), default='', nullable=False)
    parental = db.Column(db.Text, default='', nullable=False)  # Comma-separated parent names
    blooming_season = db.Column(db.String(255), default='', nullable=False)
    care_instructions = db.Column(db.Text, default='', nullable=False)
    description = db.Column(db.Text, default='', nullable=False)
    images = db.Column(db.JSON, nullable=True)  # Array of image URLs
    image = db.Column(db.String(1024), nullable=True)  # Legacy single image, see migrate_legacy_image
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def to_dict(self):
        """Convert flower to dictionary.

        The raw row is returned as stored, legacy ``image`` included. The
        store boundary runs :func:`migrate_legacy_image` before handing
        records to anything downstream.
        """
        data = {
            'id': self.id,
            'name': self.name,
            'type': self.type or '',
            'color': self.color or '',
            'category': self.category or '',
            'parental': self.parental or '',
            'bloomingSeason': self.blooming_season or '',
            'careInstructions': self.care_instructions or '',
            'description': self.description or '',
            'images': self.images,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }
        if self.image:
            data['image'] = self.image
        return data

    def __repr__(self):
        return f'<Flower {self.id}: {self.name}>'


def migrate_legacy_image(record: dict) -> dict:
    """Fold the legacy single ``image`` field into the ``images`` list.

    Returns a new dict in which ``images`` is always a list and no
    ``image`` key remains.
    """
    migrated = dict(record)
    legacy = migrated.pop('image', None)
    images = migrated.get('images')

    if images is None:
        images = []
    elif isinstance(images, str):
        images = [images]
    else:
        images = list(images)

    if legacy and not images:
        images = [legacy]

    migrated['images'] = images
    return migrated
