"""Database models for the flower catalog."""

from .flower import Flower, migrate_legacy_image

__all__ = ['Flower', 'migrate_legacy_image']
