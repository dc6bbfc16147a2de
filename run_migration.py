#!/usr/bin/env python3
"""Fold the legacy single-image column into the images list.

Older rows carry one photo in ``flowers.image`` and no ``images`` list.
The API already migrates such rows when reading them; this script makes
the change permanent so the legacy column can eventually be dropped.
"""

from flowerbase import create_app, db
from flowerbase.models import Flower, migrate_legacy_image


def run_migration(app=None):
    """Move flowers.image into flowers.images for every legacy row."""
    app = app or create_app()

    with app.app_context():
        try:
            legacy = Flower.query.filter(Flower.image.isnot(None)).all()

            if not legacy:
                print("✅ Migration already applied! No legacy image values left.")
                return 0

            print(f"📝 Running migration: folding legacy image into images for {len(legacy)} flower(s)...")

            for flower in legacy:
                migrated = migrate_legacy_image({'images': flower.images, 'image': flower.image})
                flower.images = migrated['images']
                flower.image = None

            db.session.commit()
            print("\n🎉 Migration completed successfully!")
            return len(legacy)

        except Exception as e:
            db.session.rollback()
            print(f"\n❌ Migration failed: {e}")
            raise


if __name__ == '__main__':
    run_migration()
