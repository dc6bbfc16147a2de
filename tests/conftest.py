"""
Pytest configuration and fixtures for testing the Flower Base API.
"""

import base64
import io
import os
import sys
from datetime import datetime, timedelta

import pytest
from faker import Faker
from PIL import Image

# Add the parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from flowerbase import create_app, db
from flowerbase.models import Flower
from flowerbase.services import ai_cache, gemini, translation
from flowerbase.services.ai_cache import ExpiringCache
from flowerbase.services.kv_store import MemoryKeyValueStore

fake = Faker()


class FakeClock:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, start=1_700_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    os.environ['FLASK_ENV'] = 'testing'
    os.environ.pop('REDIS_URL', None)

    app = create_app('testing')

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client for each test function."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create a fresh database session for each test."""
    with app.app_context():
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        yield db.session
        db.session.rollback()


@pytest.fixture(autouse=True)
def isolated_ai(monkeypatch):
    """No real AI provider and a fresh in-memory cache for every test."""
    monkeypatch.setattr(gemini, 'GEMINI_API_KEY', '')
    monkeypatch.setattr(translation, 'TRANSLATION_SERVICE', 'gemini')
    gemini.reset_circuit_breaker()

    cache = ExpiringCache(MemoryKeyValueStore())
    ai_cache.set_ai_cache(cache)
    yield cache
    ai_cache.set_ai_cache(None)
    gemini.reset_circuit_breaker()


@pytest.fixture
def memory_cache(isolated_ai):
    """The process-wide AI cache used by the app during this test."""
    return isolated_ai


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def gemini_configured(monkeypatch):
    """Pretend a Gemini key is set (calls must still be stubbed)."""
    monkeypatch.setattr(gemini, 'GEMINI_API_KEY', 'test-gemini-key')
    return gemini


def _create_flower(**overrides):
    """Helper to insert a flower row with sensible defaults."""
    data = {
        'name': fake.unique.first_name() + ' Rose',
        'type': 'Rose',
        'color': fake.color_name(),
        'category': 'Flower',
        'parental': '',
        'blooming_season': 'Spring',
        'care_instructions': 'Water twice a week.',
        'description': fake.sentence(nb_words=10),
        'images': [],
    }
    data.update(overrides)
    flower = Flower(**data)
    db.session.add(flower)
    db.session.commit()
    return flower.to_dict()


@pytest.fixture
def make_flower(app, db_session):
    """Factory fixture: make_flower(name='Rose', ...) -> raw flower dict."""
    def factory(**overrides):
        with app.app_context():
            return _create_flower(**overrides)
    return factory


@pytest.fixture
def test_flower(make_flower):
    """One flower with a short description."""
    return make_flower(
        name='Rose',
        type='Shrub',
        color='Red',
        description='D1',
        care_instructions='Full sun.',
        images=['https://cdn.example.com/rose.jpg'],
        created_at=datetime.utcnow() - timedelta(days=1),
    )


@pytest.fixture
def png_data_url():
    """A small PNG encoded as a data URL, like the form uploads."""
    buffer = io.BytesIO()
    Image.new('RGB', (1200, 600), (200, 30, 60)).save(buffer, format='PNG')
    return 'data:image/png;base64,' + base64.b64encode(buffer.getvalue()).decode('ascii')


@pytest.fixture
def uploaded(monkeypatch):
    """Stub blob storage; records every uploaded image."""
    from flowerbase.services import storage

    calls = []

    def fake_upload(file_data, flower_id, index):
        calls.append({'data': file_data, 'flower_id': flower_id, 'index': index})
        return f'https://storage.example.com/{storage.FLOWER_BUCKET}/flowers/{flower_id}/image_{index}.jpg', None

    monkeypatch.setattr(storage, 'upload_flower_image', fake_upload)
    return calls
