"""Pytest configuration and fixtures."""

from datetime import date

import pytest

from mycolog import create_app, db
from mycolog.config import Config
from mycolog.models import Batch, User, Unit


@pytest.fixture
def app(tmp_path):
    """Application backed by an in-memory SQLite database."""

    class TestConfig(Config):
        TESTING = True
        SECRET_KEY = "test-secret"
        SQLALCHEMY_DATABASE_URI = "sqlite://"
        UPLOAD_FOLDER = str(tmp_path / "uploads")
        GEMINI_API_KEY = ""
        HARVEST_OPERATION = "Harvest"

    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """Push an application context for service-level tests."""
    with app.app_context():
        yield app


@pytest.fixture
def user(ctx):
    user = User(email="grower@example.com", display_name="Grower")
    user.set_password("spores-123")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def client(app):
    """Test client logged in as a fresh user."""
    with app.app_context():
        user = User(email="client@example.com")
        user.set_password("spores-123")
        db.session.add(user)
        db.session.commit()

    client = app.test_client()
    response = client.post(
        "/auth/login", json={"email": "client@example.com", "password": "spores-123"}
    )
    assert response.status_code == 200
    return client


@pytest.fixture
def make_batch():
    """Factory for unsaved Batch objects used by pure in-memory tests."""
    counter = {"n": 0}

    def _make(**fields):
        counter["n"] += 1
        defaults = {
            "id": f"b{counter['n']}",
            "user_id": 1,
            "display_id": f"240115-OB-{counter['n']:02d}",
            "created_date": date(2024, 1, 15),
            "species": "Oyster Blue",
            "operation_type": "Agar work",
            "quantity": 1,
            "unit": Unit.PLATE,
            "parent_id": None,
            "end_date": None,
            "outcome": None,
            "notes": "",
            "image_urls": [],
        }
        defaults.update(fields)
        return Batch(**defaults)

    return _make
