from __future__ import annotations

from typing import Iterator
import uuid

import pytest
from sqlalchemy.pool import StaticPool

from shift_roster import create_app
from shift_roster.config import Config
from shift_roster.extensions import db
from shift_roster.models import User
from shift_roster.security import hash_password
from shift_roster.stores import get_stores


class TestConfig(Config):
    TESTING = True
    WTF_CSRF_ENABLED = False
    SQLALCHEMY_DATABASE_URI = "sqlite+pysqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {
        "connect_args": {"check_same_thread": False},
        "poolclass": StaticPool,
    }
    SNAPSHOT_CACHE_DIR = None
    OFFLINE_CACHE_VERSION = "shiftroster-test"


@pytest.fixture()
def app() -> Iterator:
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        db.session.add(
            User(
                id=uuid.uuid4(),
                email="manager@example.com",
                password_hash=hash_password("password123"),
                is_active=True,
            )
        )
        db.session.commit()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def logged_in_client(client):
    response = client.post(
        "/login",
        data={"email": "manager@example.com", "password": "password123"},
        follow_redirects=False,
    )
    assert response.status_code == 302
    return client


@pytest.fixture()
def stores(app):
    return get_stores()
