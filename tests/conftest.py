# tests/conftest.py

import asyncio
import os
import sys
from datetime import datetime, timedelta

# Add the project root (the folder containing `eximchat/`) to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from eximchat.core.config import Settings
from eximchat.main import create_app
from eximchat.services import chat_store


def make_settings(**overrides) -> Settings:
    values = {
        "SECRET_KEY": "test-secret",
        "MONGODB_DB": "eximchat_test",
        "GEMINI_API_KEY": "test-key",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def db():
    return AsyncMongoMockClient()["eximchat_test"]


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def app(settings, db):
    return create_app(settings, db)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def seed(db):
    """Insert messages straight into the store with controlled timestamps."""
    base = datetime(2025, 1, 1, 12, 0, 0)

    def _seed(conversation_id, sender, text, minutes=0, user=None):
        return asyncio.run(chat_store.create_message(
            db,
            conversation_id=conversation_id,
            sender=sender,
            text=text,
            user=user,
            timestamp=base + timedelta(minutes=minutes),
        ))

    return _seed


@pytest.fixture
def register_user(client):
    def _register(username="trader", password="s3cret"):
        response = client.post("/api/auth/register", json={"username": username, "password": password})
        assert response.status_code == 201, response.text
        return response.json()

    return _register


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def bearer():
    return auth_headers


@pytest.fixture
def make_client(db):
    """TestClient over the shared mock db with some settings overridden."""
    def _make(**overrides):
        return TestClient(create_app(make_settings(**overrides), db))

    return _make
