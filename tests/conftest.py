"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from models import db  # noqa: E402
from repositories import get_repository  # noqa: E402

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "AdminPass123"


class _BaseTestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length-for-hs256"
    RATE_LIMIT = "10000 per minute"
    SEED_DEFAULT_ADMIN = True
    DEFAULT_ADMIN_EMAIL = ADMIN_EMAIL
    DEFAULT_ADMIN_PASSWORD = ADMIN_PASSWORD
    PUBLIC_BASE_URL = ""


def make_config(tmp_path: Path, backend: str = "sql", **overrides) -> type[Config]:
    """Return a config class isolated under ``tmp_path``."""

    class TestConfig(_BaseTestConfig):
        STORAGE_BACKEND = backend
        UPLOAD_DIR = str(tmp_path / "uploads")
        JSON_STORE_PATH = str(tmp_path / "store" / "gamereviews.json")

    for key, value in overrides.items():
        setattr(TestConfig, key, value)
    return TestConfig


@pytest.fixture(params=["sql", "json"])
def app(request, tmp_path) -> Flask:
    """Create a Flask application instance for each storage backend."""

    application = create_app(make_config(tmp_path, request.param))

    yield application

    if request.param == "sql":
        with application.app_context():
            db.session.remove()
            db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def repository(app: Flask):
    """Return the active repository inside an application context."""

    with app.app_context():
        yield get_repository()


def signup(client: FlaskClient, email: str, password: str = "Secret123") -> dict:
    response = client.post("/auth/signup", json={"email": email, "password": password})
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def login(client: FlaskClient, email: str, password: str) -> str:
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.get_json()
    return response.get_json()["token"]


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def admin_token(client: FlaskClient) -> str:
    return login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture()
def game(client: FlaskClient, admin_token: str) -> dict:
    """A catalog entry created through the API."""

    response = client.post(
        "/games",
        json={"title": "Chess", "genre": "Strategy", "description": "Kings and pawns"},
        headers=auth_header(admin_token),
    )
    assert response.status_code == 201, response.get_json()
    return response.get_json()["game"]
