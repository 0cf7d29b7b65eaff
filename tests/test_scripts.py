"""Tests for the admin and demo data scripts."""

from __future__ import annotations

import pytest

from app import create_app
from conftest import make_config
from repositories import get_repository
from scripts import bootstrap_demo, seed_admin
from services import AccountService, CatalogService


@pytest.mark.parametrize("backend", ["sql", "json"])
def test_bootstrap_demo_is_idempotent(tmp_path, backend):
    if backend == "sql":
        database = tmp_path / "demo.db"
        config = make_config(
            tmp_path, backend, SQLALCHEMY_DATABASE_URI=f"sqlite:///{database}"
        )
    else:
        config = make_config(tmp_path, backend)

    first = bootstrap_demo.bootstrap(config)
    second = bootstrap_demo.bootstrap(config)

    assert first == second

    app = create_app(config)
    with app.app_context():
        game = CatalogService(get_repository()).get_game(first.game_id)
        assert game["title"] == bootstrap_demo.GAME_TITLE
        assert game["avgRating"] == 5.0
        assert game["reviewCount"] == 1
        user = AccountService(get_repository()).authenticate(
            bootstrap_demo.REVIEWER_EMAIL, bootstrap_demo.REVIEWER_PASSWORD
        )
        assert user.id == first.reviewer_id


def test_seed_admin_resets_password(tmp_path):
    config = make_config(
        tmp_path, "json", DEFAULT_ADMIN_PASSWORD="FirstPass123"
    )
    admin = seed_admin.main(config)
    assert admin.is_admin

    config.DEFAULT_ADMIN_PASSWORD = "SecondPass123"
    again = seed_admin.main(config)

    assert again.id == admin.id
    app = create_app(config)
    with app.app_context():
        user = AccountService(get_repository()).authenticate(
            config.DEFAULT_ADMIN_EMAIL, "SecondPass123"
        )
        assert user.is_admin
