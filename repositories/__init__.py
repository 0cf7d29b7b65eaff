"""Persistence backends behind a single repository interface."""

from __future__ import annotations

from flask import Flask, current_app

from .abstract_repository import AbstractRepository
from .json_repository import JsonRepository

BACKENDS = ("sql", "json")
EXTENSION_KEY = "repository"


def build_repository(app: Flask) -> AbstractRepository:
    """Create the backend named by ``STORAGE_BACKEND`` and register it on ``app``."""

    backend = app.config.get("STORAGE_BACKEND", "sql")
    if backend == "json":
        repository: AbstractRepository = JsonRepository(app.config["JSON_STORE_PATH"])
    elif backend == "sql":
        # Imported here: the models package depends on repositories.records.
        from models import db
        from .sql_repository import SqlRepository

        with app.app_context():
            db.create_all()
        repository = SqlRepository(db)
    else:
        raise ValueError(
            "STORAGE_BACKEND must be one of: {}.".format(", ".join(BACKENDS))
        )

    app.extensions[EXTENSION_KEY] = repository
    app.logger.info("Using %s storage backend", backend)
    return repository


def get_repository() -> AbstractRepository:
    """Return the repository of the active application."""

    return current_app.extensions[EXTENSION_KEY]


__all__ = [
    "AbstractRepository",
    "JsonRepository",
    "build_repository",
    "get_repository",
]
