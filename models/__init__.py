"""Database initialization and model exports."""

from flask_sqlalchemy import SQLAlchemy


db = SQLAlchemy()

# Import models to register them with SQLAlchemy metadata.
from .user import User  # noqa: E402,F401
from .game import Game  # noqa: E402,F401
from .review import Reply, Review  # noqa: E402,F401
from .site_settings import SiteSettings  # noqa: E402,F401

__all__ = [
    "db",
    "User",
    "Game",
    "Review",
    "Reply",
    "SiteSettings",
]
