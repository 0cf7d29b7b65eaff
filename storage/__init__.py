"""Upload storage backends."""

from flask import current_app

from .abstract_storage import AbstractStorage
from .local_storage import LocalStorage


def get_storage() -> LocalStorage:
    """Build the upload storage configured for the active application."""

    config = current_app.config
    return LocalStorage(
        config.get("UPLOAD_DIR"),
        base_url=config.get("PUBLIC_BASE_URL", ""),
        allowed_types=config.get("ALLOWED_UPLOAD_TYPES"),
        max_size=int(config.get("MAX_UPLOAD_SIZE", 5 * 1024 * 1024)),
    )


__all__ = ["AbstractStorage", "LocalStorage", "get_storage"]
