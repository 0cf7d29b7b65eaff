"""Serve stored upload files."""

from __future__ import annotations

from flask import Blueprint, send_from_directory
from werkzeug.exceptions import NotFound

from storage import get_storage

uploads_bp = Blueprint("uploads", __name__)


@uploads_bp.route("/<path:filename>", methods=["GET"])
def serve_upload(filename: str):
    storage = get_storage()
    if not storage.exists(filename):
        raise NotFound("File not found")
    return send_from_directory(storage.base_directory.resolve(), filename)
