"""Site settings blueprint: banner image management."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required
from werkzeug.datastructures import FileStorage
from werkzeug.exceptions import BadRequest

from repositories import get_repository
from services.permissions import ensure_can_manage_catalog
from storage import get_storage
from utils.auth import get_current_user

site_bp = Blueprint("site", __name__)


@site_bp.route("", methods=["GET"])
def get_site_settings():
    return jsonify(get_repository().get_site_settings().to_dict())


@site_bp.route("/banner", methods=["POST"])
@jwt_required()
def upload_banner():
    """Replace the site banner image. Admins only."""

    ensure_can_manage_catalog(get_current_user())

    file = request.files.get("banner")
    if not isinstance(file, FileStorage) or not file.filename:
        raise BadRequest("No banner image uploaded")

    banner_url = get_storage().save_image(file)
    settings = get_repository().set_banner_url(banner_url)
    return jsonify({"message": "Banner uploaded", "bannerUrl": settings.banner_url})
