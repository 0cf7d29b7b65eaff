"""Games blueprint: catalog listing, search and admin management."""

from __future__ import annotations

from urllib.parse import quote

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required
from werkzeug.datastructures import FileStorage

from repositories import get_repository
from services import CatalogService
from storage import get_storage
from utils.auth import get_current_user
from utils.request_validation import parse_form_or_json

games_bp = Blueprint("games", __name__)

PLACEHOLDER_IMAGE_URL = "https://picsum.photos/seed/{seed}/640/360"


def _catalog() -> CatalogService:
    return CatalogService(get_repository())


def _uploaded_image() -> FileStorage | None:
    file = request.files.get("image")
    if isinstance(file, FileStorage) and file.filename:
        return file
    return None


@games_bp.route("", methods=["GET"])
def list_games():
    """Return the catalog with average rating and review count per game."""

    return jsonify({"games": _catalog().list_games()})


@games_bp.route("/search/<path:query>", methods=["GET"])
def search_games(query: str):
    return jsonify({"games": _catalog().search_games(query)})


@games_bp.route("/<game_id>", methods=["GET"])
def get_game(game_id: str):
    return jsonify({"game": _catalog().get_game(game_id)})


@games_bp.route("", methods=["POST"])
@jwt_required()
def add_game():
    """Create a game. Admins only; accepts multipart with an optional image."""

    user = get_current_user()
    data = parse_form_or_json(request)
    catalog = _catalog()

    # Validate before touching the upload directory.
    catalog.check_game_fields(user, data)

    image = _uploaded_image()
    if image is not None:
        image_url = get_storage().save_image(image)
    else:
        seed = quote(str(data.get("title") or "game").strip(), safe="")
        image_url = PLACEHOLDER_IMAGE_URL.format(seed=seed)

    game = catalog.add_game(
        user,
        title=data.get("title"),
        genre=data.get("genre"),
        description=data.get("description"),
        image_url=image_url,
    )
    return jsonify({"message": "Game added successfully", "game": game}), 201


@games_bp.route("/<game_id>", methods=["PUT"])
@jwt_required()
def update_game(game_id: str):
    user = get_current_user()
    data = parse_form_or_json(request)
    catalog = _catalog()
    catalog.check_game_fields(user, data, game_id=game_id)

    image = _uploaded_image()
    image_url = get_storage().save_image(image) if image is not None else None

    game = catalog.update_game(
        user,
        game_id,
        title=data.get("title"),
        genre=data.get("genre"),
        description=data.get("description"),
        image_url=image_url,
    )
    return jsonify({"message": "Game updated successfully", "game": game})


@games_bp.route("/<game_id>", methods=["DELETE"])
@jwt_required()
def delete_game(game_id: str):
    """Delete a game along with its reviews and replies."""

    user = get_current_user()
    _catalog().delete_game(user, game_id)
    return jsonify({"message": "Game deleted successfully"})
