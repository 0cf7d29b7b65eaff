"""Reviews blueprint: per-game and per-user listings, reviews and replies."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from repositories import get_repository
from services import ReviewService
from utils.auth import get_current_user
from utils.request_validation import parse_json_request, parse_pagination

reviews_bp = Blueprint("reviews", __name__)


def _reviews() -> ReviewService:
    return ReviewService(get_repository())


@reviews_bp.route("/game/<game_id>", methods=["GET"])
def list_game_reviews(game_id: str):
    """Return a page of the game's reviews, newest first, with nested replies."""

    page, limit = parse_pagination(request)
    return jsonify(_reviews().list_for_game(game_id, page=page, limit=limit))


@reviews_bp.route("/user/<user_id>", methods=["GET"])
def list_user_reviews(user_id: str):
    page, limit = parse_pagination(request)
    return jsonify(_reviews().list_for_user(user_id, page=page, limit=limit))


@reviews_bp.route("/user/<user_id>/replies", methods=["GET"])
def list_user_replies(user_id: str):
    return jsonify({"replies": _reviews().list_replies_for_user(user_id)})


@reviews_bp.route("/game/<game_id>", methods=["POST"])
@jwt_required()
def add_review(game_id: str):
    user = get_current_user()
    data = parse_json_request(request, required_keys=("rating",))
    review = _reviews().add_review(user, game_id, data.get("rating"), data.get("text"))
    return jsonify({"message": "Review added successfully", "review": review}), 201


@reviews_bp.route("/<review_id>", methods=["PUT"])
@jwt_required()
def update_review(review_id: str):
    user = get_current_user()
    data = parse_json_request(request, required_keys=("rating",))
    review = _reviews().update_review(user, review_id, data.get("rating"), data.get("text"))
    return jsonify({"message": "Review updated successfully", "review": review})


@reviews_bp.route("/<review_id>", methods=["DELETE"])
@jwt_required()
def delete_review(review_id: str):
    """Delete a review and its replies. Author or admin only."""

    user = get_current_user()
    _reviews().delete_review(user, review_id)
    return jsonify({"message": "Review deleted successfully"})


@reviews_bp.route("/<review_id>/replies", methods=["POST"])
@jwt_required()
def add_reply(review_id: str):
    user = get_current_user()
    data = parse_json_request(request)
    reply = _reviews().add_reply(user, review_id, data.get("text"))
    return jsonify({"message": "Reply added successfully", "reply": reply}), 201


@reviews_bp.route("/replies/<reply_id>", methods=["PUT"])
@jwt_required()
def update_reply(reply_id: str):
    user = get_current_user()
    data = parse_json_request(request)
    reply = _reviews().update_reply(user, reply_id, data.get("text"))
    return jsonify({"message": "Reply updated successfully", "reply": reply})


@reviews_bp.route("/replies/<reply_id>", methods=["DELETE"])
@jwt_required()
def delete_reply(reply_id: str):
    user = get_current_user()
    _reviews().delete_reply(user, reply_id)
    return jsonify({"message": "Reply deleted successfully"})
