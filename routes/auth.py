"""Authentication blueprint: signup, login, current user and account updates."""

from __future__ import annotations
from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import create_access_token, jwt_required

from repositories import get_repository
from services import AccountService
from utils.auth import get_current_user
from utils.request_validation import parse_json_request

auth_bp = Blueprint("auth", __name__)


def _issue_token(user) -> str:
    return create_access_token(
        identity=user.id, additional_claims={"email": user.email}
    )


@auth_bp.route("/signup", methods=["POST"])
def signup() -> tuple:
    """Register a new user and return a JWT access token."""
    payload = parse_json_request(request, required_keys=("email", "password"))
    user = AccountService(get_repository()).sign_up(
        payload.get("email"), payload.get("password")
    )

    return (
        jsonify(
            {
                "message": "User created successfully",
                "user": user.to_dict(),
                "token": _issue_token(user),
            }
        ),
        HTTPStatus.CREATED,
    )


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple:
    """Authenticate a user and return a JWT access token."""
    payload = parse_json_request(request)
    user = AccountService(get_repository()).authenticate(
        payload.get("email"), payload.get("password")
    )

    return (
        jsonify(
            {
                "message": "Login successful",
                "user": user.to_dict(),
                "token": _issue_token(user),
            }
        ),
        HTTPStatus.OK,
    )


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    user = get_current_user()
    return jsonify({"user": user.to_dict()})


@auth_bp.route("/account", methods=["PUT"])
@jwt_required()
def update_account():
    """Change the current user's email and/or password."""
    user = get_current_user()
    payload = parse_json_request(request, allow_empty=True)

    updated = AccountService(get_repository()).update_account(
        user,
        email=payload.get("email"),
        current_password=payload.get("currentPassword"),
        new_password=payload.get("newPassword"),
    )
    return jsonify({"message": "Account updated successfully", "user": updated.to_dict()})


@auth_bp.route("/logout", methods=["POST"])
@jwt_required()
def logout():
    # Tokens are stateless; the client discards its copy.
    get_current_user()
    return jsonify({"message": "Logout successful"})
