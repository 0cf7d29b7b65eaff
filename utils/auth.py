"""Resolve the acting user from the request's bearer token."""

from __future__ import annotations

from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from werkzeug.exceptions import Unauthorized

from repositories import get_repository
from repositories.records import UserRecord


def get_current_user() -> UserRecord:
    """Return the user behind the request's token.

    Flask-JWT-Extended rejects a missing or invalid token; a valid token for
    a vanished account raises 401.
    """

    verify_jwt_in_request()
    identity = get_jwt_identity()

    user = get_repository().get_user(str(identity))
    if user is None:
        raise Unauthorized("User not found")
    return user
