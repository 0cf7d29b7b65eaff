"""Field validators shared by the services."""

from __future__ import annotations

from typing import Optional

from email_validator import EmailNotValidError, validate_email as _validate_email
from werkzeug.exceptions import BadRequest

MIN_RATING = 1
MAX_RATING = 5
MAX_TEXT_LENGTH = 2000
MAX_TITLE_LENGTH = 200
MAX_GENRE_LENGTH = 100
MIN_PASSWORD_LENGTH = 6


def normalize_email(raw_email: Optional[str]) -> str:
    """Normalize an email string by stripping whitespace and lowering case."""

    return (raw_email or "").strip().lower()


def validate_email(raw_email: Optional[str]) -> str:
    """Return the normalized email or raise a 400 error."""

    email = normalize_email(raw_email)
    if not email:
        raise BadRequest("Valid email is required.")
    try:
        _validate_email(email, check_deliverability=False)
    except EmailNotValidError as exc:
        raise BadRequest("Valid email is required.") from exc
    return email


def validate_password(password: Optional[str], *, field: str = "Password") -> str:
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise BadRequest(
            f"{field} must be at least {MIN_PASSWORD_LENGTH} characters long."
        )
    return password


def validate_rating(value: object) -> int:
    """Coerce ``value`` to an integer rating between 1 and 5."""

    if isinstance(value, bool):
        raise BadRequest("Rating must be between 1 and 5.")
    if isinstance(value, str):
        value = value.strip()
    try:
        rating = int(value)
    except (TypeError, ValueError, OverflowError):
        raise BadRequest("Rating must be between 1 and 5.")
    if isinstance(value, float) and value != rating:
        raise BadRequest("Rating must be between 1 and 5.")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise BadRequest("Rating must be between 1 and 5.")
    return rating


def validate_text(
    value: object,
    *,
    label: str,
    required: bool = False,
    max_length: int = MAX_TEXT_LENGTH,
) -> str:
    """Trim free text and enforce the length limits."""

    if value is None:
        value = ""
    if not isinstance(value, str):
        raise BadRequest(f"{label} must be a string.")
    text = value.strip()
    if required and not text:
        raise BadRequest(f"{label} must be between 1 and {max_length} characters.")
    if len(text) > max_length:
        if required:
            raise BadRequest(f"{label} must be between 1 and {max_length} characters.")
        raise BadRequest(f"{label} must be less than {max_length} characters.")
    return text


def validate_game_fields(title: object, genre: object, description: object):
    """Return the cleaned ``(title, genre, description)`` triple."""

    return (
        validate_text(title, label="Title", required=True, max_length=MAX_TITLE_LENGTH),
        validate_text(genre, label="Genre", required=True, max_length=MAX_GENRE_LENGTH),
        validate_text(description, label="Description"),
    )
