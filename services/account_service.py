"""Business logic for accounts: signup, login and account updates."""

from __future__ import annotations

import logging
from typing import Optional

from werkzeug.exceptions import BadRequest, Conflict, NotFound, Unauthorized
from werkzeug.security import check_password_hash, generate_password_hash

from repositories import AbstractRepository
from repositories.records import UserRecord, new_id, utcnow
from utils.validators import normalize_email, validate_email, validate_password

from .permissions import require_actor

logger = logging.getLogger(__name__)


class AccountService:
    """Creates users, checks credentials and applies account changes."""

    def __init__(self, repository: AbstractRepository) -> None:
        self._repo = repository

    def sign_up(self, email: object, password: object, role: str = "user") -> UserRecord:
        email = validate_email(email if isinstance(email, str) else None)
        password = validate_password(password)

        if self._repo.find_user_by_email(email) is not None:
            raise Conflict("Email already in use")

        user = self._repo.insert_user(
            UserRecord(
                id=new_id(),
                email=email,
                password_hash=generate_password_hash(password),
                role=role,
                created_at=utcnow(),
            )
        )
        logger.info("User %s signed up with role %s", user.email, user.role)
        return user

    def authenticate(self, email: object, password: object) -> UserRecord:
        """Return the user for valid credentials or raise 401."""
        email = normalize_email(email if isinstance(email, str) else None)
        if not email or not isinstance(password, str) or not password:
            raise BadRequest("Email and password are required.")

        user = self._repo.find_user_by_email(email)
        if user is None or not check_password_hash(user.password_hash, password):
            raise Unauthorized("Invalid credentials")
        return user

    def update_account(
        self,
        actor: Optional[UserRecord],
        *,
        email: object = None,
        current_password: object = None,
        new_password: object = None,
    ) -> UserRecord:
        """Change the actor's email and/or password.

        A new email must not belong to any other user (ignoring case) and is
        copied onto every review and reply the user has written. A new
        password requires the current one.
        """
        actor = require_actor(actor)
        user = self._repo.get_user(actor.id)
        if user is None:
            raise NotFound("User not found")

        new_email = None
        if email not in (None, ""):
            candidate = validate_email(email if isinstance(email, str) else None)
            if candidate != user.email.lower():
                existing = self._repo.find_user_by_email(candidate)
                if existing is not None and existing.id != user.id:
                    raise Conflict("Email already in use")
                new_email = candidate

        password_hash = None
        if new_password not in (None, ""):
            validate_password(new_password, field="New password")
            if not current_password:
                raise BadRequest("Current password is required to change password")
            if not isinstance(current_password, str) or not check_password_hash(
                user.password_hash, current_password
            ):
                raise BadRequest("Current password is incorrect")
            password_hash = generate_password_hash(new_password)

        if new_email is None and password_hash is None:
            return user

        updated = self._repo.update_user(
            user.id, email=new_email, password_hash=password_hash
        )
        if new_email is not None:
            touched = self._repo.propagate_email(user.id, new_email)
            logger.info(
                "Email of user %s changed; %d reviews/replies updated", user.id, touched
            )
        return updated

    def ensure_default_admin(self, email: str, password: str) -> Optional[UserRecord]:
        """Create an admin account when none exists. Returns the new admin."""
        if self._repo.find_admin() is not None:
            return None

        email = normalize_email(email)
        existing = self._repo.find_user_by_email(email)
        if existing is not None:
            admin = self._repo.update_user(existing.id, role="admin")
            logger.info("Promoted %s to admin", email)
            return admin

        admin = self._repo.insert_user(
            UserRecord(
                id=new_id(),
                email=email,
                password_hash=generate_password_hash(password),
                role="admin",
                created_at=utcnow(),
            )
        )
        logger.info("Default admin user created: %s", email)
        return admin
