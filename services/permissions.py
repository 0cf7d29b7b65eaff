"""Authorization policy for catalog and feedback mutations."""

from __future__ import annotations

from typing import Optional

from werkzeug.exceptions import Forbidden, Unauthorized

from repositories.records import ReplyRecord, ReviewRecord, UserRecord


def can_manage_review(actor: Optional[UserRecord], review: ReviewRecord) -> bool:
    if actor is None:
        return False
    return actor.is_admin or actor.id == review.user_id


def can_manage_reply(actor: Optional[UserRecord], reply: ReplyRecord) -> bool:
    if actor is None:
        return False
    return actor.is_admin or actor.id == reply.user_id


def can_manage_catalog(actor: Optional[UserRecord]) -> bool:
    return actor is not None and actor.is_admin


def require_actor(actor: Optional[UserRecord]) -> UserRecord:
    """Return ``actor`` or raise 401 when nobody is logged in."""

    if actor is None:
        raise Unauthorized("Access token required.")
    return actor


def ensure_can_manage_review(
    actor: Optional[UserRecord], review: ReviewRecord, action: str = "modify"
) -> UserRecord:
    require_actor(actor)
    if not can_manage_review(actor, review):
        raise Forbidden(f"Not authorized to {action} this review.")
    return actor


def ensure_can_manage_reply(
    actor: Optional[UserRecord], reply: ReplyRecord, action: str = "modify"
) -> UserRecord:
    require_actor(actor)
    if not can_manage_reply(actor, reply):
        raise Forbidden(f"Not authorized to {action} this reply.")
    return actor


def ensure_can_manage_catalog(actor: Optional[UserRecord]) -> UserRecord:
    require_actor(actor)
    if not can_manage_catalog(actor):
        raise Forbidden("Admin access required.")
    return actor
