"""Plain records shared by every repository implementation."""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, fields
from datetime import datetime, timezone
from typing import Any, Optional, Type, TypeVar


ROLES = ("user", "admin")

RecordT = TypeVar("RecordT")


def new_id() -> str:
    """Return a fresh record identifier."""

    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class UserRecord:
    id: str
    email: str
    password_hash: str
    role: str = "user"
    created_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def to_dict(self) -> dict:
        """Serialize the public view of the user."""

        return {
            "id": self.id,
            "email": self.email,
            "role": self.role,
            "createdAt": _isoformat(self.created_at),
        }


@dataclass
class GameRecord:
    id: str
    title: str
    genre: str
    description: str = ""
    image_url: str = ""
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "genre": self.genre,
            "description": self.description,
            "imageUrl": self.image_url,
            "createdAt": _isoformat(self.created_at),
        }


@dataclass
class ReviewRecord:
    id: str
    game_id: str
    user_id: str
    user_email: str
    rating: int
    text: str = ""
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "gameId": self.game_id,
            "userId": self.user_id,
            "userEmail": self.user_email,
            "rating": self.rating,
            "text": self.text,
            "createdAt": _isoformat(self.created_at),
        }


@dataclass
class ReplyRecord:
    id: str
    review_id: str
    user_id: str
    user_email: str
    text: str
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "reviewId": self.review_id,
            "userId": self.user_id,
            "userEmail": self.user_email,
            "text": self.text,
            "createdAt": _isoformat(self.created_at),
        }


@dataclass
class SiteSettingsRecord:
    banner_url: Optional[str] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {"bannerUrl": self.banner_url}


def to_document(record: Any) -> dict:
    """Convert a record to a JSON-safe dictionary keyed by field name."""

    document = asdict(record)
    for key, value in document.items():
        if isinstance(value, datetime):
            document[key] = value.isoformat()
    return document


def from_document(record_type: Type[RecordT], document: dict) -> RecordT:
    """Rebuild a record from :func:`to_document` output."""

    values = {}
    for field in fields(record_type):
        if field.name not in document:
            continue
        value = document[field.name]
        if field.name.endswith("_at") and isinstance(value, str):
            value = datetime.fromisoformat(value)
        values[field.name] = value
    return record_type(**values)
