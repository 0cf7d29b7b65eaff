"""Local JSON document repository."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from typing import Any, Dict, Iterable, List, Optional, Tuple

from werkzeug.exceptions import Conflict

from .abstract_repository import AbstractRepository
from .records import (
    GameRecord,
    ReplyRecord,
    ReviewRecord,
    SiteSettingsRecord,
    UserRecord,
    from_document,
    to_document,
    utcnow,
)

logger = logging.getLogger(__name__)

COLLECTIONS = ("users", "games", "reviews", "replies")


class JsonRepository(AbstractRepository):
    """Keeps every collection in one JSON file.

    The whole document is held in ``self.data`` and written back after each
    mutation with a write-then-rename, so the file is never left partially
    written. Suitable for a single process only.
    """

    def __init__(self, file_path: str) -> None:
        self._path = file_path
        directory = os.path.dirname(os.path.abspath(file_path))
        os.makedirs(directory, exist_ok=True)
        self.data: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if os.path.exists(self._path):
            try:
                with open(self._path, "r", encoding="utf-8") as fh:
                    data = json.load(fh)
            except (json.JSONDecodeError, OSError) as exc:
                logger.warning("Could not load %s: %s", self._path, exc)
                data = {}
        for name in COLLECTIONS:
            if not isinstance(data.get(name), list):
                data[name] = []
        if not isinstance(data.get("site"), dict):
            data["site"] = {}
        return data

    def _save(self) -> None:
        try:
            self._write()
        except Exception:
            logger.error("Could not save %s; reloading the stored document", self._path)
            self.data = self._load()
            raise

    def _write(self) -> None:
        dir_name = os.path.dirname(os.path.abspath(self._path))
        fd, tmp_path = tempfile.mkstemp(dir=dir_name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(self.data, fh, indent=2)
            os.replace(tmp_path, self._path)
        except Exception:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

    def _find(self, collection: str, record_id: str) -> Optional[dict]:
        for document in self.data[collection]:
            if document["id"] == record_id:
                return document
        return None

    @staticmethod
    def _newest_first(documents: Iterable[dict]) -> List[dict]:
        return sorted(documents, key=lambda doc: doc.get("created_at") or "", reverse=True)

    @staticmethod
    def _slice(documents: List[dict], offset: int, limit: Optional[int]) -> List[dict]:
        if limit is None:
            return documents[offset:]
        return documents[offset:offset + limit]

    # Users

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        document = self._find("users", user_id)
        return from_document(UserRecord, document) if document else None

    def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        needle = (email or "").lower()
        for document in self.data["users"]:
            if document["email"].lower() == needle:
                return from_document(UserRecord, document)
        return None

    def find_admin(self) -> Optional[UserRecord]:
        for document in self.data["users"]:
            if document.get("role") == "admin":
                return from_document(UserRecord, document)
        return None

    def insert_user(self, user: UserRecord) -> UserRecord:
        if self.find_user_by_email(user.email) is not None:
            raise Conflict("Email already in use")
        self.data["users"].append(to_document(user))
        self._save()
        return user

    def update_user(
        self,
        user_id: str,
        *,
        email: Optional[str] = None,
        password_hash: Optional[str] = None,
        role: Optional[str] = None,
    ) -> Optional[UserRecord]:
        document = self._find("users", user_id)
        if document is None:
            return None
        if email is not None:
            document["email"] = email
        if password_hash is not None:
            document["password_hash"] = password_hash
        if role is not None:
            document["role"] = role
        self._save()
        return from_document(UserRecord, document)

    def propagate_email(self, user_id: str, email: str) -> int:
        touched = 0
        for name in ("reviews", "replies"):
            for document in self.data[name]:
                if document["user_id"] == user_id:
                    document["user_email"] = email
                    touched += 1
        if touched:
            self._save()
        return touched

    # Games

    def list_games(self) -> List[GameRecord]:
        return [
            from_document(GameRecord, document)
            for document in self._newest_first(self.data["games"])
        ]

    def search_games(self, term: str) -> List[GameRecord]:
        needle = (term or "").lower()
        matches = [
            document
            for document in self.data["games"]
            if any(
                needle in (document.get(field) or "").lower()
                for field in ("title", "genre", "description")
            )
        ]
        return [from_document(GameRecord, document) for document in self._newest_first(matches)]

    def get_game(self, game_id: str) -> Optional[GameRecord]:
        document = self._find("games", game_id)
        return from_document(GameRecord, document) if document else None

    def insert_game(self, game: GameRecord) -> GameRecord:
        self.data["games"].append(to_document(game))
        self._save()
        return game

    def update_game(self, game: GameRecord) -> GameRecord:
        document = self._find("games", game.id)
        document.update(to_document(game))
        self._save()
        return game

    def delete_game_cascade(self, game_id: str) -> bool:
        if self._find("games", game_id) is None:
            return False
        review_ids = {
            document["id"]
            for document in self.data["reviews"]
            if document["game_id"] == game_id
        }
        self.data["replies"] = [
            document for document in self.data["replies"]
            if document["review_id"] not in review_ids
        ]
        self.data["reviews"] = [
            document for document in self.data["reviews"]
            if document["game_id"] != game_id
        ]
        self.data["games"] = [
            document for document in self.data["games"] if document["id"] != game_id
        ]
        self._save()
        return True

    # Reviews

    def get_review(self, review_id: str) -> Optional[ReviewRecord]:
        document = self._find("reviews", review_id)
        return from_document(ReviewRecord, document) if document else None

    def find_review(self, game_id: str, user_id: str) -> Optional[ReviewRecord]:
        for document in self.data["reviews"]:
            if document["game_id"] == game_id and document["user_id"] == user_id:
                return from_document(ReviewRecord, document)
        return None

    def _reviews_where(self, field: str, value: str) -> List[dict]:
        return self._newest_first(
            document for document in self.data["reviews"] if document[field] == value
        )

    def list_reviews_for_game(
        self, game_id: str, offset: int = 0, limit: Optional[int] = None
    ) -> List[ReviewRecord]:
        documents = self._slice(self._reviews_where("game_id", game_id), offset, limit)
        return [from_document(ReviewRecord, document) for document in documents]

    def count_reviews_for_game(self, game_id: str) -> int:
        return sum(1 for document in self.data["reviews"] if document["game_id"] == game_id)

    def list_reviews_for_user(
        self, user_id: str, offset: int = 0, limit: Optional[int] = None
    ) -> List[ReviewRecord]:
        documents = self._slice(self._reviews_where("user_id", user_id), offset, limit)
        return [from_document(ReviewRecord, document) for document in documents]

    def count_reviews_for_user(self, user_id: str) -> int:
        return sum(1 for document in self.data["reviews"] if document["user_id"] == user_id)

    def rating_stats(
        self, game_ids: Optional[Iterable[str]] = None
    ) -> Dict[str, Tuple[int, int]]:
        wanted = set(game_ids) if game_ids is not None else None
        stats: Dict[str, Tuple[int, int]] = {}
        for document in self.data["reviews"]:
            game_id = document["game_id"]
            if wanted is not None and game_id not in wanted:
                continue
            total, count = stats.get(game_id, (0, 0))
            stats[game_id] = (total + int(document["rating"]), count + 1)
        return stats

    def insert_review(self, review: ReviewRecord) -> ReviewRecord:
        if self.find_review(review.game_id, review.user_id) is not None:
            raise Conflict("You have already reviewed this game")
        self.data["reviews"].append(to_document(review))
        self._save()
        return review

    def update_review(
        self, review_id: str, *, rating: int, text: str
    ) -> Optional[ReviewRecord]:
        document = self._find("reviews", review_id)
        if document is None:
            return None
        document["rating"] = rating
        document["text"] = text
        self._save()
        return from_document(ReviewRecord, document)

    def delete_review_cascade(self, review_id: str) -> bool:
        if self._find("reviews", review_id) is None:
            return False
        self.data["replies"] = [
            document for document in self.data["replies"]
            if document["review_id"] != review_id
        ]
        self.data["reviews"] = [
            document for document in self.data["reviews"] if document["id"] != review_id
        ]
        self._save()
        return True

    # Replies

    def get_reply(self, reply_id: str) -> Optional[ReplyRecord]:
        document = self._find("replies", reply_id)
        return from_document(ReplyRecord, document) if document else None

    def list_replies_for_reviews(
        self, review_ids: Iterable[str]
    ) -> Dict[str, List[ReplyRecord]]:
        grouped: Dict[str, List[ReplyRecord]] = {review_id: [] for review_id in review_ids}
        ordered = sorted(self.data["replies"], key=lambda doc: doc.get("created_at") or "")
        for document in ordered:
            if document["review_id"] in grouped:
                grouped[document["review_id"]].append(from_document(ReplyRecord, document))
        return grouped

    def list_replies_for_user(self, user_id: str) -> List[ReplyRecord]:
        documents = self._newest_first(
            document for document in self.data["replies"] if document["user_id"] == user_id
        )
        return [from_document(ReplyRecord, document) for document in documents]

    def insert_reply(self, reply: ReplyRecord) -> ReplyRecord:
        self.data["replies"].append(to_document(reply))
        self._save()
        return reply

    def update_reply(self, reply_id: str, *, text: str) -> Optional[ReplyRecord]:
        document = self._find("replies", reply_id)
        if document is None:
            return None
        document["text"] = text
        self._save()
        return from_document(ReplyRecord, document)

    def delete_reply(self, reply_id: str) -> bool:
        if self._find("replies", reply_id) is None:
            return False
        self.data["replies"] = [
            document for document in self.data["replies"] if document["id"] != reply_id
        ]
        self._save()
        return True

    # Site settings

    def get_site_settings(self) -> SiteSettingsRecord:
        return from_document(SiteSettingsRecord, self.data["site"])

    def set_banner_url(self, banner_url: str) -> SiteSettingsRecord:
        settings = SiteSettingsRecord(banner_url=banner_url, updated_at=utcnow())
        self.data["site"] = to_document(settings)
        self._save()
        return settings
