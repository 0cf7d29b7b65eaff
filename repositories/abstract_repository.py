"""Repository abstraction layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Tuple

from .records import (
    GameRecord,
    ReplyRecord,
    ReviewRecord,
    SiteSettingsRecord,
    UserRecord,
)


class AbstractRepository(ABC):
    """Interface for persistence backends.

    Every backend must honour the same semantics: email lookups are
    case-insensitive, listings come back newest-first, and the cascade
    deletes remove children before their parent.
    """

    # Users

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[UserRecord]:
        """Return the user with ``user_id`` or ``None``."""

    @abstractmethod
    def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        """Return the user whose email matches ``email`` ignoring case."""

    @abstractmethod
    def find_admin(self) -> Optional[UserRecord]:
        """Return any user with the admin role."""

    @abstractmethod
    def insert_user(self, user: UserRecord) -> UserRecord:
        """Persist a new user."""

    @abstractmethod
    def update_user(
        self,
        user_id: str,
        *,
        email: Optional[str] = None,
        password_hash: Optional[str] = None,
        role: Optional[str] = None,
    ) -> Optional[UserRecord]:
        """Apply the given changes to a user and return the updated record."""

    @abstractmethod
    def propagate_email(self, user_id: str, email: str) -> int:
        """Copy ``email`` onto every review and reply authored by ``user_id``.

        Idempotent; returns the number of records written.
        """

    # Games

    @abstractmethod
    def list_games(self) -> List[GameRecord]:
        """Return the catalog, newest first."""

    @abstractmethod
    def search_games(self, term: str) -> List[GameRecord]:
        """Return games whose title, genre or description contains ``term``."""

    @abstractmethod
    def get_game(self, game_id: str) -> Optional[GameRecord]:
        """Return the game with ``game_id`` or ``None``."""

    @abstractmethod
    def insert_game(self, game: GameRecord) -> GameRecord:
        """Persist a new game."""

    @abstractmethod
    def update_game(self, game: GameRecord) -> GameRecord:
        """Overwrite the stored game with the same id."""

    @abstractmethod
    def delete_game_cascade(self, game_id: str) -> bool:
        """Delete a game's replies, its reviews, then the game itself."""

    # Reviews

    @abstractmethod
    def get_review(self, review_id: str) -> Optional[ReviewRecord]:
        """Return the review with ``review_id`` or ``None``."""

    @abstractmethod
    def find_review(self, game_id: str, user_id: str) -> Optional[ReviewRecord]:
        """Return the review ``user_id`` wrote for ``game_id``, if any."""

    @abstractmethod
    def list_reviews_for_game(
        self, game_id: str, offset: int = 0, limit: Optional[int] = None
    ) -> List[ReviewRecord]:
        """Return one page of a game's reviews, newest first."""

    @abstractmethod
    def count_reviews_for_game(self, game_id: str) -> int:
        """Return the number of reviews attached to ``game_id``."""

    @abstractmethod
    def list_reviews_for_user(
        self, user_id: str, offset: int = 0, limit: Optional[int] = None
    ) -> List[ReviewRecord]:
        """Return one page of a user's reviews, newest first."""

    @abstractmethod
    def count_reviews_for_user(self, user_id: str) -> int:
        """Return the number of reviews written by ``user_id``."""

    @abstractmethod
    def rating_stats(
        self, game_ids: Optional[Iterable[str]] = None
    ) -> Dict[str, Tuple[int, int]]:
        """Return ``{game_id: (rating_total, review_count)}`` in one pass.

        Games without reviews are absent from the mapping.
        """

    @abstractmethod
    def insert_review(self, review: ReviewRecord) -> ReviewRecord:
        """Persist a new review."""

    @abstractmethod
    def update_review(
        self, review_id: str, *, rating: int, text: str
    ) -> Optional[ReviewRecord]:
        """Change a review's rating and text."""

    @abstractmethod
    def delete_review_cascade(self, review_id: str) -> bool:
        """Delete a review's replies, then the review."""

    # Replies

    @abstractmethod
    def get_reply(self, reply_id: str) -> Optional[ReplyRecord]:
        """Return the reply with ``reply_id`` or ``None``."""

    @abstractmethod
    def list_replies_for_reviews(
        self, review_ids: Iterable[str]
    ) -> Dict[str, List[ReplyRecord]]:
        """Return ``{review_id: replies}`` with replies oldest first."""

    @abstractmethod
    def list_replies_for_user(self, user_id: str) -> List[ReplyRecord]:
        """Return every reply written by ``user_id``, newest first."""

    @abstractmethod
    def insert_reply(self, reply: ReplyRecord) -> ReplyRecord:
        """Persist a new reply."""

    @abstractmethod
    def update_reply(self, reply_id: str, *, text: str) -> Optional[ReplyRecord]:
        """Change a reply's text."""

    @abstractmethod
    def delete_reply(self, reply_id: str) -> bool:
        """Delete a single reply."""

    # Site settings

    @abstractmethod
    def get_site_settings(self) -> SiteSettingsRecord:
        """Return the singleton settings record (empty when never written)."""

    @abstractmethod
    def set_banner_url(self, banner_url: str) -> SiteSettingsRecord:
        """Store the banner image reference."""
