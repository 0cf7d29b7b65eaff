"""SQLAlchemy-backed repository."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import Conflict

from models import db
from models.game import Game
from models.review import Reply, Review
from models.site_settings import SETTINGS_KEY, SiteSettings
from models.user import User

from .abstract_repository import AbstractRepository
from .records import (
    GameRecord,
    ReplyRecord,
    ReviewRecord,
    SiteSettingsRecord,
    UserRecord,
    utcnow,
)

logger = logging.getLogger(__name__)


class SqlRepository(AbstractRepository):
    """Persist records through the Flask-SQLAlchemy session.

    Every mutating method commits its own unit of work, so callers must run
    inside an application context.
    """

    def __init__(self, database=db):
        self.db = database

    @property
    def session(self):
        return self.db.session

    def _commit(self, conflict_message: str = "Conflicting record.") -> None:
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            logger.warning("Integrity error on commit: %s", exc.orig)
            raise Conflict(conflict_message) from exc

    # Users

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        user = self.session.get(User, user_id)
        return user.to_record() if user else None

    def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        user = User.query.filter(func.lower(User.email) == (email or "").lower()).first()
        return user.to_record() if user else None

    def find_admin(self) -> Optional[UserRecord]:
        user = User.query.filter_by(role="admin").order_by(User.created_at.asc()).first()
        return user.to_record() if user else None

    def insert_user(self, user: UserRecord) -> UserRecord:
        row = User(
            id=user.id,
            email=user.email,
            password_hash=user.password_hash,
            role=user.role,
            created_at=user.created_at,
        )
        self.session.add(row)
        self._commit("Email already in use")
        return row.to_record()

    def update_user(
        self,
        user_id: str,
        *,
        email: Optional[str] = None,
        password_hash: Optional[str] = None,
        role: Optional[str] = None,
    ) -> Optional[UserRecord]:
        user = self.session.get(User, user_id)
        if user is None:
            return None
        if email is not None:
            user.email = email
        if password_hash is not None:
            user.password_hash = password_hash
        if role is not None:
            user.role = role
        self._commit("Email already in use")
        return user.to_record()

    def propagate_email(self, user_id: str, email: str) -> int:
        reviews = (
            Review.query.filter_by(user_id=user_id)
            .update({Review.user_email: email}, synchronize_session=False)
        )
        replies = (
            Reply.query.filter_by(user_id=user_id)
            .update({Reply.user_email: email}, synchronize_session=False)
        )
        self._commit()
        return reviews + replies

    # Games

    def list_games(self) -> List[GameRecord]:
        games = Game.query.order_by(Game.created_at.desc()).all()
        return [game.to_record() for game in games]

    def search_games(self, term: str) -> List[GameRecord]:
        needle = (term or "").lower()
        games = (
            Game.query.filter(
                or_(
                    func.lower(Game.title).contains(needle, autoescape=True),
                    func.lower(Game.genre).contains(needle, autoescape=True),
                    func.lower(Game.description).contains(needle, autoescape=True),
                )
            )
            .order_by(Game.created_at.desc())
            .all()
        )
        return [game.to_record() for game in games]

    def get_game(self, game_id: str) -> Optional[GameRecord]:
        game = self.session.get(Game, game_id)
        return game.to_record() if game else None

    def insert_game(self, game: GameRecord) -> GameRecord:
        row = Game(
            id=game.id,
            title=game.title,
            genre=game.genre,
            description=game.description,
            image_url=game.image_url,
            created_at=game.created_at,
        )
        self.session.add(row)
        self._commit()
        return row.to_record()

    def update_game(self, game: GameRecord) -> GameRecord:
        row = self.session.get(Game, game.id)
        row.title = game.title
        row.genre = game.genre
        row.description = game.description
        row.image_url = game.image_url
        self._commit()
        return row.to_record()

    def delete_game_cascade(self, game_id: str) -> bool:
        game = self.session.get(Game, game_id)
        if game is None:
            return False
        review_ids = select(Review.id).where(Review.game_id == game_id)
        Reply.query.filter(Reply.review_id.in_(review_ids)).delete(
            synchronize_session=False
        )
        Review.query.filter_by(game_id=game_id).delete(synchronize_session=False)
        self.session.delete(game)
        self._commit()
        return True

    # Reviews

    def get_review(self, review_id: str) -> Optional[ReviewRecord]:
        review = self.session.get(Review, review_id)
        return review.to_record() if review else None

    def find_review(self, game_id: str, user_id: str) -> Optional[ReviewRecord]:
        review = Review.query.filter_by(game_id=game_id, user_id=user_id).first()
        return review.to_record() if review else None

    @staticmethod
    def _page(query, offset: int, limit: Optional[int]):
        query = query.order_by(Review.created_at.desc()).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return [review.to_record() for review in query.all()]

    def list_reviews_for_game(
        self, game_id: str, offset: int = 0, limit: Optional[int] = None
    ) -> List[ReviewRecord]:
        return self._page(Review.query.filter_by(game_id=game_id), offset, limit)

    def count_reviews_for_game(self, game_id: str) -> int:
        return Review.query.filter_by(game_id=game_id).count()

    def list_reviews_for_user(
        self, user_id: str, offset: int = 0, limit: Optional[int] = None
    ) -> List[ReviewRecord]:
        return self._page(Review.query.filter_by(user_id=user_id), offset, limit)

    def count_reviews_for_user(self, user_id: str) -> int:
        return Review.query.filter_by(user_id=user_id).count()

    def rating_stats(
        self, game_ids: Optional[Iterable[str]] = None
    ) -> Dict[str, Tuple[int, int]]:
        query = self.session.query(
            Review.game_id, func.sum(Review.rating), func.count(Review.id)
        ).group_by(Review.game_id)
        if game_ids is not None:
            query = query.filter(Review.game_id.in_(list(game_ids)))
        return {game_id: (int(total), int(count)) for game_id, total, count in query.all()}

    def insert_review(self, review: ReviewRecord) -> ReviewRecord:
        row = Review(
            id=review.id,
            game_id=review.game_id,
            user_id=review.user_id,
            user_email=review.user_email,
            rating=review.rating,
            text=review.text,
            created_at=review.created_at,
        )
        self.session.add(row)
        self._commit("You have already reviewed this game")
        return row.to_record()

    def update_review(
        self, review_id: str, *, rating: int, text: str
    ) -> Optional[ReviewRecord]:
        review = self.session.get(Review, review_id)
        if review is None:
            return None
        review.rating = rating
        review.text = text
        self._commit()
        return review.to_record()

    def delete_review_cascade(self, review_id: str) -> bool:
        review = self.session.get(Review, review_id)
        if review is None:
            return False
        Reply.query.filter_by(review_id=review_id).delete(synchronize_session=False)
        self.session.delete(review)
        self._commit()
        return True

    # Replies

    def get_reply(self, reply_id: str) -> Optional[ReplyRecord]:
        reply = self.session.get(Reply, reply_id)
        return reply.to_record() if reply else None

    def list_replies_for_reviews(
        self, review_ids: Iterable[str]
    ) -> Dict[str, List[ReplyRecord]]:
        review_ids = list(review_ids)
        grouped: Dict[str, List[ReplyRecord]] = {review_id: [] for review_id in review_ids}
        if not review_ids:
            return grouped
        replies = (
            Reply.query.filter(Reply.review_id.in_(review_ids))
            .order_by(Reply.created_at.asc())
            .all()
        )
        for reply in replies:
            grouped[reply.review_id].append(reply.to_record())
        return grouped

    def list_replies_for_user(self, user_id: str) -> List[ReplyRecord]:
        replies = (
            Reply.query.filter_by(user_id=user_id)
            .order_by(Reply.created_at.desc())
            .all()
        )
        return [reply.to_record() for reply in replies]

    def insert_reply(self, reply: ReplyRecord) -> ReplyRecord:
        row = Reply(
            id=reply.id,
            review_id=reply.review_id,
            user_id=reply.user_id,
            user_email=reply.user_email,
            text=reply.text,
            created_at=reply.created_at,
        )
        self.session.add(row)
        self._commit()
        return row.to_record()

    def update_reply(self, reply_id: str, *, text: str) -> Optional[ReplyRecord]:
        reply = self.session.get(Reply, reply_id)
        if reply is None:
            return None
        reply.text = text
        self._commit()
        return reply.to_record()

    def delete_reply(self, reply_id: str) -> bool:
        reply = self.session.get(Reply, reply_id)
        if reply is None:
            return False
        self.session.delete(reply)
        self._commit()
        return True

    # Site settings

    def get_site_settings(self) -> SiteSettingsRecord:
        settings = self.session.get(SiteSettings, SETTINGS_KEY)
        return settings.to_record() if settings else SiteSettingsRecord()

    def set_banner_url(self, banner_url: str) -> SiteSettingsRecord:
        settings = self.session.get(SiteSettings, SETTINGS_KEY)
        if settings is None:
            settings = SiteSettings(key=SETTINGS_KEY)
            self.session.add(settings)
        settings.banner_url = banner_url
        settings.updated_at = utcnow()
        self._commit()
        return settings.to_record()
