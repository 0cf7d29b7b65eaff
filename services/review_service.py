"""Business logic for reviews and their replies."""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional

from werkzeug.exceptions import Conflict, NotFound

from repositories import AbstractRepository
from repositories.records import (
    ReplyRecord,
    ReviewRecord,
    UserRecord,
    new_id,
    utcnow,
)
from utils.validators import validate_rating, validate_text

from .permissions import (
    ensure_can_manage_reply,
    ensure_can_manage_review,
    require_actor,
)

logger = logging.getLogger(__name__)


def pagination(page: int, limit: int, total: int) -> Dict[str, int]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }


class ReviewService:
    """Validates and applies review and reply operations.

    Rules
    -----
    * ``rating`` must be an integer in the range **1-5** (inclusive).
    * review ``text`` is optional, reply ``text`` is required; both are
      trimmed and capped at 2000 characters.
    * A user may review a given game only once.
    * Only the author or an admin may edit or delete a review or reply.
    """

    def __init__(self, repository: AbstractRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _require_review(self, review_id: str) -> ReviewRecord:
        review = self._repo.get_review(review_id)
        if review is None:
            raise NotFound("Review not found")
        return review

    def _require_reply(self, reply_id: str) -> ReplyRecord:
        reply = self._repo.get_reply(reply_id)
        if reply is None:
            raise NotFound("Reply not found")
        return reply

    def list_for_game(self, game_id: str, page: int = 1, limit: int = 20) -> dict:
        """Return one page of a game's reviews, newest first, with replies."""
        if self._repo.get_game(game_id) is None:
            raise NotFound("Game not found")

        reviews = self._repo.list_reviews_for_game(
            game_id, offset=(page - 1) * limit, limit=limit
        )
        replies = self._repo.list_replies_for_reviews([review.id for review in reviews])
        payload = []
        for review in reviews:
            item = review.to_dict()
            item["replies"] = [reply.to_dict() for reply in replies.get(review.id, [])]
            payload.append(item)

        total = self._repo.count_reviews_for_game(game_id)
        return {"reviews": payload, "pagination": pagination(page, limit, total)}

    def list_for_user(self, user_id: str, page: int = 1, limit: int = 20) -> dict:
        """Return one page of a user's reviews annotated with the game."""
        reviews = self._repo.list_reviews_for_user(
            user_id, offset=(page - 1) * limit, limit=limit
        )
        games = {}
        payload = []
        for review in reviews:
            if review.game_id not in games:
                games[review.game_id] = self._repo.get_game(review.game_id)
            game = games[review.game_id]
            item = review.to_dict()
            item["gameTitle"] = game.title if game else None
            item["gameImage"] = game.image_url if game else None
            payload.append(item)

        total = self._repo.count_reviews_for_user(user_id)
        return {"reviews": payload, "pagination": pagination(page, limit, total)}

    def list_replies_for_user(self, user_id: str) -> List[dict]:
        replies = self._repo.list_replies_for_user(user_id)
        reviews: Dict[str, Optional[ReviewRecord]] = {}
        payload = []
        for reply in replies:
            if reply.review_id not in reviews:
                reviews[reply.review_id] = self._repo.get_review(reply.review_id)
            review = reviews[reply.review_id]
            item = reply.to_dict()
            item["gameId"] = review.game_id if review else None
            payload.append(item)
        return payload

    # ------------------------------------------------------------------
    # Reviews
    # ------------------------------------------------------------------

    def add_review(
        self,
        actor: Optional[UserRecord],
        game_id: str,
        rating: object,
        text: object = "",
    ) -> dict:
        actor = require_actor(actor)
        rating = validate_rating(rating)
        text = validate_text(text, label="Review text")

        if self._repo.get_game(game_id) is None:
            raise NotFound("Game not found")
        # Read-then-write; the SQL backend also has a unique constraint.
        if self._repo.find_review(game_id, actor.id) is not None:
            raise Conflict("You have already reviewed this game")

        review = self._repo.insert_review(
            ReviewRecord(
                id=new_id(),
                game_id=game_id,
                user_id=actor.id,
                user_email=actor.email,
                rating=rating,
                text=text,
                created_at=utcnow(),
            )
        )
        logger.info("Review %s added for game %s by %s", review.id, game_id, actor.email)
        payload = review.to_dict()
        payload["replies"] = []
        return payload

    def update_review(
        self,
        actor: Optional[UserRecord],
        review_id: str,
        rating: object,
        text: object = "",
    ) -> dict:
        require_actor(actor)
        rating = validate_rating(rating)
        text = validate_text(text, label="Review text")
        review = self._require_review(review_id)
        ensure_can_manage_review(actor, review, "edit")
        return self._repo.update_review(review_id, rating=rating, text=text).to_dict()

    def delete_review(self, actor: Optional[UserRecord], review_id: str) -> None:
        require_actor(actor)
        review = self._require_review(review_id)
        ensure_can_manage_review(actor, review, "delete")
        self._repo.delete_review_cascade(review_id)
        logger.info("Review %s deleted by %s", review_id, actor.email)

    # ------------------------------------------------------------------
    # Replies
    # ------------------------------------------------------------------

    def add_reply(self, actor: Optional[UserRecord], review_id: str, text: object) -> dict:
        actor = require_actor(actor)
        text = validate_text(text, label="Reply text", required=True)
        self._require_review(review_id)
        reply = self._repo.insert_reply(
            ReplyRecord(
                id=new_id(),
                review_id=review_id,
                user_id=actor.id,
                user_email=actor.email,
                text=text,
                created_at=utcnow(),
            )
        )
        return reply.to_dict()

    def update_reply(self, actor: Optional[UserRecord], reply_id: str, text: object) -> dict:
        require_actor(actor)
        text = validate_text(text, label="Reply text", required=True)
        reply = self._require_reply(reply_id)
        ensure_can_manage_reply(actor, reply, "edit")
        return self._repo.update_reply(reply_id, text=text).to_dict()

    def delete_reply(self, actor: Optional[UserRecord], reply_id: str) -> None:
        require_actor(actor)
        reply = self._require_reply(reply_id)
        ensure_can_manage_reply(actor, reply, "delete")
        self._repo.delete_reply(reply_id)
