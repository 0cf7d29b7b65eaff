"""Business logic for the game catalog."""

from __future__ import annotations

import logging
from typing import List, Optional

from werkzeug.exceptions import NotFound

from repositories import AbstractRepository
from repositories.records import GameRecord, UserRecord, new_id, utcnow
from utils.validators import validate_game_fields

from . import aggregation
from .permissions import ensure_can_manage_catalog

logger = logging.getLogger(__name__)


class CatalogService:
    """Reads the catalog with live rating aggregates and gates admin writes."""

    def __init__(self, repository: AbstractRepository) -> None:
        self._repo = repository

    def _require_game(self, game_id: str) -> GameRecord:
        game = self._repo.get_game(game_id)
        if game is None:
            raise NotFound("Game not found")
        return game

    def _with_rating(self, game: GameRecord) -> dict:
        stats = self._repo.rating_stats([game.id])
        return aggregation.game_with_rating(game, stats.get(game.id))

    def list_games(self) -> List[dict]:
        """Return every game, newest first, with ``avgRating``/``reviewCount``."""
        games = self._repo.list_games()
        return aggregation.games_with_ratings(games, self._repo.rating_stats())

    def search_games(self, term: str) -> List[dict]:
        games = self._repo.search_games((term or "").strip())
        stats = self._repo.rating_stats([game.id for game in games])
        return aggregation.games_with_ratings(games, stats)

    def get_game(self, game_id: str) -> dict:
        return self._with_rating(self._require_game(game_id))

    def check_game_fields(
        self,
        actor: Optional[UserRecord],
        data: dict,
        game_id: Optional[str] = None,
    ) -> None:
        """Run every check of :meth:`add_game`/:meth:`update_game` without writing."""
        ensure_can_manage_catalog(actor)
        validate_game_fields(data.get("title"), data.get("genre"), data.get("description"))
        if game_id is not None:
            self._require_game(game_id)

    def add_game(
        self,
        actor: Optional[UserRecord],
        *,
        title: object,
        genre: object,
        description: object = None,
        image_url: str = "",
    ) -> dict:
        ensure_can_manage_catalog(actor)
        title, genre, description = validate_game_fields(title, genre, description)
        game = self._repo.insert_game(
            GameRecord(
                id=new_id(),
                title=title,
                genre=genre,
                description=description,
                image_url=image_url,
                created_at=utcnow(),
            )
        )
        logger.info("Game %s (%s) added by %s", game.id, game.title, actor.email)
        return aggregation.game_with_rating(game, None)

    def update_game(
        self,
        actor: Optional[UserRecord],
        game_id: str,
        *,
        title: object,
        genre: object,
        description: object = None,
        image_url: Optional[str] = None,
    ) -> dict:
        ensure_can_manage_catalog(actor)
        title, genre, description = validate_game_fields(title, genre, description)
        game = self._require_game(game_id)
        game.title = title
        game.genre = genre
        game.description = description
        if image_url:
            game.image_url = image_url
        return self._with_rating(self._repo.update_game(game))

    def delete_game(self, actor: Optional[UserRecord], game_id: str) -> None:
        """Delete a game together with its reviews and their replies."""
        ensure_can_manage_catalog(actor)
        self._require_game(game_id)
        self._repo.delete_game_cascade(game_id)
        logger.info("Game %s deleted by %s", game_id, actor.email)
