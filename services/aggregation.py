"""Rating aggregation computed on every read."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Tuple

from repositories.records import GameRecord

_ONE_DECIMAL = Decimal("0.1")


def average_rating(total: int, count: int) -> float:
    """Return ``total / count`` rounded half-up to one decimal, 0 when empty."""

    if not count:
        return 0
    mean = Decimal(total) / Decimal(count)
    return float(mean.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def game_with_rating(game: GameRecord, stats: Optional[Tuple[int, int]]) -> dict:
    """Serialize ``game`` with its ``avgRating`` and ``reviewCount``."""

    total, count = stats or (0, 0)
    payload = game.to_dict()
    payload["avgRating"] = average_rating(total, count)
    payload["reviewCount"] = count
    return payload


def games_with_ratings(
    games: List[GameRecord], stats: Dict[str, Tuple[int, int]]
) -> List[dict]:
    """Join pre-fetched rating stats onto a list of games in one pass."""

    return [game_with_rating(game, stats.get(game.id)) for game in games]
