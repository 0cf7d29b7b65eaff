"""Bootstrap demo data for local development."""

from __future__ import annotations

import json
from dataclasses import dataclass, asdict
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from werkzeug.security import generate_password_hash

from app import create_app
from config import Config
from repositories import AbstractRepository, get_repository
from repositories.records import UserRecord
from services import AccountService, CatalogService, ReviewService


@dataclass
class CreatedRecords:
    """Container for created or updated record identifiers."""

    admin_id: str
    reviewer_id: str
    replier_id: str
    game_id: str
    review_id: str
    reply_id: str


ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "AdminPass123"
REVIEWER_EMAIL = "alice@example.com"
REVIEWER_PASSWORD = "AlicePass123"
REPLIER_EMAIL = "bob@example.com"
REPLIER_PASSWORD = "BobPass123"
GAME_TITLE = "Chess"
GAME_IMAGE_URL = "https://picsum.photos/seed/Chess/640/360"


def get_or_create_user(
    repository: AbstractRepository, email: str, password: str, role: str
) -> UserRecord:
    """Create or update a user with the provided credentials."""

    user = repository.find_user_by_email(email)
    if user is None:
        return AccountService(repository).sign_up(email, password, role=role)
    return repository.update_user(
        user.id, role=role, password_hash=generate_password_hash(password)
    )


def ensure_game(repository: AbstractRepository, admin: UserRecord) -> str:
    """Ensure the demo game exists in the catalog."""

    for game in repository.search_games(GAME_TITLE.lower()):
        if game.title == GAME_TITLE:
            return game.id
    game = CatalogService(repository).add_game(
        admin,
        title=GAME_TITLE,
        genre="Strategy",
        description="The classic game of kings and pawns.",
        image_url=GAME_IMAGE_URL,
    )
    return game["id"]


def ensure_review(
    repository: AbstractRepository, reviewer: UserRecord, replier: UserRecord, game_id: str
) -> tuple[str, str]:
    """Ensure the reviewer has rated the game and the replier has answered."""

    reviews = ReviewService(repository)
    existing = repository.find_review(game_id, reviewer.id)
    if existing is None:
        review_id = reviews.add_review(
            reviewer, game_id, 5, "Timeless. Every game is different."
        )["id"]
    else:
        review_id = existing.id

    for reply in repository.list_replies_for_reviews([review_id]).get(review_id, []):
        if reply.user_id == replier.id:
            return review_id, reply.id
    reply = reviews.add_reply(replier, review_id, "Agreed, the endgames never get old.")
    return review_id, reply["id"]


def bootstrap(config_class: type[Config] = Config) -> CreatedRecords:
    """Bootstrap the demo records and return their identifiers."""

    app = create_app(config_class)
    with app.app_context():
        repository = get_repository()

        admin = get_or_create_user(repository, ADMIN_EMAIL, ADMIN_PASSWORD, "admin")
        reviewer = get_or_create_user(repository, REVIEWER_EMAIL, REVIEWER_PASSWORD, "user")
        replier = get_or_create_user(repository, REPLIER_EMAIL, REPLIER_PASSWORD, "user")

        game_id = ensure_game(repository, admin)
        review_id, reply_id = ensure_review(repository, reviewer, replier, game_id)

        return CreatedRecords(
            admin_id=admin.id,
            reviewer_id=reviewer.id,
            replier_id=replier.id,
            game_id=game_id,
            review_id=review_id,
            reply_id=reply_id,
        )


if __name__ == "__main__":
    records = bootstrap()
    print(json.dumps(asdict(records)))
