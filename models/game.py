"""Game model definition."""

from repositories.records import GameRecord, new_id, utcnow

from . import db


class Game(db.Model):
    """A catalog entry that users can review."""

    __tablename__ = "games"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    title = db.Column(db.String(200), nullable=False)
    genre = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    image_url = db.Column(db.String(512), nullable=False, default="")
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    def to_record(self) -> GameRecord:
        return GameRecord(
            id=self.id,
            title=self.title,
            genre=self.genre,
            description=self.description or "",
            image_url=self.image_url or "",
            created_at=self.created_at,
        )

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<Game {self.title}>"
