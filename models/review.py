"""Review and reply models."""

from repositories.records import ReplyRecord, ReviewRecord, new_id, utcnow

from . import db


class Review(db.Model):
    """A star rating with optional text, one per user per game."""

    __tablename__ = "reviews"
    __table_args__ = (
        db.UniqueConstraint("game_id", "user_id", name="uq_reviews_game_user"),
        db.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    game_id = db.Column(
        db.String(36), db.ForeignKey("games.id"), nullable=False, index=True
    )
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False, index=True
    )
    user_email = db.Column(db.String(255), nullable=False)
    rating = db.Column(db.Integer, nullable=False)
    text = db.Column(db.Text, nullable=False, default="")
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    def to_record(self) -> ReviewRecord:
        return ReviewRecord(
            id=self.id,
            game_id=self.game_id,
            user_id=self.user_id,
            user_email=self.user_email,
            rating=self.rating,
            text=self.text or "",
            created_at=self.created_at,
        )


class Reply(db.Model):
    """A comment threaded one level under a review."""

    __tablename__ = "replies"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    review_id = db.Column(
        db.String(36), db.ForeignKey("reviews.id"), nullable=False, index=True
    )
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False, index=True
    )
    user_email = db.Column(db.String(255), nullable=False)
    text = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_record(self) -> ReplyRecord:
        return ReplyRecord(
            id=self.id,
            review_id=self.review_id,
            user_id=self.user_id,
            user_email=self.user_email,
            text=self.text,
            created_at=self.created_at,
        )
