"""User model definition."""

from repositories.records import UserRecord, new_id, utcnow

from . import db


class User(db.Model):
    """Represents a site account."""

    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(32), nullable=False, default="user")
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_record(self) -> UserRecord:
        return UserRecord(
            id=self.id,
            email=self.email,
            password_hash=self.password_hash,
            role=self.role,
            created_at=self.created_at,
        )

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.email}>"
