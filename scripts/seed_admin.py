"""Seed an administrator user."""

from __future__ import annotations

from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from werkzeug.security import generate_password_hash

from app import create_app
from config import Config
from repositories import get_repository
from repositories.records import UserRecord
from services import AccountService


def main(config_class: type[Config] = Config) -> UserRecord:
    """Create the configured admin account, or reset it to admin with the configured password."""

    app = create_app(config_class)
    with app.app_context():
        email = app.config["DEFAULT_ADMIN_EMAIL"]
        password = app.config["DEFAULT_ADMIN_PASSWORD"]
        repository = get_repository()

        admin = repository.find_user_by_email(email)
        if admin is None:
            admin = AccountService(repository).sign_up(email, password, role="admin")
            action = "created"
        else:
            admin = repository.update_user(
                admin.id,
                role="admin",
                password_hash=generate_password_hash(password),
            )
            action = "updated"
        print(f"Admin user {action}: {admin.email}")
        return admin


if __name__ == "__main__":
    main()
