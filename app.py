"""Application factory."""

import json
import os
import uuid

from flask import Flask, jsonify, g, request
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.exceptions import HTTPException

from config import Config
from models import db
from repositories import build_repository
from repositories.records import utcnow
from routes.auth import auth_bp
from routes.games import games_bp
from routes.reviews import reviews_bp
from routes.site import site_bp
from routes.uploads import uploads_bp
from services import AccountService

jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Core subsystems
    db.init_app(app)
    jwt.init_app(app)
    _register_jwt_handlers()

    # CORS
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )

    # Rate limiting
    storage_uri = app.config.get("RATELIMIT_STORAGE_URI", "memory://")
    headers_enabled = app.config.get("RATELIMIT_HEADERS_ENABLED", True)
    key_prefix = app.config.get("RATELIMIT_KEY_PREFIX") or str(uuid.uuid4())

    global limiter
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[lambda: app.config.get("RATE_LIMIT", "1000 per 15 minutes")],
        storage_uri=storage_uri,
        headers_enabled=headers_enabled,
        key_prefix=key_prefix,
    )
    limiter.init_app(app)
    app.config["RATELIMIT_KEY_PREFIX"] = key_prefix

    # Ensure uploads directory exists
    upload_dir = app.config.get("UPLOAD_DIR")
    if upload_dir:
        os.makedirs(upload_dir, exist_ok=True)

    # Persistence
    repository = build_repository(app)
    if app.config.get("SEED_DEFAULT_ADMIN"):
        with app.app_context():
            AccountService(repository).ensure_default_admin(
                app.config["DEFAULT_ADMIN_EMAIL"], app.config["DEFAULT_ADMIN_PASSWORD"]
            )

    # Blueprints
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(games_bp, url_prefix="/games")
    app.register_blueprint(reviews_bp, url_prefix="/reviews")
    app.register_blueprint(site_bp, url_prefix="/site")
    app.register_blueprint(uploads_bp, url_prefix="/uploads")

    # Health
    @app.route("/health", methods=["GET"])
    def health_check():
        return jsonify({"status": "ok", "timestamp": utcnow().isoformat()})

    @app.route("/config", methods=["GET"])
    def client_config():
        return jsonify({"storageBackend": app.config.get("STORAGE_BACKEND", "sql")})

    # Errors
    _register_error_handlers(app)

    return app


def _error_payload(error: str, detail: str, status: int):
    request_id = g.get("request_id") or str(uuid.uuid4())
    response = jsonify({"error": error, "detail": detail, "request_id": request_id})
    response.status_code = status
    response.headers.setdefault("X-Request-ID", request_id)
    return response


def _register_jwt_handlers() -> None:
    """Render Flask-JWT-Extended failures in the common error shape."""

    @jwt.unauthorized_loader
    def _missing_token(reason: str):
        return _error_payload("Unauthorized", "Access token required", 401)

    @jwt.invalid_token_loader
    def _invalid_token(reason: str):
        return _error_payload("Unauthorized", "Invalid or expired token", 401)

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_payload):
        return _error_payload("Unauthorized", "Invalid or expired token", 401)


def _register_error_handlers(app: Flask) -> None:
    """Register JSON error handlers with request IDs."""

    @app.before_request
    def _assign_request_id():  # pragma: no cover
        g.request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    @app.after_request
    def _add_request_id_header(response):  # pragma: no cover
        request_id = g.get("request_id")
        if request_id:
            response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(HTTPException)
    def _handle_http_exception(error: HTTPException):
        request_id = g.get("request_id") or str(uuid.uuid4())
        response = error.get_response()
        payload = {
            "error": getattr(error, "name", "Error"),
            "detail": error.description,
            "request_id": request_id,
        }
        response.data = json.dumps(payload)
        response.content_type = "application/json"
        response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):  # pragma: no cover
        app.logger.exception("Unhandled application error", exc_info=error)
        return _error_payload(
            "Internal Server Error", "An unexpected error occurred.", 500
        )


if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
