"""Application factory for the meeting room booking service."""

from __future__ import annotations

import sqlite3
from datetime import timedelta
from pathlib import Path

from flask import Flask, request
from flask_limiter.errors import RateLimitExceeded
from werkzeug.exceptions import HTTPException

from .cli import register_commands
from .config import BaseConfig, get_config
from .controllers.responses import error_response
from .data_access.db import init_app as init_db_app
from .errors import BookingServiceError
from .extensions import limiter, login_manager
from .jobs.expiry_sweeper import ExpirySweeper
from .services.email.factory import get_email_sender
from .services.notifications import NotificationDispatcher
from .services.tokens import JWTManager


def create_app(config_object: type[BaseConfig] | None = None) -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(
        __name__,
        template_folder=str(Path(__file__).parent / "views"),
    )

    config_cls = config_object or get_config()
    app.config.from_object(config_cls)
    app.logger.setLevel(app.config["LOG_LEVEL"])

    login_manager.init_app(app)
    limiter.init_app(app)
    init_db_app(app)

    app.extensions["jwt"] = JWTManager(
        app.config["JWT_SECRET_KEY"],
        algorithm=app.config["JWT_ALGORITHM"],
        expires_delta=timedelta(hours=app.config["JWT_EXPIRES_HOURS"]),
    )
    app.extensions["notifications"] = NotificationDispatcher(
        get_email_sender(app.config),
        run_async=app.config["NOTIFICATIONS_ASYNC"],
        max_workers=app.config["NOTIFICATION_WORKERS"],
    )
    app.extensions["expiry_sweeper"] = ExpirySweeper(
        app,
        interval_seconds=app.config["SWEEP_INTERVAL_SECONDS"],
        retention=timedelta(hours=app.config["SWEEP_RETENTION_HOURS"]),
    )

    register_blueprints(app)
    register_error_handlers(app)
    register_commands(app)

    @app.route("/api/health")
    def health():
        return {"status": "ok"}

    if app.config["SWEEPER_ENABLED"]:
        app.extensions["expiry_sweeper"].start()

    return app


def register_blueprints(app: Flask) -> None:
    """Import and register application blueprints."""

    from .controllers import auth, bookings, rooms  # pylint: disable=import-outside-toplevel

    app.register_blueprint(auth.bp)
    app.register_blueprint(rooms.bp)
    app.register_blueprint(bookings.bp)


def register_error_handlers(app: Flask) -> None:
    """Render every failure with the JSON envelope."""

    @app.errorhandler(BookingServiceError)
    def service_error(error: BookingServiceError):
        return error_response(error.message, error.status_code, error.details)

    @app.errorhandler(RateLimitExceeded)
    def rate_limited(error: RateLimitExceeded):
        app.logger.warning("Rate limit exceeded: %s on %s", request.remote_addr, request.path)
        return error_response(f"Too many requests. Limit is {error.description}.", 429)

    @app.errorhandler(sqlite3.Error)
    def database_error(error: sqlite3.Error):
        app.logger.exception("Database failure: %s", error)
        return error_response("An internal error occurred.", 500)

    @app.errorhandler(HTTPException)
    def http_error(error: HTTPException):
        return error_response(error.description or error.name, error.code or 500)

    @app.errorhandler(500)
    def server_error(error: Exception):
        return error_response("An unexpected error occurred.", 500)
