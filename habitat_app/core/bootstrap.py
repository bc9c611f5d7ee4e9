"""Bootstrap helpers for configuring the Flask application."""

from __future__ import annotations

from flask import Flask

from ..extensions import db, login_manager, migrate
from .error_handlers import register_error_handlers
from .logging_config import setup_logging
from .module_registry import register_default_modules


def configure_logging(app: Flask) -> None:
    """Attach the console and file handlers to the app logger."""

    setup_logging(
        app,
        log_level=app.config.get('LOG_LEVEL', 'INFO'),
        log_dir=app.config.get('LOG_DIR'),
        json_format=app.config.get('LOG_JSON', False),
    )
    app.logger.propagate = False


def register_extensions(app: Flask) -> None:
    """Initialize shared extensions with the Flask app instance."""

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)


def register_user_loader(app: Flask) -> None:
    """Wire Flask-Login to the learner table and answer API callers with JSON."""

    @login_manager.user_loader
    def load_user(user_id: str):
        from ..models import User

        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        from .error_handlers import error_response

        return error_response('Authentication required', 'UNAUTHORIZED', 401)


def register_blueprints(app: Flask) -> None:
    """Register all default blueprints with the app."""

    register_default_modules(app)
    # Signal handlers are connected on import.
    from ..modules.gamification import events  # noqa: F401


def initialize_database(app: Flask) -> None:
    """Create database tables."""

    from .. import models  # noqa: F401

    db.create_all()
    app.logger.info("Database tables ensured.")


__all__ = [
    "configure_logging",
    "register_extensions",
    "register_user_loader",
    "register_blueprints",
    "register_error_handlers",
    "initialize_database",
]
