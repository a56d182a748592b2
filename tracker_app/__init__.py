"""
Flask application factory module.

This module creates and configures the task-tracker Flask application
using the factory pattern, allowing for different configurations
(development, testing, production).

The factory wires, in order: configuration, the token service (built once
from the injected secret), SQLAlchemy, the authentication gate, the error
boundary, the blueprints, and the CLI commands.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from flask import Flask
from flask_sqlalchemy import SQLAlchemy

from config import get_config, load_jwt_secret

# Initialize SQLAlchemy without binding to app
db = SQLAlchemy()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def _ensure_sqlite_db_parent_exists(database_uri: str) -> None:
    """Create parent directories for file-based SQLite URIs when missing."""
    sqlite_prefix = "sqlite:///"
    if not database_uri.startswith(sqlite_prefix):
        return

    sqlite_path = database_uri[len(sqlite_prefix) :].split("?", 1)[0]
    if sqlite_path == ":memory:":
        return

    Path(sqlite_path).parent.mkdir(parents=True, exist_ok=True)


def create_app(config_name: str | None = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     If None, uses FLASK_ENV environment variable.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__, instance_relative_config=True)

    # Load configuration
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    logger.info("Creating app with config: %s", config_class.__name__)

    # Ensure instance folder exists
    os.makedirs(app.instance_path, exist_ok=True)
    _ensure_sqlite_db_parent_exists(app.config.get("SQLALCHEMY_DATABASE_URI", ""))

    from .jwt import TokenService

    secret = load_jwt_secret(
        testing=bool(app.config.get("TESTING")),
        production=config_class.__name__ == "ProductionConfig",
    )
    app.extensions["token_service"] = TokenService(
        secret_key=secret,
        lifetime_seconds=app.config["AUTH_TOKEN_LIFETIME_SECONDS"],
        leeway_seconds=app.config["JWT_CLOCK_SKEW_SECONDS"],
    )

    # Initialize extensions
    db.init_app(app)

    from .auth import init_auth
    from .errors import register_error_handlers

    init_auth(app)
    register_error_handlers(app)

    # Register blueprints
    from .routes.auth import auth_bp, user_bp
    from .routes.persons import persons_bp
    from .routes.tasks import health_bp, tasks_bp

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(user_bp, url_prefix="/api/user")
    app.register_blueprint(persons_bp, url_prefix="/api/persons")
    app.register_blueprint(tasks_bp, url_prefix="/api/tasks")

    from .cli import register_cli

    register_cli(app)

    # Create database tables
    with app.app_context():
        db.create_all()
        logger.info("Database tables created")

    return app
