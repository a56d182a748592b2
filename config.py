"""
Application configuration module.

This module defines configuration classes for different environments
(development, testing, production). Configuration values are loaded
from environment variables with sensible defaults.

The JWT signing secret is not a class attribute. It is resolved once by
:func:`load_jwt_secret` when the application is created; production
refuses to start without an explicitly supplied secret.
"""

from __future__ import annotations

import os
from pathlib import Path

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent

DEV_JWT_SECRET = "dev-jwt-secret-change-in-production-0123456789abcdef"


def _env_bool(name: str, default: bool) -> bool:
    """Read a boolean flag from the environment ("1", "true", "yes" are truthy)."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _load_secret(raw_env_var: str, path_env_var: str) -> str | None:
    """
    Load a secret from a raw environment variable or a file-path variable.

    The raw variable takes precedence over the path variable so
    orchestrators can inject secrets directly without mounting files.
    Returns ``None`` when neither variable is configured.
    """
    raw_secret = os.environ.get(raw_env_var, "").strip()
    if raw_secret:
        return raw_secret

    secret_path = os.environ.get(path_env_var, "").strip()
    if secret_path:
        try:
            return Path(secret_path).read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise RuntimeError(
                f"Unable to read JWT secret file at '{secret_path}' from {path_env_var}."
            ) from exc

    return None


def load_jwt_secret(*, testing: bool, production: bool) -> str:
    """
    Resolve the HMAC secret used to sign and verify tokens.

    In testing mode, ``TEST_JWT_SECRET_KEY`` wins when set. Production
    requires ``JWT_SECRET_KEY`` (or ``JWT_SECRET_KEY_PATH``); other
    environments fall back to a development-only default.

    Raises:
        RuntimeError: If no secret is configured in production.
    """
    if testing:
        test_secret = _load_secret("TEST_JWT_SECRET_KEY", "TEST_JWT_SECRET_KEY_PATH")
        if test_secret:
            return test_secret

    secret = _load_secret("JWT_SECRET_KEY", "JWT_SECRET_KEY_PATH")
    if secret:
        return secret

    if production:
        raise RuntimeError(
            "Missing JWT secret configuration: set JWT_SECRET_KEY or JWT_SECRET_KEY_PATH."
        )
    return DEV_JWT_SECRET


class Config:
    """Base configuration with default settings."""

    SECRET_KEY: str = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-production")
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False

    # Default database location
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "DATABASE_URL",
        f"sqlite:///{BASE_DIR / 'instance' / 'tasks.db'}"
    )

    # One lifetime drives both the token ``exp`` claim and the cookie max-age
    AUTH_TOKEN_LIFETIME_SECONDS: int = int(os.environ.get("AUTH_TOKEN_LIFETIME_SECONDS", "3600"))
    JWT_CLOCK_SKEW_SECONDS: int = int(os.environ.get("JWT_CLOCK_SKEW_SECONDS", "0"))

    AUTH_COOKIE_NAME: str = "token"
    AUTH_COOKIE_SECURE: bool = _env_bool("AUTH_COOKIE_SECURE", False)
    AUTH_COOKIE_SAMESITE: str = "Lax"

    PAGE_SIZE: int = int(os.environ.get("PAGE_SIZE", "10"))

    # When enabled, ADMIN principals may update/delete tasks they do not own
    ADMIN_OVERRIDES_OWNERSHIP: bool = _env_bool("ADMIN_OVERRIDES_OWNERSHIP", False)


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG: bool = True
    TESTING: bool = False


class TestingConfig(Config):
    """Testing environment configuration."""

    DEBUG: bool = True
    TESTING: bool = True

    # Use separate test database with check_same_thread=False for multi-threaded access
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "TEST_DATABASE_URL",
        f"sqlite:///{BASE_DIR / 'instance' / 'test_tasks.db'}?check_same_thread=False"
    )

    # SQLAlchemy engine options for thread safety
    SQLALCHEMY_ENGINE_OPTIONS: dict = {
        "pool_pre_ping": True,
    }

    PAGE_SIZE: int = 3


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG: bool = False
    TESTING: bool = False
    AUTH_COOKIE_SECURE: bool = _env_bool("AUTH_COOKIE_SECURE", True)


# Configuration mapping for easy access
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Get the configuration class for the specified environment.

    Args:
        env: Environment name (development, testing, production).
             If None, uses FLASK_ENV environment variable.

    Returns:
        Configuration class for the specified environment.
    """
    if env is None:
        env = os.environ.get("FLASK_ENV", "development")
    return config.get(env, config["default"])
