"""Environment-driven settings, one class per deployment flavour.

``APP_ENV`` picks the class; individual values come from environment
variables (a local ``.env`` file is honoured) so deployments never edit code.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

ENV_VAR: Final[str] = "APP_ENV"

_TRUTHY = frozenset({"1", "true", "yes", "y", "on"})

load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Read a flag; ``1``, ``true``, ``yes``, ``y`` and ``on`` count as set.

    Matching ignores case and surrounding blanks. An unset variable yields
    ``default``.
    """
    raw = os.getenv(name)
    return default if raw is None else raw.strip().lower() in _TRUTHY


def env_int(name: str, default: int | None) -> int | None:
    """Read an integer; blank or unset yields ``default``."""
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


class BaseConfig:
    """Defaults shared by every environment.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string (``DATABASE_URL``).
    DB_POOL_MIN, DB_POOL_MAX: int
        Connection pool bounds. The pool keeps ``DB_POOL_MIN`` connections and
        opens overflow connections up to ``DB_POOL_MAX``.
    DB_POOL_TIMEOUT: int
        Seconds to wait for a pooled connection before failing.
    JWT_PRIVATE_KEY_PATH, JWT_PUBLIC_KEY_PATH: str | None
        PEM files for RS256 signing and verification.
    JWT_PRIVATE_KEY, JWT_PUBLIC_KEY: str | None
        PEM text; takes precedence over the paths when set.
    JWT_EXPIRES_SECONDS: int | None
        Token lifetime. Unset issues tokens without expiry; tokens are then
        revoked only by a password change.
    JWT_VERIFY_EXPIRY: bool
        Reject expired tokens during verification.
    PASSWORD_HASH_METHOD: str
        Werkzeug hash method for stored passwords.
    DEFAULT_PROFILE_PICTURE_URL: str
        Picture assigned to newly created accounts.
    AUTH_COOKIE_NAME: str
        Cookie carrying ``Bearer <token>`` after login.
    AUTH_COOKIE_SECURE: bool
        Mark the auth cookie ``Secure``.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS, CORS_METHODS: str
        Comma-separated CORS allow-lists.
    USE_PROXYFIX: bool
        Trust one hop of ``X-Forwarded-*`` headers.
    """

    API_BASE_PREFIX = "/api"

    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")

    # Storage
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./lockbox.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    DB_POOL_MIN = env_int("DB_POOL_MIN", 1)
    DB_POOL_MAX = env_int("DB_POOL_MAX", 10)
    DB_POOL_TIMEOUT = env_int("DB_POOL_TIMEOUT", 30)

    # Tokens & secrets
    JWT_PRIVATE_KEY_PATH = os.getenv("JWT_PRIVATE_KEY_PATH")
    JWT_PUBLIC_KEY_PATH = os.getenv("JWT_PUBLIC_KEY_PATH")
    JWT_PRIVATE_KEY = os.getenv("JWT_PRIVATE_KEY")
    JWT_PUBLIC_KEY = os.getenv("JWT_PUBLIC_KEY")
    JWT_EXPIRES_SECONDS = env_int("JWT_EXPIRES_SECONDS", None)
    JWT_VERIFY_EXPIRY = env_bool("JWT_VERIFY_EXPIRY", False)
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")

    # Accounts & auth cookie
    DEFAULT_PROFILE_PICTURE_URL = os.getenv("DEFAULT_PROFILE_PICTURE_URL", "")
    AUTH_COOKIE_NAME = os.getenv("AUTH_COOKIE_NAME", "authorization")
    AUTH_COOKIE_SECURE = env_bool("AUTH_COOKIE_SECURE", True)

    # Request handling
    PROPAGATE_EXCEPTIONS = False
    MAX_CONTENT_LENGTH = env_int("MAX_CONTENT_LENGTH", 16 * 1024 * 1024)

    # Observability and cross-origin access
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    CORS_METHODS = os.getenv("CORS_METHODS", "GET,POST,PATCH,DELETE")

    USE_PROXYFIX = env_bool("USE_PROXYFIX", False)

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Local development: debug on, auth cookie allowed over plain HTTP."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    AUTH_COOKIE_SECURE = env_bool("AUTH_COOKIE_SECURE", False)
    CORS_MAX_AGE = 600


class TestingConfig(BaseConfig):
    """Test runs.

    ``TEST_DATABASE_URL`` overrides the in-memory SQLite default. Hashing
    uses a few PBKDF2 rounds because scrypt's memory cost dominates suite
    run time.
    """

    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    AUTH_COOKIE_SECURE = False


class ProductionConfig(BaseConfig):
    SQLALCHEMY_ECHO = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the settings class named by ``APP_ENV``.

    Unset or unknown names fall back to :class:`DevelopmentConfig`.
    """
    return CONFIG_MAP.get(os.getenv(ENV_VAR, "development").strip().lower(), DevelopmentConfig)
