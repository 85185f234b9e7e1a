"""Version 1 of the HTTP API: health, auth, users and files."""

from __future__ import annotations

from flask import Blueprint

API_VERSION = "v1"

from .auth import bp as auth_bp  # noqa: E402
from .files import bp as files_bp  # noqa: E402
from .health import bp as health_bp  # noqa: E402
from .users import bp as users_bp  # noqa: E402

# (blueprint, prefix below /api/v1)
REGISTRY: list[tuple[Blueprint, str]] = [
    (health_bp, ""),
    (auth_bp, "/auth"),
    (users_bp, "/users"),
    (files_bp, "/files"),
]
