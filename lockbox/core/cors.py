"""Cross-origin access to the API routes."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS


def _split(raw: str | None) -> list[str]:
    return [item.strip() for item in (raw or "").split(",") if item.strip()]


def init_app(app: Flask) -> None:
    """Enable CORS on ``/api/*``.

    ``CORS_ORIGINS`` and ``CORS_METHODS`` are comma-separated lists. The auth
    cookie only travels cross-origin with credentials enabled, which browsers
    refuse for a ``"*"`` origin; a wildcard therefore disables credentials.
    """
    origins = _split(app.config.get("CORS_ORIGINS"))
    methods = _split(app.config.get("CORS_METHODS")) or ["GET", "POST", "PATCH", "DELETE"]
    wildcard = not origins or origins == ["*"]

    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if wildcard else origins}},
        methods=methods,
        supports_credentials=not wildcard,
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
