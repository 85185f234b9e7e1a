"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from lockbox.api.deps import json_response, timing
from lockbox.core.extensions import db

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Return liveness plus a database round-trip check."""
    db_status = "ok"
    try:
        with db.engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("healthcheck.db_error")
        db_status = "fail"
    payload = {
        "status": "ok",
        "db": db_status,
        "version": current_app.config.get("APP_VERSION", "dev"),
    }
    return json_response(payload)
