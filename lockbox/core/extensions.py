"""Flask-SQLAlchemy and Flask-Migrate singletons plus their app binding."""

from __future__ import annotations

from flask import Flask
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData

# Global naming convention for all constraints. The account service relies on
# the ``uq_accounts_*`` names to translate unique violations into field errors.
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)


def engine_options(config) -> dict:
    """Translate pool bounds from configuration into engine keyword arguments.

    Parameters
    ----------
    config: Mapping
        Flask config (or any mapping) holding ``DATABASE_URL`` and the
        ``DB_POOL_*`` keys.

    Returns
    -------
    dict
        Keyword arguments for :func:`sqlalchemy.create_engine`. SQLite uses a
        single-file or in-memory pool that does not accept sizing options, so
        only ``pool_pre_ping`` is returned for it.
    """
    url = str(config.get("SQLALCHEMY_DATABASE_URI") or config.get("DATABASE_URL") or "")
    options: dict = {"pool_pre_ping": True}
    if url.startswith("sqlite"):
        return options

    minimum = int(config.get("DB_POOL_MIN", 1))
    maximum = max(int(config.get("DB_POOL_MAX", 10)), minimum)
    options.update(
        pool_size=minimum,
        max_overflow=maximum - minimum,
        pool_timeout=float(config.get("DB_POOL_TIMEOUT", 30)),
    )
    return options


def init_app(app: Flask) -> None:
    """Bind ``db`` and ``migrate`` to ``app`` with pool options from its config.

    The ORM records are imported before Flask-Migrate binds so autogeneration sees the
    full metadata.
    """
    app.config.setdefault("SQLALCHEMY_ENGINE_OPTIONS", engine_options(app.config))
    db.init_app(app)

    from lockbox import models as _models  # noqa: F401

    migrate.init_app(app, db)
