"""HTTP surface: versioned blueprints mounted under ``API_BASE_PREFIX``."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def _join(*segments: str) -> str:
    return "/" + "/".join(s.strip("/") for s in segments if s.strip("/"))


def register_blueprint_group(
    app: Flask,
    *,
    base_prefix: str,
    entries: Iterable[tuple[Blueprint, str]],
) -> None:
    """Register related blueprints beneath a common prefix.

    Parameters
    ----------
    app:
        Application instance receiving the blueprints.
    base_prefix:
        Prefix applied to all entries, e.g. ``"/api/v1"``.
    entries:
        ``(blueprint, relative_prefix)`` pairs. An empty relative prefix
        mounts the blueprint at ``base_prefix`` itself.
    """
    for bp, rel_prefix in entries:
        app.register_blueprint(bp, url_prefix=_join(base_prefix, rel_prefix))


def init_app(app: Flask) -> None:
    """Register the v1 API on the Flask app."""
    from lockbox.api.v1 import API_VERSION, REGISTRY

    api_base = app.config.get("API_BASE_PREFIX", "/api")
    register_blueprint_group(app, base_prefix=_join(api_base, API_VERSION), entries=REGISTRY)


__all__ = ["init_app", "register_blueprint_group"]
