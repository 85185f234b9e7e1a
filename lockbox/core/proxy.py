"""WSGI proxy middleware configuration helper."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Wrap the WSGI app in :class:`ProxyFix` when ``USE_PROXYFIX`` is set.

    The auth cookie is ``Secure`` in production, so behind a TLS-terminating
    proxy the forwarded scheme has to be trusted for ``request.is_secure``.
    One hop is trusted for ``X-Forwarded-For/Proto/Host``.
    """
    if app.config.get("USE_PROXYFIX", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)
