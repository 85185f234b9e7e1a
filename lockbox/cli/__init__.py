"""Command-line interface registration for the Flask application."""

from __future__ import annotations

from flask import Flask

from .accounts import accounts_cli
from .keys import keys_cli


def init_app(app: Flask) -> None:
    """Register the ``accounts`` and ``keys`` command groups on ``app.cli``."""
    app.cli.add_command(accounts_cli)
    app.cli.add_command(keys_cli)
