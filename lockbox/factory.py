"""Application factory wiring Flask extensions, services and blueprints."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flask import Flask

from lockbox.core.config import BaseConfig, get_config
from lockbox.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: type[BaseConfig] | object | Mapping[str, Any] | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    Parameters
    ----------
    config:
        Configuration class or object for :meth:`flask.Config.from_object`,
        or a mapping layered on top of the environment-selected class. Tests
        pass a mapping to override single keys.
    instance_relative_config:
        Load ``instance/<instance_config_filename>`` when present.
    """
    app = Flask(__name__, instance_relative_config=instance_relative_config)

    if isinstance(config, Mapping):
        app.config.from_object(get_config())
        app.config.from_mapping(config)
    else:
        app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from lockbox.core import proxy

    proxy.init_app(app)

    from lockbox.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from lockbox.core import cors

    cors.init_app(app)

    from lockbox.core import container

    container.init_app(app)

    from lockbox.api import init_app as init_api

    init_api(app)

    from lockbox.core import errors

    errors.init_app(app)

    from lockbox import cli as lockbox_cli

    lockbox_cli.init_app(app)

    return app
