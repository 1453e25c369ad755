"""Application factory for the adgate API."""

from __future__ import annotations

from flask import Flask

from adgate.core.config import BaseConfig, get_config
from adgate.core.logger import configure_logging
from adgate.core.logger import init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build the Flask application.

    :param config: Config object or import path; ``None`` selects the class
        named by ``APP_ENV``.
    :param instance_relative_config: Load ``instance/<instance_config_filename>``
        on top of ``config`` when present.
    :returns: Application with extensions, the token policy, blueprints,
        error handlers and CLI commands registered.
    """
    app = Flask(__name__, instance_relative_config=instance_relative_config)
    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from adgate.core import cors, errors, extensions, proxy, security

    proxy.init_app(app)
    extensions.init_app(app)
    init_logging(app)
    cors.init_app(app)
    # Needs the Redis client from ``extensions`` for the denylist.
    security.init_app(app)

    from adgate.api import init_app as init_api

    init_api(app)
    errors.init_app(app)

    from adgate import cli

    cli.init_app(app)

    return app
