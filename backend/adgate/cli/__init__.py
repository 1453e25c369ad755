"""Flask CLI command groups."""

from __future__ import annotations

from flask import Flask

from .seed import seed_cli


def init_app(app: Flask) -> None:
    """Expose ``flask seed`` next to Flask-Migrate's ``flask db``."""
    app.cli.add_command(seed_cli)
