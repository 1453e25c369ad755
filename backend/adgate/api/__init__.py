"""HTTP surface: versioned blueprints mounted under ``API_BASE_PREFIX``."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from flask import Blueprint, Flask

log = logging.getLogger(__name__)


def join_prefix(*segments: str) -> str:
    """Join URL segments into ``/a/b/c``; empty segments are skipped.

    >>> join_prefix("/api/", "v1", "")
    '/api/v1'
    """
    parts = [s.strip("/") for s in segments if s and s.strip("/")]
    return "/" + "/".join(parts)


def register_blueprint_group(
    app: Flask,
    *,
    base_prefix: str,
    entries: Iterable[tuple[Blueprint, str]],
) -> None:
    """Mount each ``(blueprint, relative_prefix)`` pair under ``base_prefix``.

    An empty relative prefix mounts the blueprint at the version root
    (``/api/v1/health``).
    """
    for bp, rel_prefix in entries:
        url_prefix = join_prefix(base_prefix, rel_prefix)
        app.register_blueprint(bp, url_prefix=url_prefix)
        log.debug("api.blueprint.registered", extra={"endpoint": f"{bp.name}:{url_prefix}"})


def init_app(app: Flask) -> None:
    """Register every API version on ``app``."""
    from adgate.api.v1 import API_VERSION as V1
    from adgate.api.v1 import REGISTRY as V1_REGISTRY

    base = app.config.get("API_BASE_PREFIX", "/api")
    register_blueprint_group(app, base_prefix=join_prefix(base, V1), entries=V1_REGISTRY)


__all__ = ["init_app", "join_prefix", "register_blueprint_group"]
