"""adgate: credential issuance, refresh rotation and entitlement-gated ads.

``from adgate import create_app`` is the WSGI entry point used by gunicorn.
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
