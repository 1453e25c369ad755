"""Cross-origin policy for the API blueprints."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

# Bearer credentials travel in a header; the correlation id must be readable
# by browser clients.
ALLOWED_HEADERS = ["Authorization", "Content-Type", "X-Request-ID"]
EXPOSED_HEADERS = ["X-Request-ID"]


def parse_origins(raw: str | None) -> list[str] | str:
    """Turn ``CORS_ORIGINS`` into a list, or ``"*"`` when blank or wildcard."""
    origins = [o.strip() for o in (raw or "").split(",") if o.strip()]
    if not origins or origins == ["*"]:
        return "*"
    return origins


def init_app(app: Flask) -> None:
    """Apply the CORS policy to everything under ``API_BASE_PREFIX``.

    Credentials are only allowed with an explicit origin list.
    """
    origins = parse_origins(app.config.get("CORS_ORIGINS"))
    prefix = app.config.get("API_BASE_PREFIX", "/api").rstrip("/")
    CORS(
        app,
        resources={rf"{prefix}/*": {"origins": origins}},
        supports_credentials=origins != "*",
        allow_headers=ALLOWED_HEADERS,
        expose_headers=EXPOSED_HEADERS,
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
