"""Common Marshmallow helpers shared across resources."""

from __future__ import annotations

from enum import Enum
from typing import Any

from marshmallow import fields


def enum_field(enum_cls: type[Enum], **kwargs: Any) -> fields.Enum:
    """Enum field (de)serialized by value, e.g. ``"BANNER"``."""
    return fields.Enum(enum_cls, by_value=True, **kwargs)


def envelope(data: Any, **extra: Any) -> dict[str, Any]:
    """Wrap a payload in the ``{"data": ...}`` response envelope."""
    body: dict[str, Any] = {"data": data}
    body.update(extra)
    return body
