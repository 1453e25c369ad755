"""Ad configuration, serving and analytics schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import Schema, ValidationError, fields, validate, validates_schema

from adgate.models.enums import AdAction, AdType

from .common import enum_field


class AdConfigQuerySchema(Schema):
    ad_type = enum_field(AdType, load_default=None, data_key="adType")


class AdConfigUpsertSchema(Schema):
    """Input payload for creating or updating a placement."""

    ad_type = enum_field(AdType, required=True, data_key="adType")
    ad_network_id = fields.String(
        required=True, data_key="adNetworkId", validate=validate.Length(min=1, max=255)
    )
    is_active = fields.Boolean(load_default=None, allow_none=True, data_key="isActive")
    display_frequency = fields.Integer(
        load_default=None,
        allow_none=True,
        data_key="displayFrequency",
        validate=validate.Range(min=1),
    )


class AdConfigSchema(Schema):
    id = fields.Integer(required=True)
    ad_type = enum_field(AdType, data_key="adType")
    ad_network_id = fields.String(data_key="adNetworkId")
    is_active = fields.Boolean(data_key="isActive")
    display_frequency = fields.Integer(data_key="displayFrequency")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")


class AdPlacementSchema(Schema):
    """Placement returned by the serving endpoint."""

    id = fields.Integer(required=True)
    ad_type = enum_field(AdType, data_key="adType")
    ad_network_id = fields.String(data_key="adNetworkId")
    display_frequency = fields.Integer(data_key="displayFrequency")


class TrackEventSchema(Schema):
    ad_type = enum_field(AdType, required=True, data_key="adType")
    action = enum_field(AdAction, required=True)
    ad_network_id = fields.String(
        required=True, data_key="adNetworkId", validate=validate.Length(min=1, max=255)
    )


class AnalyticsQuerySchema(Schema):
    """Optional inclusive window for analytics aggregation."""

    start_date = fields.DateTime(load_default=None, data_key="startDate")
    end_date = fields.DateTime(load_default=None, data_key="endDate")

    @validates_schema
    def _ordered(self, data: dict[str, Any], **_: Any) -> None:
        start, end = data.get("start_date"), data.get("end_date")
        if start is not None and end is not None:
            try:
                inverted = start > end
            except TypeError as exc:
                raise ValidationError(
                    "startDate and endDate must both carry a timezone or neither.",
                    field_name="startDate",
                ) from exc
            if inverted:
                raise ValidationError("startDate must not be after endDate.", field_name="startDate")


class AnalyticsRowSchema(Schema):
    ad_type = enum_field(AdType, data_key="adType")
    action = enum_field(AdAction)
    count = fields.Integer()
