"""Ad serving, tracking and placement administration endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from adgate.api.deps import (
    ad_service,
    current_user_id,
    json_response,
    optional_auth,
    require_auth,
    timing,
    translate_service_errors,
)
from adgate.core.errors import APIError
from adgate.models.enums import AdType
from adgate.schemas import (
    AdConfigQuerySchema,
    AdConfigSchema,
    AdConfigUpsertSchema,
    AdPlacementSchema,
    AnalyticsQuerySchema,
    AnalyticsRowSchema,
    TrackEventSchema,
    envelope,
)
from adgate.services.ads.dto import AdConfigUpsertIn, TrackEventIn

bp = Blueprint("ads", __name__)

config_query_schema = AdConfigQuerySchema()
config_upsert_schema = AdConfigUpsertSchema()
config_schema = AdConfigSchema()
configs_schema = AdConfigSchema(many=True)
placement_schema = AdPlacementSchema()
track_schema = TrackEventSchema()
analytics_query_schema = AnalyticsQuerySchema()
analytics_rows_schema = AnalyticsRowSchema(many=True)


def _parse_ad_type(raw: str) -> AdType:
    try:
        return AdType(raw.strip().upper())
    except ValueError:
        raise APIError(
            f"Unknown ad type '{raw}'",
            status_code=400,
            code="invalid_ad_type",
            details={"allowed": [t.value for t in AdType]},
        ) from None


# --------------------------------- Configs ----------------------------------


@bp.get("/configs")
@timing
def list_configs():
    """List active placements, optionally filtered by ``adType``."""

    query = config_query_schema.load(request.args.to_dict())
    configs = ad_service().list_active_configs(query["ad_type"])
    return json_response(envelope(configs_schema.dump(configs)))


@bp.post("/configs")
@timing
@translate_service_errors
def upsert_config():
    data = config_upsert_schema.load(request.get_json(silent=True) or {})
    config = ad_service().upsert_config(AdConfigUpsertIn(**data))
    return json_response(envelope(config_schema.dump(config)))


@bp.put("/configs/<int:config_id>/disable")
@timing
@translate_service_errors
def disable_config(config_id: int):
    config = ad_service().disable_config(config_id)
    return json_response(envelope(config_schema.dump(config)))


# --------------------------------- Serving ----------------------------------


@bp.get("/serve/<string:ad_type>")
@optional_auth
@timing
def serve(ad_type: str):
    """Return the placement to show, or ``null`` for entitled callers."""

    placement = ad_service().select_ad(_parse_ad_type(ad_type), current_user_id())
    if placement is None:
        return json_response(envelope(None, message="No ad available"))
    return json_response(envelope(placement_schema.dump(placement)))


# -------------------------------- Analytics ---------------------------------


@bp.post("/track")
@require_auth
@timing
def track():
    """Record an impression, click, close or error reported by a signed-in client."""

    data = track_schema.load(request.get_json(silent=True) or {})
    recorded = ad_service().record_event(TrackEventIn(user_id=current_user_id(), **data))
    return json_response(envelope({"recorded": recorded}), status=202)


@bp.get("/analytics")
@timing
@translate_service_errors
def analytics():
    query = analytics_query_schema.load(request.args.to_dict())
    rows = ad_service().aggregate_analytics(query["start_date"], query["end_date"])
    return json_response(envelope(analytics_rows_schema.dump(rows)))
