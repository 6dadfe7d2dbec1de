# Overview: Pickup of closed games and the transportation leg to the office.

from flask import Blueprint, current_app

from ..decorators import api_route, json_body, ok
from ..services import reporting_service, tracker
from ..validation import require_list


pickup_bp = Blueprint("pickup", __name__, url_prefix="/api")


@pickup_bp.get("/pickup/list")
@api_route("Failed to list closed games")
def pickup_list_route():
    by_location = reporting_service.pickup_list(
        tracker().registry,
        limit_per_location=current_app.config["PICKUP_LIST_LIMIT"],
    )
    return ok(byLocation=by_location)


@pickup_bp.post("/pickup/confirm")
@api_route("Failed to confirm pickup")
def pickup_confirm_route():
    """
    Request body: {picker, keys: [{location, key}, ...]}

    The picker comes from the body and must be on the configured allow-list.
    Partial success is normal: skipped keys are silent, bad items land in errors.
    """
    data = json_body()
    result = tracker().engine.confirm_pickup(data.get("picker"), data.get("keys") or [])
    return ok(picker=result.picker, moved=result.moved, errors=result.errors)


@pickup_bp.get("/transportation/live")
@api_route("Failed to list transportation")
def transportation_live_route():
    return ok(results=reporting_service.transportation_list(limit=current_app.config["STAGE_LIST_LIMIT"]))


@pickup_bp.post("/transportation/dropoff")
@api_route("Failed to drop off games")
def transportation_dropoff_route():
    keys = require_list(json_body(), "keys", empty_message="No keys selected")
    moved = tracker().engine.drop_off(keys)
    return ok(moved=moved)
