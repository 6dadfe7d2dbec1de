# Overview: Live inventory listing and the emergency cross-location move.

from flask import Blueprint, current_app

from ..decorators import api_route, json_body, ok
from ..services import reporting_service, tracker
from ..validation import require_text


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api")


@inventory_bp.get("/inventory/live")
@api_route("Failed to list live inventory")
def live_inventory_route():
    results = reporting_service.live_inventory(
        tracker().registry,
        limit_per_location=current_app.config["INVENTORY_LIST_LIMIT"],
    )
    return ok(results=results)


@inventory_bp.post("/emergency/lookup")
@api_route("Failed to look up inventory")
def emergency_lookup_route():
    key = require_text(json_body(), "key")
    location = tracker().engine.lookup_inventory(key)
    if location is None:
        return ok(found=False)
    return ok(found=True, fromLocation=location)


@inventory_bp.post("/emergency/move")
@api_route("Failed to move inventory")
def emergency_move_route():
    """
    Request body: {key, toLocation}

    Same location -> {moved: false, reason: "same_location"}, no writes.
    """
    data = json_body()
    result = tracker().engine.emergency_move(data.get("key"), data.get("toLocation"))
    return ok(**result.to_dict())
