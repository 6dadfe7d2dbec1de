# Overview: Deposit listing and the two-phase bank gate.

from flask import Blueprint, current_app

from ..decorators import api_route, json_body, ok
from ..services import reporting_service, tracker
from ..validation import require_list


deposit_bp = Blueprint("deposit", __name__, url_prefix="/api/deposit")


@deposit_bp.get("/list")
@api_route("Failed to list deposits")
def deposit_list_route():
    return ok(results=reporting_service.deposit_list(limit=current_app.config["STAGE_LIST_LIMIT"]))


@deposit_bp.post("/toBank")
@api_route("Failed to mark deposits going to bank")
def to_bank_route():
    keys = require_list(json_body(), "keys", empty_message="No keys selected")
    return ok(updated=tracker().engine.send_to_bank(keys))


@deposit_bp.post("/atBank")
@api_route("Failed to confirm deposits at bank")
def at_bank_route():
    keys = require_list(json_body(), "keys", empty_message="No keys selected")
    return ok(updated=tracker().engine.confirm_at_bank(keys))
