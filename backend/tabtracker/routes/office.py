# Overview: Office intake lookup and scans.

from flask import Blueprint

from ..decorators import api_route, json_body, ok
from ..services import tracker
from ..services.office_scan_service import state_of
from ..validation import require_text


office_bp = Blueprint("office", __name__, url_prefix="/api/office")


@office_bp.post("/find")
@api_route("Failed to find office record")
def office_find_route():
    key = require_text(json_body(), "key")
    entry = tracker().scanner.find(key)
    if entry is None:
        return ok(found=False, row=None)
    return ok(found=True, row=entry.to_dict(), step=state_of(entry).value)


@office_bp.post("/scan")
@api_route("Failed to record office scan")
def office_scan_route():
    """
    Request body: {key, scannedValue}

    Response: {ok, updated, step, dt}; 400 on a wrong scan, 409 once complete.
    """
    data = json_body()
    result = tracker().scanner.scan(data.get("key"), data.get("scannedValue"))
    return ok(**result)
