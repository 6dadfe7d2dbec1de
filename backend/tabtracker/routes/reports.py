# Overview: Dashboard summary counts.

from flask import Blueprint

from ..decorators import api_route, ok
from ..services import reporting_service, tracker


reports_bp = Blueprint("reports", __name__, url_prefix="/api/dashboard")


@reports_bp.get("/summary")
@api_route("Failed to build dashboard summary")
def dashboard_summary_route():
    return ok(**reporting_service.dashboard_summary(tracker().registry))
