# backend/tabtracker/routes/system.py
"""
Health and route listing endpoints.
"""

from flask import Blueprint, current_app

from ..decorators import api_route, ok
from tabtracker.time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__)


@system_bp.get("/health")
def health_route():
    return ok(worker="tabtracker", time=to_utc_z(utcnow()))


@system_bp.get("/api/debug/routes")
@api_route("Failed to list routes")
def list_routes_route():
    routes = sorted(
        rule.rule
        for rule in current_app.url_map.iter_rules()
        if rule.endpoint != "static"
    )
    return ok(routes=routes)
