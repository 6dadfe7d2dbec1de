# Overview: Sign-in logging, independent of the game lifecycle.

from flask import Blueprint, current_app

from ..decorators import api_route, json_body, ok
from ..services import signin_service


signin_bp = Blueprint("signin", __name__)


@signin_bp.post("/signin")
@api_route("Failed to log sign-in")
def signin_route():
    data = json_body()
    entry = signin_service.write_signin(data.get("name"), data.get("email"))
    return ok(entry=entry)


@signin_bp.get("/logs")
@api_route("Failed to load logs")
def logs_route():
    return ok(results=signin_service.list_signins(limit=current_app.config["SIGNIN_LOG_LIMIT"]))
