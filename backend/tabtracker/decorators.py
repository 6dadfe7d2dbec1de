# Overview: Request decorators and JSON helpers for API routes.

from functools import wraps

from flask import current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from .extensions import db
from .validation import TrackerError


def json_body() -> dict:
    """Request JSON as a dict; anything else (missing, malformed, a list) becomes {}."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def ok(**payload):
    return jsonify({"ok": True, **payload})


def error_response(message: str, status: int):
    return jsonify({"ok": False, "error": message}), status


def api_route(failure_message: str):
    """
    Turn TrackerError into {ok: false, error} with the error's status.

    Anything else is logged with failure_message and answered with a 500.
    The session is rolled back either way so the next request starts clean.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except TrackerError as e:
                db.session.rollback()
                if e.status_code >= 500:
                    current_app.logger.error("%s: %s", failure_message, e.message)
                return error_response(e.message, e.status_code)
            except HTTPException:
                db.session.rollback()
                raise
            except Exception:
                db.session.rollback()
                current_app.logger.exception(failure_message)
                return error_response("Internal server error", 500)

        return decorated_function
    return decorator
