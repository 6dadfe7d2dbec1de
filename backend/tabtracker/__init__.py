# backend/tabtracker/__init__.py
import logging

from flask import Flask, request
from werkzeug.exceptions import HTTPException

from .config import Config, TrackerSettings
from .extensions import db, migrate



def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Frozen settings and the services built on them
    from .services import EXTENSION_KEY, TrackerServices
    app.extensions[EXTENSION_KEY] = TrackerServices.build(TrackerSettings.from_mapping(app.config))

    # Register blueprints
    from .routes.system import system_bp
    from .routes.imports import imports_bp
    from .routes.inventory import inventory_bp
    from .routes.locations import locations_bp
    from .routes.pickup import pickup_bp
    from .routes.deposit import deposit_bp
    from .routes.office import office_bp
    from .routes.issues import issues_bp
    from .routes.reports import reports_bp
    from .routes.signin import signin_bp
    from .routes.games import games_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(imports_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(locations_bp)
    app.register_blueprint(pickup_bp)
    app.register_blueprint(deposit_bp)
    app.register_blueprint(office_bp)
    app.register_blueprint(issues_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(signin_bp)
    app.register_blueprint(games_bp)

    @app.before_request
    def answer_preflight():
        # Any path, known or not
        if request.method == "OPTIONS":
            return app.response_class(status=204)
        return None

    @app.after_request
    def add_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = app.config["CORS_ALLOWED_ORIGIN"]
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        response.headers["Access-Control-Allow-Credentials"] = "true"
        response.headers["Vary"] = "Origin"
        return response

    @app.errorhandler(HTTPException)
    def http_error(error):
        return {"ok": False, "error": error.description or error.name}, error.code

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
