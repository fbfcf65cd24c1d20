"""Flask application factory."""

from __future__ import annotations

from flask import Flask, request
from flask_login import current_user

from shift_roster.blueprints.auth import bp as auth_bp
from shift_roster.blueprints.directory import bp as directory_bp
from shift_roster.blueprints.leaves import bp as leaves_bp
from shift_roster.blueprints.main import bp as main_bp
from shift_roster.blueprints.rosters import bp as rosters_bp
from shift_roster.blueprints.shift_templates import bp as shift_templates_bp
from shift_roster.blueprints.shifts import bp as shifts_bp
from shift_roster.commands import register_commands
from shift_roster.config import Config
from shift_roster.extensions import csrf, db, init_sqlite_foreign_keys, login_manager
from shift_roster.stores import get_stores, init_stores


PUBLIC_ENDPOINTS = {
    "auth.login",
    "main.health",
    "main.service_worker",
    "static",
}


def create_app(config_object: type[Config] = Config) -> Flask:
    app = Flask(__name__, instance_relative_config=False)
    app.config.from_object(config_object)

    db.init_app(app)
    login_manager.init_app(app)
    csrf.init_app(app)
    init_sqlite_foreign_keys()

    # Ensure model metadata is loaded for migrations and tests.
    from shift_roster import models as _models  # noqa: F401

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(directory_bp)
    app.register_blueprint(leaves_bp)
    app.register_blueprint(shift_templates_bp)
    app.register_blueprint(rosters_bp)
    app.register_blueprint(shifts_bp)

    init_stores(app)
    register_commands(app)

    @app.context_processor
    def inject_nav_profile() -> dict[str, str]:
        if not current_user.is_authenticated:
            return {}
        email = getattr(current_user, "email", "") or ""
        profile_name = email.split("@", 1)[0].strip() or "User"
        return {
            "nav_profile_name": profile_name,
            "nav_profile_initials": profile_name[:2].upper(),
        }

    @app.before_request
    def initialize_stores() -> None:
        endpoint = request.endpoint or ""
        if endpoint in PUBLIC_ENDPOINTS or endpoint.startswith("static"):
            return None
        if not current_user.is_authenticated:
            return None
        get_stores().initialize()
        return None

    return app
