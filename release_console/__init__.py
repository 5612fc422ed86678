"""
Release Console
Flask Application Factory.

Usage:
    from release_console import create_app
    app = create_app()           # defaults to "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

from flask import Flask, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate

from release_console.config import config
from release_console.models import db
from release_console.middleware.logging_config import configure_logging
from release_console.middleware.timing import init_request_timing
from release_console.middleware.diagnostics import run_startup_diagnostics
from release_console.middleware.rate_limiter import init_rate_limits
from release_console.utils.errors import E, api_fail

logger = logging.getLogger(__name__)

# ── SQLite FK enforcement (global engine event) ─────────────────────────
from sqlalchemy import event as _sa_event, engine as _sa_engine


@_sa_event.listens_for(_sa_engine.Engine, "connect")
def _enable_sqlite_fk(dbapi_conn, connection_record):
    """Enable foreign key enforcement for SQLite connections."""
    if "sqlite" in type(dbapi_conn).__module__:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


migrate = Migrate()
# Storage comes from RATELIMIT_STORAGE_URI in the app config
limiter = Limiter(key_func=get_remote_address, default_limits=[])


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    # Instantiated so ProductionConfig can refuse to start without its env vars
    app.config.from_object(config[config_name]())
    os.makedirs(app.instance_path, exist_ok=True)

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)

    # ── Request timing middleware ────────────────────────────────────────
    init_request_timing(app)

    # ── Import all models so Alembic can detect them ─────────────────────
    from release_console.models import registry as _registry_models       # noqa: F401
    from release_console.models import user as _user_models               # noqa: F401
    from release_console.models import application as _application_models  # noqa: F401
    from release_console.models import publish as _publish_models         # noqa: F401

    # ── Auto-create tables and seed registries (idempotent) ──────────────
    if not app.config.get("TESTING"):
        from release_console.services.registry_service import seed_registries

        with app.app_context():
            try:
                db.create_all()
                added = seed_registries()
                app.logger.info("db.create_all() completed, %d registry rows added", added)
            except Exception as e:
                db.session.rollback()
                app.logger.warning("Schema bootstrap failed: %s", e)

    # ── Blueprints ───────────────────────────────────────────────────────
    from release_console.blueprints.publish_bp import publish_bp
    from release_console.blueprints.app_bp import app_bp
    from release_console.blueprints.health_bp import health_bp

    app.register_blueprint(publish_bp)
    app.register_blueprint(app_bp)
    app.register_blueprint(health_bp)

    # ── CLI commands ─────────────────────────────────────────────────────
    @app.cli.command("seed-registries")
    def seed_registries_cmd():
        """Insert any missing status, environment and role registry rows."""
        from release_console.services.registry_service import seed_registries

        count = seed_registries()
        logger.info("Seeded %s new registry rows.", count)

    # ── Error handlers ───────────────────────────────────────────────────
    @app.errorhandler(404)
    def not_found(e):
        return api_fail(E.NOT_FOUND, f"No route for {request.path}", status=404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return api_fail(E.VALIDATION_INVALID, "Method not allowed", status=405)

    @app.errorhandler(413)
    def too_large(e):
        return api_fail(E.VALIDATION_INVALID, "Request body too large", status=413)

    @app.errorhandler(429)
    def rate_limited(e):
        return api_fail(E.VALIDATION_INVALID, "Too many requests",
                        status=429, data={"retryAfter": e.description})

    @app.errorhandler(500)
    def server_error(e):
        logger.error("500 error: %s", e, exc_info=True)
        return api_fail(E.INTERNAL, "Internal server error")

    # ── Startup diagnostics ──────────────────────────────────────────────
    run_startup_diagnostics(app)

    # ── Rate limiting (after blueprints registered) ──────────────────────
    init_rate_limits(app, limiter)

    return app
