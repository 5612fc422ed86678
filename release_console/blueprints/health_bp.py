"""
Health check blueprint.

Endpoints:
    GET /health/ready  — simple 200 for load balancers
    GET /health/live   — database reachability and registry seed status
"""

import logging
import time

from flask import Blueprint, current_app, jsonify
from sqlalchemy import func, select

from release_console.models import db
from release_console.models.registry import (
    PUBLISH_ENVIRONMENTS,
    PUBLISH_STATUSES,
    REVIEW_STATUSES,
    PublishEnvironment,
    PublishStatus,
    ReviewStatus,
)

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/health")


@health_bp.route("/ready", methods=["GET"])
def ready():
    """Simple readiness probe — always 200 if app is running."""
    return jsonify({"status": "ok"}), 200


@health_bp.route("/live", methods=["GET"])
def live():
    """Detailed liveness check with dependency status."""
    checks = {}
    overall = True

    # ── Database ─────────────────────────────────────────────────────
    try:
        t0 = time.perf_counter()
        db.session.execute(db.text("SELECT 1"))
        db_ms = (time.perf_counter() - t0) * 1000
        checks["database"] = {"status": "ok", "latency_ms": round(db_ms, 1)}
    except Exception as exc:
        checks["database"] = {"status": "error", "detail": str(exc)}
        overall = False
        logger.error("Health check — database failed: %s", exc)

    # ── Registries ───────────────────────────────────────────────────
    if overall:
        registries = {}
        for model, expected in (
            (PublishStatus, PUBLISH_STATUSES),
            (ReviewStatus, REVIEW_STATUSES),
            (PublishEnvironment, PUBLISH_ENVIRONMENTS),
        ):
            count = db.session.execute(select(func.count()).select_from(model)).scalar_one()
            registries[model.__tablename__] = {"rows": count, "expected": len(expected)}
            if count < len(expected):
                overall = False
        checks["registries"] = {
            "status": "ok" if overall else "incomplete",
            "tables": registries,
        }

    checks["app"] = {
        "name": "Release Console",
        "debug": current_app.debug,
        "testing": current_app.testing,
    }

    status_code = 200 if overall else 503
    return jsonify({
        "status": "healthy" if overall else "degraded",
        "checks": checks,
    }), status_code
