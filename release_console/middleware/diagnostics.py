"""
Startup diagnostics — runs once when the Flask app starts.

Checks critical dependencies and logs a summary banner.
"""

import logging
import sys

from flask import Flask
from sqlalchemy import func, inspect as sa_inspect, select

from release_console.models import db
from release_console.models.registry import PUBLISH_STATUSES, PublishStatus

logger = logging.getLogger(__name__)


def run_startup_diagnostics(app: Flask):
    """Run diagnostic checks during app startup (inside app context)."""
    if app.config.get("TESTING"):
        return  # skip during tests for speed

    issues: list[str] = []

    with app.app_context():
        py = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"

        # ── Database connectivity ────────────────────────────────────
        db_status = "ok"
        db_uri = str(app.config.get("SQLALCHEMY_DATABASE_URI", ""))
        db_type = "PostgreSQL" if "postgresql" in db_uri else "SQLite" if "sqlite" in db_uri else "unknown"
        try:
            db.session.execute(db.text("SELECT 1"))
        except Exception as exc:
            db_status = f"FAILED ({exc})"
            issues.append(f"Database unreachable: {exc}")

        # ── Tables & registries ──────────────────────────────────────
        table_count = "?"
        registry_status = "?"
        if db_status == "ok":
            table_count = len(sa_inspect(db.engine).get_table_names())
            if table_count == 0:
                issues.append("No tables found — run 'flask db upgrade'")
            else:
                seeded = db.session.execute(
                    select(func.count()).select_from(PublishStatus)
                ).scalar_one()
                registry_status = f"{seeded}/{len(PUBLISH_STATUSES)} publish statuses"
                if seeded < len(PUBLISH_STATUSES):
                    issues.append("Publish status registry incomplete — run 'flask seed-registries'")

        banner = f"""
╔══════════════════════════════════════════════════════════════╗
║  Release Console — Startup Diagnostics                       ║
╠══════════════════════════════════════════════════════════════╣
║  Python      : {py:<46s}║
║  Debug       : {str(app.debug):<46s}║
║  Database    : {f'{db_type} ({db_status})':<46.46s}║
║  Tables      : {str(table_count):<46s}║
║  Registries  : {registry_status:<46s}║
║  Rate limits : {app.config.get('PUBLISH_RATE_LIMIT', 'n/a'):<46s}║
╚══════════════════════════════════════════════════════════════╝"""
        logger.info(banner)

        if issues:
            logger.warning("Startup issues detected:")
            for issue in issues:
                logger.warning("  ⚠ %s", issue)
        else:
            logger.info("All startup checks passed")
