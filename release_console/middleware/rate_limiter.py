"""
Rate limiting configuration.

Applies per-blueprint rate limits using Flask-Limiter. The Limiter instance
is created in release_console/__init__.py with no default limits; this module
applies granular limits per route category.

Usage:
    from release_console.middleware.rate_limiter import init_rate_limits
    init_rate_limits(app, limiter)
"""

import logging

logger = logging.getLogger(__name__)

READ_LIMIT = "200/minute"


def init_rate_limits(app, limiter):
    """
    Apply rate limits to API blueprints.

    Limits (per remote IP):
        - Publish endpoints:  PUBLISH_RATE_LIMIT (default 60/minute)
        - App endpoints:      200/minute
        - Health check:       exempt

    Rate limiting is disabled in testing mode.
    """
    if app.config.get("TESTING"):
        app.logger.info("Rate limiter disabled (TESTING=True)")
        return

    publish_limit = app.config.get("PUBLISH_RATE_LIMIT", "60/minute")
    bp = app.blueprints.get("publish")
    if bp:
        limiter.limit(publish_limit)(bp)

    bp = app.blueprints.get("app")
    if bp:
        limiter.limit(READ_LIMIT)(bp)

    bp = app.blueprints.get("health")
    if bp:
        limiter.exempt(bp)

    app.logger.info(
        "Rate limiter configured — publish: %s, app: %s", publish_limit, READ_LIMIT
    )
