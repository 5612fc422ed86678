"""
Release Console
Blueprint registry and shared blueprint helpers.
"""

import logging

from flask import request
from sqlalchemy.exc import SQLAlchemyError

from release_console.core.exceptions import (
    ConflictError,
    NotFoundError,
    PageOutOfRangeError,
    ValidationError,
)
from release_console.models import db
from release_console.utils.errors import OUT_OF_RANGE, E, api_fail

logger = logging.getLogger(__name__)


def json_body() -> dict:
    """Return the JSON request body, or {} when absent or malformed."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def register_envelope_handlers(bp):
    """Map service exceptions onto the response envelope for every route of ``bp``."""

    @bp.errorhandler(ValidationError)
    def _handle_validation(error: ValidationError):
        invalid = bool(error.details) and all(v == "invalid" for v in error.details.values())
        code = E.VALIDATION_INVALID if invalid else E.VALIDATION_REQUIRED
        return api_fail(code, str(error), details=error.details)

    @bp.errorhandler(NotFoundError)
    def _handle_not_found(error: NotFoundError):
        return api_fail(E.NOT_FOUND, str(error))

    @bp.errorhandler(ConflictError)
    def _handle_conflict(error: ConflictError):
        return api_fail(E.CONFLICT_DUPLICATE, str(error))

    @bp.errorhandler(PageOutOfRangeError)
    def _handle_out_of_range(error: PageOutOfRangeError):
        return api_fail(E.OUT_OF_RANGE, OUT_OF_RANGE)

    @bp.errorhandler(SQLAlchemyError)
    def _handle_database(error: SQLAlchemyError):
        logger.exception("Database error in %s endpoint=%s", bp.name, request.endpoint)
        db.session.rollback()
        return api_fail(E.DATABASE, "Database error")

    return bp
