"""Standardised API response envelopes.

Every endpoint answers with ``{success, message?, code?, data?}``. Business
rejections keep HTTP 200; only missing/invalid input (400) and faults (500)
use transport-level status codes.

Usage
-----
    from release_console.utils.errors import api_fail, api_ok, E

    return api_ok({"publishId": 12})
    return api_fail(E.NOT_FOUND, "Publish 12 not found")
    return api_fail(E.VALIDATION_REQUIRED, PARAM_MISSING)
"""

from __future__ import annotations

from flask import jsonify

PARAM_MISSING = "One or more of the required parameters was missing."
OUT_OF_RANGE = "Out of data range"


# ── Error code constants ──────────────────────────────────────────────
class E:
    """Machine-readable error code constants."""

    # Validation – HTTP 400
    VALIDATION_REQUIRED = "ERR_VALIDATION_REQUIRED"
    VALIDATION_INVALID = "ERR_VALIDATION_INVALID"

    # Business outcomes – HTTP 200
    NOT_FOUND = "ERR_NOT_FOUND"
    CONFLICT_DUPLICATE = "ERR_CONFLICT_DUPLICATE"
    OUT_OF_RANGE = "ERR_OUT_OF_RANGE"
    PUBLISH_REJECTED = "PUBLISH_REJECTED"
    REVIEW_REQUIRED = "PUBLISH_REVIEW_REQUIRED"

    # Server – HTTP 500
    DATABASE = "ERR_DATABASE"
    INTERNAL = "ERR_INTERNAL"


# ── Default HTTP status mapping ───────────────────────────────────────
_DEFAULT_STATUS: dict[str, int] = {
    E.VALIDATION_REQUIRED: 400,
    E.VALIDATION_INVALID: 400,
    E.NOT_FOUND: 200,
    E.CONFLICT_DUPLICATE: 200,
    E.OUT_OF_RANGE: 200,
    E.PUBLISH_REJECTED: 200,
    E.REVIEW_REQUIRED: 200,
    E.DATABASE: 500,
    E.INTERNAL: 500,
}


def api_ok(data: dict | None = None, *, status: int = 200):
    """Return a success envelope. ``data`` is omitted when None."""
    body: dict = {"success": True}
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def api_fail(
    code: str,
    message: str | None = None,
    *,
    status: int | None = None,
    data: dict | None = None,
    details: dict | None = None,
):
    """Return a failure envelope.

    Parameters
    ----------
    code : str
        Machine-readable error code (use ``E.*`` constants).
    message : str, optional
        Human-readable explanation. Soft rejections may carry ``data``
        instead of a message.
    status : int, optional
        HTTP status override. Falls back to ``_DEFAULT_STATUS[code]``,
        then to ``200``.
    data : dict, optional
        Payload for soft rejections (e.g. ``{"text": ...}``).
    details : dict, optional
        Field-level validation breakdown.

    Returns
    -------
    tuple[Response, int]
        ``(jsonify(body), http_status)`` – drop-in for Flask views.
    """
    http_status = status or _DEFAULT_STATUS.get(code, 200)

    body: dict = {"success": False, "code": code}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    if details:
        body["details"] = details

    return jsonify(body), http_status
