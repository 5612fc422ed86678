"""
Status registry service.

Seeds the code lookup tables from the frozen module-level mappings in
``release_console.models.registry`` and resolves codes to rows.

Functions:
    - seed_registries:          Idempotent insert of every registry row (startup / CLI)
    - get_publish_status:       Resolve a publish status code
    - get_review_status:        Resolve a review status code
    - get_publish_environment:  Resolve an environment code
    - get_member_role:          Resolve a member role code
    - parse_publish_env:        Validate an environment code into PublishEnv
"""

import logging

from sqlalchemy import select

from release_console.core.exceptions import NotFoundError, ValidationError
from release_console.models import db
from release_console.models.registry import (
    MEMBER_ROLES,
    PUBLISH_ENVIRONMENTS,
    PUBLISH_STATUSES,
    REVIEW_STATUSES,
    MemberRole,
    PublishEnv,
    PublishEnvironment,
    PublishStatus,
    ReviewStatus,
)

logger = logging.getLogger(__name__)

_REGISTRIES = (
    (PublishStatus, PUBLISH_STATUSES),
    (ReviewStatus, REVIEW_STATUSES),
    (PublishEnvironment, PUBLISH_ENVIRONMENTS),
    (MemberRole, MEMBER_ROLES),
)


def seed_registries() -> int:
    """Insert any registry row that is not yet present.

    Existing rows are left untouched, so the call is safe on every startup.

    Returns:
        Number of rows inserted.
    """
    added = 0
    for model, table in _REGISTRIES:
        existing = set(db.session.execute(select(model.code)).scalars().all())
        for code, name in table.items():
            if code in existing:
                continue
            db.session.add(model(code=code, name=name))
            added += 1
    db.session.commit()
    if added:
        logger.info("Registry rows seeded", extra={"event_type": "registry_seed", "count": added})
    return added


def _lookup(model, code):
    row = db.session.get(model, str(code)) if code is not None else None
    if row is None:
        raise NotFoundError(resource=model.__name__, resource_id=code)
    return row


def get_publish_status(code: str) -> PublishStatus:
    return _lookup(PublishStatus, code)


def get_review_status(code: str) -> ReviewStatus:
    return _lookup(ReviewStatus, code)


def get_publish_environment(code: str) -> PublishEnvironment:
    return _lookup(PublishEnvironment, code)


def get_member_role(code: str) -> MemberRole:
    return _lookup(MemberRole, code)


def parse_publish_env(code: str) -> PublishEnv:
    """Map a request's environment code onto PublishEnv.

    Raises:
        ValidationError: If the code names no known environment.
    """
    try:
        return PublishEnv(code)
    except ValueError:
        raise ValidationError(
            f"Unknown publishEnv {code!r}. Allowed: {', '.join(e.value for e in PublishEnv)}",
            details={"publishEnv": "invalid"},
        )
