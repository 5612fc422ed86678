"""
Status registry models.

Immutable code → meaning reference tables. The module-level mappings are the
source of truth; ``registry_service.seed_registries()`` mirrors them into the
lookup tables once at startup so publishes and reviews can hold real foreign
keys. Nothing writes to these tables at runtime.

Models:
    - PublishStatus:      4001..4006 publish lifecycle codes
    - ReviewStatus:       7001 approved / 7002 rejected / 7003 reviewing
    - PublishEnvironment: daily | online
    - MemberRole:         5001 owner / 5002 developer
"""

from enum import Enum
from types import MappingProxyType

from release_console.models import db

# ── Publish status codes ─────────────────────────────────────────────────────

STATUS_QUEUED = "4001"
STATUS_PUBLISHING = "4002"
STATUS_AWAITING_REVIEW = "4003"
STATUS_DAILY_ACCEPTED = "4004"
STATUS_PUBLISHED = "4005"
STATUS_FAILED = "4006"

PUBLISH_STATUSES = MappingProxyType({
    STATUS_QUEUED: "Queued",
    STATUS_PUBLISHING: "Publishing",
    STATUS_AWAITING_REVIEW: "Awaiting review",
    STATUS_DAILY_ACCEPTED: "Accepted for daily",
    STATUS_PUBLISHED: "Published",
    STATUS_FAILED: "Failed",
})

# ── Review status codes ──────────────────────────────────────────────────────

REVIEW_APPROVED = "7001"
REVIEW_REJECTED = "7002"
REVIEW_IN_PROGRESS = "7003"

REVIEW_STATUSES = MappingProxyType({
    REVIEW_APPROVED: "Approved",
    REVIEW_REJECTED: "Rejected",
    REVIEW_IN_PROGRESS: "Reviewing",
})

# ── Member roles ─────────────────────────────────────────────────────────────

ROLE_OWNER = "5001"
ROLE_DEVELOPER = "5002"

MEMBER_ROLES = MappingProxyType({
    ROLE_OWNER: "Owner",
    ROLE_DEVELOPER: "Developer",
})


class PublishEnv(str, Enum):
    """Target environment of a publish. Only ``online`` requires review."""

    DAILY = "daily"
    ONLINE = "online"

    @property
    def requires_review(self) -> bool:
        return self is PublishEnv.ONLINE


PUBLISH_ENVIRONMENTS = MappingProxyType({
    PublishEnv.DAILY.value: "Daily",
    PublishEnv.ONLINE.value: "Online",
})


# ═════════════════════════════════════════════════════════════════════════════
# Lookup tables
# ═════════════════════════════════════════════════════════════════════════════


class _CodeTable:
    """Shared columns for the code → name lookup tables."""

    code = db.Column(db.String(16), primary_key=True)
    name = db.Column(db.String(64), nullable=False)

    def to_dict(self) -> dict:
        return {"code": self.code, "name": self.name}

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.code}: {self.name}>"


class PublishStatus(_CodeTable, db.Model):
    __tablename__ = "publish_statuses"


class ReviewStatus(_CodeTable, db.Model):
    __tablename__ = "review_statuses"


class PublishEnvironment(_CodeTable, db.Model):
    __tablename__ = "publish_environments"


class MemberRole(_CodeTable, db.Model):
    __tablename__ = "member_roles"
