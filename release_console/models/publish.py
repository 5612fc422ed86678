"""
Publish domain models.

Models:
    - Publish:    A request to move one commit of an iteration into an environment
    - PublishLog: Free-text build/deploy output, created empty and appended externally
    - Review:     Code-review outcome attached to an online publish

Architecture:
    Application ──1:N──▶ Publish ◀──N:1── Iteration
    Publish ──1:1──▶ PublishLog
    Publish ◀──1:1── Review (optional)

A publish is unique on (commit, environment): uq_publish_commit_env is the
authoritative duplicate guard for concurrent admissions.
"""

from datetime import datetime, timezone

from release_console.models import db


def _utcnow():
    return datetime.now(timezone.utc)


# ═════════════════════════════════════════════════════════════════════════════
# PublishLog
# ═════════════════════════════════════════════════════════════════════════════


class PublishLog(db.Model):
    __tablename__ = "publish_logs"

    id = db.Column(db.Integer, primary_key=True)
    content = db.Column(db.Text, nullable=False, default="")

    publish = db.relationship("Publish", back_populates="log", uselist=False)


# ═════════════════════════════════════════════════════════════════════════════
# Publish
# ═════════════════════════════════════════════════════════════════════════════


class Publish(db.Model):
    __tablename__ = "publishes"

    id = db.Column(db.Integer, primary_key=True)
    create_time = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)
    commit = db.Column(db.String(64), nullable=False)
    publish_env_code = db.Column(
        db.String(16),
        db.ForeignKey("publish_environments.code"),
        nullable=False,
        comment="daily | online",
    )
    publish_status_code = db.Column(
        db.String(16),
        db.ForeignKey("publish_statuses.code"),
        nullable=False,
        index=True,
    )
    app_id = db.Column(
        db.Integer,
        db.ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    iteration_id = db.Column(
        db.Integer,
        db.ForeignKey("iterations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    publisher_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    log_id = db.Column(
        db.Integer,
        db.ForeignKey("publish_logs.id", ondelete="SET NULL"),
        nullable=True,
    )

    # ── Relationships ────────────────────────────────────────────────────
    publish_environment = db.relationship("PublishEnvironment")
    publish_status = db.relationship("PublishStatus")
    app = db.relationship("Application")
    iteration = db.relationship("Iteration")
    publisher = db.relationship("User")
    log = db.relationship("PublishLog", back_populates="publish")
    review = db.relationship("Review", back_populates="publish", uselist=False)

    # ── Constraints ──────────────────────────────────────────────────────
    __table_args__ = (
        db.UniqueConstraint("commit", "publish_env_code", name="uq_publish_commit_env"),
        db.Index("ix_publishes_app_created", "app_id", "create_time"),
    )

    def __repr__(self) -> str:
        return (
            f"<Publish {self.id}: {self.commit[:8]} → {self.publish_env_code} "
            f"[{self.publish_status_code}]>"
        )


# ═════════════════════════════════════════════════════════════════════════════
# Review
# ═════════════════════════════════════════════════════════════════════════════


class Review(db.Model):
    """Code review of an online publish. Written by the review workflow only."""

    __tablename__ = "reviews"

    id = db.Column(db.Integer, primary_key=True)
    publish_id = db.Column(
        db.Integer,
        db.ForeignKey("publishes.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    review_status_code = db.Column(
        db.String(16),
        db.ForeignKey("review_statuses.code"),
        nullable=False,
    )
    fail_reason = db.Column(db.Text, nullable=True)
    create_time = db.Column(db.DateTime(timezone=True), default=_utcnow)

    publish = db.relationship("Publish", back_populates="review")
    review_status = db.relationship("ReviewStatus")

    def __repr__(self) -> str:
        return f"<Review {self.id}: publish={self.publish_id} [{self.review_status_code}]>"
