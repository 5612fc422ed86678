"""
Application domain models.

Models:
    - Application: A deployable project bound to one source-control repository
    - Member:      N:M link Application ↔ User carrying a member role
    - Iteration:   A development cycle bound to one branch of an Application
    - AppDynamic:  Change record written when basic info is edited

Architecture:
    User ──1:N──▶ Application (creator)
    Application ──1:N──▶ Member ◀──N:1── User
    Application ──1:N──▶ Iteration ──1:N──▶ Publish
    Application ──1:N──▶ AppDynamic

The application port is derived from its primary key (id + PORT_BASE) and is
therefore assigned after the first flush.
"""

from datetime import datetime, timezone

from release_console.models import db

PORT_BASE = 9000


def _utcnow():
    return datetime.now(timezone.utc)


def _iso(value):
    return value.isoformat() if value else None


# ═════════════════════════════════════════════════════════════════════════════
# Application
# ═════════════════════════════════════════════════════════════════════════════


class Application(db.Model):
    __tablename__ = "applications"

    id = db.Column(db.Integer, primary_key=True)
    app_name = db.Column(db.String(100), nullable=False, unique=True)
    repository = db.Column(
        db.String(255),
        nullable=False,
        unique=True,
        comment="Source-control repository reference, e.g. group/project",
    )
    description = db.Column(db.Text, nullable=True)
    port = db.Column(db.Integer, nullable=True, comment="id + 9000")
    publish_type = db.Column(db.String(16), nullable=True)
    product_type = db.Column(db.String(16), nullable=True)
    progressing_iteration_count = db.Column(db.Integer, nullable=False, default=0)
    creator_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    create_time = db.Column(db.DateTime(timezone=True), default=_utcnow)

    # ── Relationships ────────────────────────────────────────────────────
    creator = db.relationship("User", back_populates="created_apps")
    members = db.relationship(
        "Member", back_populates="app", lazy="select", cascade="all, delete-orphan",
    )
    iterations = db.relationship(
        "Iteration",
        back_populates="app",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="Iteration.id",
    )
    dynamics = db.relationship(
        "AppDynamic",
        back_populates="app",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="AppDynamic.id",
    )

    def assign_port(self) -> None:
        self.port = self.id + PORT_BASE

    def to_dict(self) -> dict:
        return {
            "appId": self.id,
            "appName": self.app_name,
            "repository": self.repository,
            "description": self.description,
            "port": self.port,
            "publishType": self.publish_type,
            "productType": self.product_type,
            "progressingIterationCount": self.progressing_iteration_count,
            "creatorId": self.creator_id,
            "createTime": _iso(self.create_time),
        }

    def __repr__(self) -> str:
        return f"<Application {self.id}: {self.app_name}>"


# ═════════════════════════════════════════════════════════════════════════════
# Member (Application ↔ User)
# ═════════════════════════════════════════════════════════════════════════════


class Member(db.Model):
    __tablename__ = "members"

    id = db.Column(db.Integer, primary_key=True)
    app_id = db.Column(
        db.Integer,
        db.ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    role_code = db.Column(
        db.String(16),
        db.ForeignKey("member_roles.code"),
        nullable=False,
    )
    join_time = db.Column(db.DateTime(timezone=True), default=_utcnow)
    expired_time = db.Column(db.DateTime(timezone=True), nullable=True)

    __table_args__ = (
        db.UniqueConstraint("app_id", "user_id", name="uq_member_app_user"),
        db.Index("ix_members_user", "user_id"),
    )

    # Relationships
    app = db.relationship("Application", back_populates="members")
    user = db.relationship("User", back_populates="memberships")
    role = db.relationship("MemberRole")

    def to_dict(self) -> dict:
        return {
            "memberId": self.id,
            "appId": self.app_id,
            "userId": self.user_id,
            "userName": self.user.user_name if self.user else None,
            "memberRole": self.role_code,
            "joinTime": _iso(self.join_time),
            "expiredTime": _iso(self.expired_time),
        }


# ═════════════════════════════════════════════════════════════════════════════
# Iteration
# ═════════════════════════════════════════════════════════════════════════════


class Iteration(db.Model):
    """A named development cycle tied to exactly one branch of an application."""

    __tablename__ = "iterations"

    id = db.Column(db.Integer, primary_key=True)
    app_id = db.Column(
        db.Integer,
        db.ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    iteration_name = db.Column(db.String(100), nullable=False)
    branch = db.Column(db.String(255), nullable=False)
    version = db.Column(db.String(50), nullable=True)
    create_time = db.Column(db.DateTime(timezone=True), default=_utcnow)

    __table_args__ = (
        db.UniqueConstraint("app_id", "branch", name="uq_iteration_app_branch"),
    )

    app = db.relationship("Application", back_populates="iterations")

    def to_dict(self) -> dict:
        return {
            "iterationId": self.id,
            "appId": self.app_id,
            "iterationName": self.iteration_name,
            "branch": self.branch,
            "version": self.version,
            "createTime": _iso(self.create_time),
        }

    def __repr__(self) -> str:
        return f"<Iteration {self.id}: {self.branch}>"


# ═════════════════════════════════════════════════════════════════════════════
# AppDynamic
# ═════════════════════════════════════════════════════════════════════════════


class AppDynamic(db.Model):
    """Change record shown in an application's activity feed."""

    __tablename__ = "app_dynamics"

    id = db.Column(db.Integer, primary_key=True)
    app_id = db.Column(
        db.Integer,
        db.ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    content = db.Column(db.Text, nullable=False)
    create_time = db.Column(db.DateTime(timezone=True), default=_utcnow)

    app = db.relationship("Application", back_populates="dynamics")
    user = db.relationship("User")

    def to_dict(self) -> dict:
        return {
            "dynamicId": self.id,
            "appId": self.app_id,
            "userId": self.user_id,
            "userName": self.user.user_name if self.user else None,
            "content": self.content,
            "createTime": _iso(self.create_time),
        }
