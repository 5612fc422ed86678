"""release_console_initial

Create registry lookup tables, users, applications, members, iterations,
app dynamics, publish logs, publishes and reviews.

Revision ID: 5d1e0a7c3b21
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision = "5d1e0a7c3b21"
down_revision = None
branch_labels = None
depends_on = None

_REGISTRY_TABLES = (
    "publish_statuses",
    "review_statuses",
    "publish_environments",
    "member_roles",
)


def upgrade():
    bind = op.get_bind()
    existing_tables = set(sa_inspect(bind).get_table_names())

    for name in _REGISTRY_TABLES:
        if name not in existing_tables:
            op.create_table(
                name,
                sa.Column("code", sa.String(length=16), nullable=False),
                sa.Column("name", sa.String(length=64), nullable=False),
                sa.PrimaryKeyConstraint("code"),
            )

    if "users" not in existing_tables:
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("user_name", sa.String(length=100), nullable=False),
            sa.Column("user_avatar", sa.String(length=500), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("user_name"),
        )

    if "applications" not in existing_tables:
        op.create_table(
            "applications",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("app_name", sa.String(length=100), nullable=False),
            sa.Column("repository", sa.String(length=255), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("port", sa.Integer(), nullable=True),
            sa.Column("publish_type", sa.String(length=16), nullable=True),
            sa.Column("product_type", sa.String(length=16), nullable=True),
            sa.Column("progressing_iteration_count", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("creator_id", sa.Integer(), nullable=True),
            sa.Column("create_time", sa.DateTime(timezone=True), nullable=True),
            sa.ForeignKeyConstraint(["creator_id"], ["users.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("app_name"),
            sa.UniqueConstraint("repository"),
        )
        op.create_index("ix_applications_creator_id", "applications", ["creator_id"])

    if "members" not in existing_tables:
        op.create_table(
            "members",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("app_id", sa.Integer(), nullable=False),
            sa.Column("user_id", sa.Integer(), nullable=False),
            sa.Column("role_code", sa.String(length=16), nullable=False),
            sa.Column("join_time", sa.DateTime(timezone=True), nullable=True),
            sa.Column("expired_time", sa.DateTime(timezone=True), nullable=True),
            sa.ForeignKeyConstraint(["app_id"], ["applications.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["role_code"], ["member_roles.code"]),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("app_id", "user_id", name="uq_member_app_user"),
        )
        op.create_index("ix_members_user", "members", ["user_id"])

    if "iterations" not in existing_tables:
        op.create_table(
            "iterations",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("app_id", sa.Integer(), nullable=False),
            sa.Column("iteration_name", sa.String(length=100), nullable=False),
            sa.Column("branch", sa.String(length=255), nullable=False),
            sa.Column("version", sa.String(length=50), nullable=True),
            sa.Column("create_time", sa.DateTime(timezone=True), nullable=True),
            sa.ForeignKeyConstraint(["app_id"], ["applications.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("app_id", "branch", name="uq_iteration_app_branch"),
        )
        op.create_index("ix_iterations_app_id", "iterations", ["app_id"])

    if "app_dynamics" not in existing_tables:
        op.create_table(
            "app_dynamics",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("app_id", sa.Integer(), nullable=False),
            sa.Column("user_id", sa.Integer(), nullable=True),
            sa.Column("content", sa.Text(), nullable=False),
            sa.Column("create_time", sa.DateTime(timezone=True), nullable=True),
            sa.ForeignKeyConstraint(["app_id"], ["applications.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_app_dynamics_app_id", "app_dynamics", ["app_id"])

    if "publish_logs" not in existing_tables:
        op.create_table(
            "publish_logs",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("content", sa.Text(), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )

    if "publishes" not in existing_tables:
        op.create_table(
            "publishes",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("create_time", sa.DateTime(timezone=True), nullable=False),
            sa.Column("commit", sa.String(length=64), nullable=False),
            sa.Column("publish_env_code", sa.String(length=16), nullable=False),
            sa.Column("publish_status_code", sa.String(length=16), nullable=False),
            sa.Column("app_id", sa.Integer(), nullable=False),
            sa.Column("iteration_id", sa.Integer(), nullable=True),
            sa.Column("publisher_id", sa.Integer(), nullable=True),
            sa.Column("log_id", sa.Integer(), nullable=True),
            sa.ForeignKeyConstraint(["publish_env_code"], ["publish_environments.code"]),
            sa.ForeignKeyConstraint(["publish_status_code"], ["publish_statuses.code"]),
            sa.ForeignKeyConstraint(["app_id"], ["applications.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["iteration_id"], ["iterations.id"], ondelete="SET NULL"),
            sa.ForeignKeyConstraint(["publisher_id"], ["users.id"], ondelete="SET NULL"),
            sa.ForeignKeyConstraint(["log_id"], ["publish_logs.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("commit", "publish_env_code", name="uq_publish_commit_env"),
        )
        op.create_index("ix_publishes_publish_status_code", "publishes", ["publish_status_code"])
        op.create_index("ix_publishes_app_id", "publishes", ["app_id"])
        op.create_index("ix_publishes_iteration_id", "publishes", ["iteration_id"])
        op.create_index("ix_publishes_publisher_id", "publishes", ["publisher_id"])
        op.create_index("ix_publishes_app_created", "publishes", ["app_id", "create_time"])

    if "reviews" not in existing_tables:
        op.create_table(
            "reviews",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("publish_id", sa.Integer(), nullable=False),
            sa.Column("review_status_code", sa.String(length=16), nullable=False),
            sa.Column("fail_reason", sa.Text(), nullable=True),
            sa.Column("create_time", sa.DateTime(timezone=True), nullable=True),
            sa.ForeignKeyConstraint(["publish_id"], ["publishes.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["review_status_code"], ["review_statuses.code"]),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("publish_id"),
        )


def downgrade():
    bind = op.get_bind()
    existing_tables = set(sa_inspect(bind).get_table_names())

    for name in (
        "reviews",
        "publishes",
        "publish_logs",
        "app_dynamics",
        "iterations",
        "members",
        "applications",
        "users",
        *_REGISTRY_TABLES,
    ):
        if name in existing_tables:
            op.drop_table(name)
