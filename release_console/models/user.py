"""
User model.

Identity verification happens upstream; this table only holds the profile
fields that publishes and memberships display.
"""

from datetime import datetime, timezone

from release_console.models import db


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    user_name = db.Column(db.String(100), nullable=False, unique=True)
    user_avatar = db.Column(db.String(500), nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    created_apps = db.relationship("Application", back_populates="creator", lazy="select")
    memberships = db.relationship(
        "Member", back_populates="user", lazy="select", cascade="all, delete-orphan",
    )

    def to_dict(self) -> dict:
        return {
            "userId": self.id,
            "userName": self.user_name,
            "userAvatar": self.user_avatar,
        }

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.user_name}>"
