"""
Seed Demo Data — registries, two users, one application with two iterations
and a handful of publishes in every admission state.

Usage:
    python scripts/seed_demo_data.py              # Uses development DB
    python scripts/seed_demo_data.py --env prod   # Uses production DB

This script is idempotent — safe to run multiple times.
"""

import argparse
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import func, select

from release_console import create_app
from release_console.models import db
from release_console.models.application import Application
from release_console.models.publish import Publish, Review
from release_console.models.registry import REVIEW_APPROVED, ROLE_DEVELOPER
from release_console.models.user import User
from release_console.services import app_service, publish_service
from release_console.services.registry_service import seed_registries

USERS = [
    ("alice", "https://avatars.example.com/alice.png"),
    ("bob", None),
]

APP = {
    "app_name": "web-portal",
    "repository": "group/web-portal",
    "description": "Customer-facing web portal",
    "product_type": "web",
    "publish_type": "docker",
}

BRANCHES = ["daily/1.0.0", "daily/1.1.0"]

# (branch, commit, env)
PUBLISHES = [
    ("daily/1.0.0", "3f2a9c1", "daily"),
    ("daily/1.0.0", "3f2a9c1", "online"),
    ("daily/1.1.0", "8be41d7", "daily"),
    ("daily/1.1.0", "8be41d7", "online"),
]


def seed_users():
    created = 0
    for name, avatar in USERS:
        if db.session.execute(select(User).where(User.user_name == name)).scalar_one_or_none():
            continue
        db.session.add(User(user_name=name, user_avatar=avatar))
        created += 1
    db.session.commit()
    print(f"  Users: {created} created, {len(USERS) - created} already existed")


def seed_application():
    app = db.session.execute(
        select(Application).where(Application.repository == APP["repository"])
    ).scalar_one_or_none()
    if app is None:
        owner = db.session.execute(select(User).where(User.user_name == "alice")).scalar_one()
        result = app_service.create_application(user_id=owner.id, **APP)
        app_id = result["appId"]
        app_service.add_app_member(app_id, "bob", ROLE_DEVELOPER)
        print(f"  Application: created (id={app_id}, port={result['port']})")
    else:
        app_id = app.id
        print(f"  Application: already exists (id={app_id})")

    existing = {i["branch"] for i in app_service.list_iterations(app_id)}
    for branch in BRANCHES:
        if branch not in existing:
            app_service.create_iteration(app_id, branch)
    print(f"  Iterations: {len(set(BRANCHES) - existing)} created")
    return app_id


def seed_publishes():
    publisher = db.session.execute(select(User).where(User.user_name == "alice")).scalar_one()
    for branch, commit, env in PUBLISHES:
        decision = publish_service.admit_publish(
            branch=branch,
            user_id=publisher.id,
            repository=APP["repository"],
            commit=commit,
            publish_env=env,
        )
        state = "created" if decision.created else "existing"
        print(f"  Publish {commit}/{env}: {state}, accepted={decision.accepted}")

    # Approve the first online publish so it can be re-submitted
    first_online = db.session.execute(
        select(Publish).where(Publish.commit == PUBLISHES[1][1], Publish.publish_env_code == "online")
    ).scalar_one()
    if first_online.review is None:
        db.session.add(Review(publish_id=first_online.id, review_status_code=REVIEW_APPROVED))
        db.session.commit()
        print(f"  Review: approved publish {first_online.id}")


def main():
    parser = argparse.ArgumentParser(description="Seed registries and demo release data")
    parser.add_argument("--env", default="development", help="App environment")
    args = parser.parse_args()

    app = create_app(args.env)
    with app.app_context():
        print("=" * 60)
        print("  SEED: Registries, Users, Application, Publishes")
        print("=" * 60)

        print("\n📋 Seeding registries...")
        print(f"  Registry rows: {seed_registries()} created")

        print("\n👥 Seeding users...")
        seed_users()

        print("\n📦 Seeding application...")
        seed_application()

        print("\n🚀 Seeding publishes...")
        seed_publishes()

        total = db.session.execute(select(func.count()).select_from(Publish)).scalar_one()
        print(f"\n✅ Seed complete! ({total} publishes)")


if __name__ == "__main__":
    main()
