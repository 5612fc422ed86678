"""
Shared pytest fixtures for the Release Console test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test registry seed, rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - user / application / iteration: Committed domain rows
    - make_publish: Factory for publishes in an arbitrary state
"""

from datetime import datetime, timezone

import pytest

from release_console import create_app
from release_console.models import db as _db
from release_console.models.application import Application, Iteration
from release_console.models.publish import Publish, PublishLog, Review
from release_console.models.user import User
from release_console.services.registry_service import seed_registries


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, seed registries, rollback and recreate tables after."""
    with app.app_context():
        seed_registries()
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Domain fixtures ──────────────────────────────────────────────────────
# Rows are committed, not flushed: admission rolls the session back when an
# insert collides, which would otherwise discard the fixtures too.


@pytest.fixture()
def user() -> User:
    u = User(user_name="alice", user_avatar="https://avatars.example.com/alice.png")
    _db.session.add(u)
    _db.session.commit()
    return u


@pytest.fixture()
def other_user() -> User:
    u = User(user_name="bob")
    _db.session.add(u)
    _db.session.commit()
    return u


@pytest.fixture()
def application(user: User) -> Application:
    a = Application(
        app_name="web-portal",
        repository="group/web-portal",
        description="Customer portal",
        progressing_iteration_count=1,
        creator=user,
    )
    _db.session.add(a)
    _db.session.flush()
    a.assign_port()
    _db.session.commit()
    return a


@pytest.fixture()
def iteration(application: Application) -> Iteration:
    it = Iteration(
        app=application,
        iteration_name="Sprint 12",
        branch="daily/1.0.3",
        version="1.0.3",
    )
    _db.session.add(it)
    _db.session.commit()
    return it


@pytest.fixture()
def make_publish(application: Application, iteration: Iteration, user: User):
    """Return a factory inserting a publish with an explicit status (and optional review)."""

    def _make(
        commit: str,
        env: str = "online",
        status: str = "4003",
        review_status: str | None = None,
        fail_reason: str | None = None,
        create_time: datetime | None = None,
    ) -> Publish:
        p = Publish(
            commit=commit,
            publish_env_code=env,
            publish_status_code=status,
            app_id=application.id,
            iteration_id=iteration.id,
            publisher_id=user.id,
            log=PublishLog(content=""),
        )
        if create_time is not None:
            p.create_time = create_time
        _db.session.add(p)
        _db.session.flush()
        if review_status is not None:
            _db.session.add(Review(
                publish_id=p.id,
                review_status_code=review_status,
                fail_reason=fail_reason,
            ))
        _db.session.commit()
        return p

    return _make


@pytest.fixture()
def base_time() -> datetime:
    """Fixed creation time; tests offset it with timedelta to control ordering."""
    return datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
