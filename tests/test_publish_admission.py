"""
Tests for publish admission (publish_service.admit_publish / classify_existing).

Covers:
  - new daily publish: created in 4004 and accepted
  - new online publish: created in 4003, soft rejection asking for review
  - existing 4003 publish: approved / rejected / pending / no review
  - existing 4001 publish: accepted with the original id
  - existing publish in any other status: rejected as already published
  - same commit in the other environment: independent publish
  - concurrent insert: unique-constraint collision is reclassified
  - missing / unknown inputs: ValidationError or NotFoundError

Marker: unit (no integration dependencies).
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from release_console.core.exceptions import NotFoundError, ValidationError
from release_console.models import db
from release_console.models.publish import Publish
from release_console.services import publish_service
from release_console.utils.errors import E


def _admit(commit="a1b2c3d4", env="daily", branch="daily/1.0.3", repository="group/web-portal", user_id=None):
    return publish_service.admit_publish(
        branch=branch,
        user_id=user_id,
        repository=repository,
        commit=commit,
        publish_env=env,
    )


def _publish_count() -> int:
    return db.session.execute(select(func.count()).select_from(Publish)).scalar_one()


# ── New publishes ─────────────────────────────────────────────────────────────


class TestNewPublish:
    def test_daily_publish_is_created_and_accepted(self, user, iteration):
        decision = _admit(user_id=user.id)

        assert decision.accepted is True
        assert decision.created is True
        assert decision.code is None
        publish = db.session.get(Publish, decision.publish_id)
        assert publish.publish_status_code == "4004"
        assert publish.publish_env_code == "daily"
        assert publish.iteration_id == iteration.id
        assert publish.publisher_id == user.id
        assert publish.log is not None
        assert publish.log.content == ""

    def test_online_publish_is_created_awaiting_review(self, user, iteration):
        decision = _admit(env="online", user_id=user.id)

        assert decision.accepted is False
        assert decision.created is True
        assert decision.code == E.REVIEW_REQUIRED
        assert decision.text == publish_service.TEXT_REVIEW_REQUIRED
        assert decision.message is None
        publish = db.session.get(Publish, decision.publish_id)
        assert publish.publish_status_code == "4003"
        assert publish.review is None

    def test_inputs_are_trimmed_before_lookup(self, user, iteration):
        decision = _admit(
            commit="  a1b2c3d4 ",
            branch=" daily/1.0.3",
            repository="group/web-portal  ",
            env=" daily ",
            user_id=str(user.id),
        )
        assert decision.accepted is True
        assert db.session.get(Publish, decision.publish_id).commit == "a1b2c3d4"

    def test_same_commit_other_environment_creates_second_publish(self, user, iteration):
        daily = _admit(env="daily", user_id=user.id)
        online = _admit(env="online", user_id=user.id)

        assert daily.publish_id != online.publish_id
        assert online.created is True
        assert _publish_count() == 2


# ── Existing publishes ────────────────────────────────────────────────────────


class TestExistingPublish:
    def test_awaiting_review_without_review_repeats_soft_rejection(self, user, make_publish):
        existing = make_publish("c0ffee", env="online", status="4003")

        decision = _admit(commit="c0ffee", env="online", user_id=user.id)

        assert decision.accepted is False
        assert decision.created is False
        assert decision.code == E.REVIEW_REQUIRED
        assert decision.publish_id == existing.id
        assert _publish_count() == 1

    def test_awaiting_review_with_approved_review_is_accepted(self, user, make_publish):
        existing = make_publish("c0ffee", env="online", status="4003", review_status="7001")

        decision = _admit(commit="c0ffee", env="online", user_id=user.id)

        assert decision.accepted is True
        assert decision.publish_id == existing.id
        assert decision.created is False
        assert _publish_count() == 1

    def test_awaiting_review_with_rejected_review_is_rejected(self, user, make_publish):
        make_publish("c0ffee", env="online", status="4003",
                     review_status="7002", fail_reason="Missing tests")

        decision = _admit(commit="c0ffee", env="online", user_id=user.id)

        assert decision.accepted is False
        assert decision.code == E.PUBLISH_REJECTED
        assert decision.message == publish_service.MSG_REVIEW_FAILED
        assert decision.text is None

    def test_awaiting_review_with_review_in_progress_is_rejected(self, user, make_publish):
        make_publish("c0ffee", env="online", status="4003", review_status="7003")

        decision = _admit(commit="c0ffee", env="online", user_id=user.id)

        assert decision.accepted is False
        assert decision.message == publish_service.MSG_UNDER_REVIEW

    def test_queued_publish_is_accepted_again(self, user, make_publish):
        existing = make_publish("c0ffee", env="daily", status="4001")

        decision = _admit(commit="c0ffee", env="daily", user_id=user.id)

        assert decision.accepted is True
        assert decision.publish_id == existing.id
        assert _publish_count() == 1

    @pytest.mark.parametrize("status", ["4002", "4004", "4005", "4006"])
    def test_any_other_status_is_already_published(self, user, make_publish, status):
        existing = make_publish("c0ffee", env="daily", status=status)

        decision = _admit(commit="c0ffee", env="daily", user_id=user.id)

        assert decision.accepted is False
        assert decision.code == E.PUBLISH_REJECTED
        assert decision.message == publish_service.MSG_ALREADY_PUBLISHED
        assert decision.publish_id == existing.id

    def test_second_daily_submission_is_rejected(self, user, iteration):
        first = _admit(user_id=user.id)
        second = _admit(user_id=user.id)

        assert first.accepted is True
        assert second.accepted is False
        assert second.message == publish_service.MSG_ALREADY_PUBLISHED
        assert _publish_count() == 1

    def test_existing_publish_short_circuits_reference_checks(self, make_publish):
        """The duplicate check runs before the application/user/iteration lookups."""
        existing = make_publish("c0ffee", env="daily", status="4001")

        decision = _admit(commit="c0ffee", repository="group/unknown", user_id=999)

        assert decision.accepted is True
        assert decision.publish_id == existing.id


# ── Concurrency ───────────────────────────────────────────────────────────────


class TestConcurrentAdmission:
    def test_collision_is_reclassified_against_winning_row(self, user, make_publish, monkeypatch):
        winner = make_publish("c0ffee", env="daily", status="4004")
        real_find = publish_service._find_publish
        calls = []

        def _stale_first_lookup(commit, env):
            calls.append(commit)
            if len(calls) == 1:
                return None
            return real_find(commit, env)

        monkeypatch.setattr(publish_service, "_find_publish", _stale_first_lookup)

        decision = _admit(commit="c0ffee", env="daily", user_id=user.id)

        assert len(calls) == 2
        assert decision.accepted is False
        assert decision.publish_id == winner.id
        assert decision.message == publish_service.MSG_ALREADY_PUBLISHED
        assert _publish_count() == 1

    def test_collision_without_visible_row_propagates(self, user, make_publish, monkeypatch):
        make_publish("c0ffee", env="daily", status="4004")
        monkeypatch.setattr(publish_service, "_find_publish", lambda commit, env: None)

        with pytest.raises(IntegrityError):
            _admit(commit="c0ffee", env="daily", user_id=user.id)


# ── Validation & references ───────────────────────────────────────────────────


class TestAdmissionErrors:
    @pytest.mark.parametrize("field", ["branch", "repository", "commit", "env"])
    def test_blank_field_raises_validation_error(self, user, iteration, field):
        kwargs = {field: "   ", "user_id": user.id}
        with pytest.raises(ValidationError) as exc_info:
            _admit(**kwargs)
        assert exc_info.value.details

    def test_missing_user_raises_validation_error(self, iteration):
        with pytest.raises(ValidationError) as exc_info:
            _admit(user_id=None)
        assert exc_info.value.details == {"userId": "required"}

    def test_unknown_environment_raises_validation_error(self, user, iteration):
        with pytest.raises(ValidationError, match="publishEnv"):
            _admit(env="staging", user_id=user.id)

    def test_unknown_repository_raises_not_found(self, user, iteration):
        with pytest.raises(NotFoundError) as exc_info:
            _admit(repository="group/unknown", user_id=user.id)
        assert exc_info.value.resource == "Application"
        assert _publish_count() == 0

    def test_unknown_user_raises_not_found(self, iteration):
        with pytest.raises(NotFoundError) as exc_info:
            _admit(user_id=999)
        assert exc_info.value.resource == "User"

    def test_branch_without_iteration_raises_not_found(self, user, iteration):
        with pytest.raises(NotFoundError) as exc_info:
            _admit(branch="daily/9.9.9", user_id=user.id)
        assert exc_info.value.resource == "Iteration"
        assert _publish_count() == 0
