"""
Publish Service — admission, classification and presentation of publish requests.

All ORM operations and db.session.commit() live here. Blueprints call these
functions and translate the results into response envelopes.

Functions:
    - admit_publish:          Accept, reject or de-duplicate a publish request
    - classify_existing:      Admission outcome for a publish that already exists
    - list_publishes:         Filtered, ordered, paginated publish projection
    - get_publish_detail:     Single publish with review fields when reviewed
    - get_publish_log:        Build/deploy log text of a publish
    - append_publish_log:     Executor callback — append a log line
    - advance_publish_status: Executor callback — move a publish to a new status

Admission state machine (existing publish, keyed by commit + environment):

    4003 awaiting review ── review 7001 ──▶ accepted (existing id)
                         ── review 7002 ──▶ rejected: review failed
                         ── other       ──▶ rejected: under review
                         ── no review   ──▶ soft rejection: review required
    4001 queued          ──────────────────▶ accepted (existing id)
    anything else        ──────────────────▶ rejected: already published

New publish: online → 4003 + soft rejection, daily → 4004 + accepted.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from release_console.core.exceptions import NotFoundError, ValidationError
from release_console.models import db
from release_console.models.application import Application, Iteration
from release_console.models.publish import Publish, PublishLog
from release_console.models.registry import (
    PUBLISH_STATUSES,
    STATUS_AWAITING_REVIEW,
    STATUS_DAILY_ACCEPTED,
    STATUS_QUEUED,
    PublishEnv,
)
from release_console.models.user import User
from release_console.services import registry_service
from release_console.services.review_gate import ReviewVerdict, evaluate_review
from release_console.utils.errors import E
from release_console.utils.helpers import (
    first_value,
    get_or_not_found,
    paginate_list,
    require_fields,
    to_positive_int,
)

logger = logging.getLogger(__name__)

MSG_REVIEW_FAILED = "Code review failed, the branch cannot be published."
MSG_UNDER_REVIEW = "Code review in progress, the branch cannot be published."
MSG_ALREADY_PUBLISHED = "This commit has already been published."
TEXT_REVIEW_REQUIRED = (
    "This iteration has not passed code review. "
    "Create a code review before publishing to online."
)


@dataclass
class AdmissionDecision:
    """Outcome of one admission call.

    ``accepted=False`` is a business rejection, not an error. ``text`` is set
    only for the soft rejection of an online publish that still needs review.
    """

    accepted: bool
    publish_id: int | None = None
    code: str | None = None
    message: str | None = None
    text: str | None = None
    created: bool = False

    def to_dict(self) -> dict:
        return {
            "accepted": self.accepted,
            "publish_id": self.publish_id,
            "code": self.code,
            "message": self.message,
            "text": self.text,
            "created": self.created,
        }


def _accept(publish: Publish, created: bool = False) -> AdmissionDecision:
    return AdmissionDecision(accepted=True, publish_id=publish.id, created=created)


def _reject(publish: Publish, message: str) -> AdmissionDecision:
    return AdmissionDecision(
        accepted=False,
        publish_id=publish.id,
        code=E.PUBLISH_REJECTED,
        message=message,
    )


def _review_required(publish: Publish, created: bool = False) -> AdmissionDecision:
    return AdmissionDecision(
        accepted=False,
        publish_id=publish.id,
        code=E.REVIEW_REQUIRED,
        text=TEXT_REVIEW_REQUIRED,
        created=created,
    )


# ── Admission ─────────────────────────────────────────────────────────────────


def admit_publish(
    branch: str,
    user_id: int,
    repository: str,
    commit: str,
    publish_env: str,
) -> AdmissionDecision:
    """Decide whether a publish request is accepted, rejected or a duplicate.

    The (commit, environment) lookup always runs before any creation. When
    two requests race past it, the unique constraint rejects the second
    insert and the request is classified against the winner's row instead.

    Args:
        branch: Branch name of the iteration being published.
        user_id: Requesting user (publisher).
        repository: Repository reference identifying the application.
        commit: Source commit hash.
        publish_env: Target environment code ("daily" | "online").

    Returns:
        AdmissionDecision.

    Raises:
        ValidationError: If an input is missing/blank or the environment is unknown.
        NotFoundError: If the application, publisher or iteration does not exist.
    """
    require_fields(
        {
            "branch": branch,
            "userId": user_id,
            "repository": repository,
            "commit": commit,
            "publishEnv": publish_env,
        },
        "branch", "userId", "repository", "commit", "publishEnv",
    )
    env = registry_service.parse_publish_env(str(publish_env).strip())
    branch = str(branch).strip()
    repository = str(repository).strip()
    commit = str(commit).strip()

    existing = _find_publish(commit, env)
    if existing is not None:
        return classify_existing(existing)

    app = _get_app_by_repository(repository)
    publisher = get_or_not_found(User, to_positive_int(user_id, "userId"), "User")
    iteration = _get_iteration_for_branch(app, branch)

    status_code = STATUS_AWAITING_REVIEW if env.requires_review else STATUS_DAILY_ACCEPTED
    publish = Publish(
        commit=commit,
        publish_env_code=env.value,
        publish_status_code=status_code,
        app_id=app.id,
        iteration_id=iteration.id,
        publisher_id=publisher.id,
        log=PublishLog(content=""),
    )
    db.session.add(publish)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        logger.warning(
            "Publish insert collided, reclassifying",
            extra={"commit": commit, "publish_env": env.value},
        )
        existing = _find_publish(commit, env)
        if existing is None:
            raise
        return classify_existing(existing)

    logger.info(
        "Publish created",
        extra={
            "publish_id": publish.id,
            "app_id": app.id,
            "commit": commit,
            "publish_env": env.value,
            "publish_status": status_code,
        },
    )
    if env.requires_review:
        return _review_required(publish, created=True)
    return _accept(publish, created=True)


def classify_existing(publish: Publish) -> AdmissionDecision:
    """Admission outcome for a publish already recorded for the same commit + env."""
    status = publish.publish_status_code

    if status == STATUS_AWAITING_REVIEW:
        review = publish.review
        if review is None:
            decision = _review_required(publish)
        else:
            verdict = evaluate_review(review)
            if verdict is ReviewVerdict.APPROVED:
                decision = _accept(publish)
            elif verdict is ReviewVerdict.REJECTED:
                decision = _reject(publish, MSG_REVIEW_FAILED)
            else:
                decision = _reject(publish, MSG_UNDER_REVIEW)
    elif status == STATUS_QUEUED:
        decision = _accept(publish)
    else:
        decision = _reject(publish, MSG_ALREADY_PUBLISHED)

    logger.info(
        "Existing publish classified",
        extra={
            "publish_id": publish.id,
            "publish_status": status,
            "accepted": decision.accepted,
        },
    )
    return decision


# ── Query / presentation ──────────────────────────────────────────────────────


def list_publishes(
    app_id: int,
    page: int,
    page_size: int,
    iteration_id=None,
    publish_env=None,
    publish_status=None,
    publisher_id=None,
) -> dict:
    """List an application's publishes, newest first, one page at a time.

    Every supplied filter is resolved to its row first, so an unknown value
    is reported rather than silently matching nothing. Filters may be scalars
    or lists (first element used; an empty list means no constraint).

    Returns:
        {"page", "pageSize", "hasMore", "total", "list": [projection, ...]}

    Raises:
        ValidationError: page/pageSize not positive integers.
        NotFoundError: A referenced application, iteration, publisher,
                       environment or status does not exist.
        PageOutOfRangeError: The page starts beyond the filtered total.
    """
    page = to_positive_int(page, "page")
    page_size = to_positive_int(page_size, "pageSize")

    app = get_or_not_found(Application, first_value(app_id), "Application")
    stmt = select(Publish).where(Publish.app_id == app.id)

    iteration_id = first_value(iteration_id)
    if iteration_id is not None:
        iteration = get_or_not_found(Iteration, iteration_id, "Iteration")
        stmt = stmt.where(Publish.iteration_id == iteration.id)

    publisher_id = first_value(publisher_id)
    if publisher_id is not None:
        publisher = get_or_not_found(User, publisher_id, "User")
        stmt = stmt.where(Publish.publisher_id == publisher.id)

    env_code = first_value(publish_env)
    if env_code is not None:
        environment = registry_service.get_publish_environment(env_code)
        stmt = stmt.where(Publish.publish_env_code == environment.code)

    status_code = first_value(publish_status)
    if status_code is not None:
        status = registry_service.get_publish_status(status_code)
        stmt = stmt.where(Publish.publish_status_code == status.code)

    stmt = stmt.options(
        selectinload(Publish.app),
        selectinload(Publish.iteration),
        selectinload(Publish.publisher),
    ).order_by(Publish.create_time.desc(), Publish.id.desc())
    publishes = db.session.execute(stmt).scalars().all()

    result = paginate_list(list(publishes), page, page_size)
    result["list"] = [_project(p) for p in result["list"]]
    return result


def get_publish_detail(publish_id: int) -> dict:
    """Return one publish; review fields are inlined only when a review exists."""
    publish = get_or_not_found(Publish, publish_id, "Publish")
    publisher = publish.publisher
    detail = {
        "publishId": publish.id,
        "publisher": publisher.user_name if publisher else None,
        "publisherAvatar": publisher.user_avatar if publisher else None,
        "commit": publish.commit,
        "createTime": _iso(publish.create_time),
        "publishEnv": publish.publish_env_code,
        "publishStatus": publish.publish_status_code,
    }
    review = publish.review
    if review is not None:
        detail["reviewId"] = review.id
        detail["reviewStatus"] = review.review_status_code
        detail["failReason"] = review.fail_reason
    return detail


def get_publish_log(publish_id: int) -> dict:
    publish = get_or_not_found(Publish, publish_id, "Publish")
    if publish.log is None:
        raise NotFoundError(resource="PublishLog", resource_id=publish_id)
    return {"log": publish.log.content}


# ── Executor callbacks ────────────────────────────────────────────────────────


def append_publish_log(publish_id: int, content: str) -> dict:
    """Append one chunk of executor output to a publish's log.

    Raises:
        ValidationError: If content is missing.
        NotFoundError: If the publish does not exist.
    """
    if content is None or content == "":
        raise ValidationError("content is required", details={"content": "required"})
    publish = get_or_not_found(Publish, publish_id, "Publish")
    if publish.log is None:
        publish.log = PublishLog(content=content)
    elif publish.log.content:
        publish.log.content = f"{publish.log.content}\n{content}"
    else:
        publish.log.content = content
    db.session.commit()
    logger.debug("Publish log appended", extra={"publish_id": publish.id})
    return {"log": publish.log.content}


def advance_publish_status(publish_id: int, status_code: str) -> dict:
    """Record a status reported by the deployment executor.

    Admission never calls this; it only writes the initial status.

    Raises:
        ValidationError: If the status code is not a registered publish status.
        NotFoundError: If the publish does not exist.
    """
    status_code = str(status_code) if status_code is not None else None
    if status_code not in PUBLISH_STATUSES:
        raise ValidationError(
            f"Unknown publishStatus {status_code!r}",
            details={"publishStatus": "invalid"},
        )
    publish = get_or_not_found(Publish, publish_id, "Publish")
    previous = publish.publish_status_code
    publish.publish_status = registry_service.get_publish_status(status_code)
    db.session.commit()
    logger.info(
        "Publish status advanced",
        extra={
            "publish_id": publish.id,
            "previous_status": previous,
            "publish_status": status_code,
        },
    )
    return {"publishId": publish.id, "publishStatus": publish.publish_status_code}


# ── Internal helpers ──────────────────────────────────────────────────────────


def _find_publish(commit: str, env: PublishEnv) -> Publish | None:
    return db.session.execute(
        select(Publish).where(
            Publish.commit == commit,
            Publish.publish_env_code == env.value,
        )
    ).scalar_one_or_none()


def _get_app_by_repository(repository: str) -> Application:
    app = db.session.execute(
        select(Application).where(Application.repository == repository)
    ).scalar_one_or_none()
    if app is None:
        raise NotFoundError(resource="Application", resource_id=repository)
    return app


def _get_iteration_for_branch(app: Application, branch: str) -> Iteration:
    """First iteration of ``app`` bound to ``branch``; a missing one fails admission."""
    iteration = db.session.execute(
        select(Iteration)
        .where(Iteration.app_id == app.id, Iteration.branch == branch)
        .order_by(Iteration.id)
        .limit(1)
    ).scalar_one_or_none()
    if iteration is None:
        raise NotFoundError(resource="Iteration", resource_id=branch)
    return iteration


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _project(publish: Publish) -> dict:
    """Flatten a publish and its relations into the list-row transport shape."""
    iteration = publish.iteration
    publisher = publish.publisher
    return {
        "publishId": publish.id,
        "createTime": _iso(publish.create_time),
        "appId": publish.app_id,
        "appName": publish.app.app_name if publish.app else None,
        "iterationId": publish.iteration_id,
        "iterationName": iteration.iteration_name if iteration else None,
        "version": iteration.version if iteration else None,
        "publisher": publisher.user_name if publisher else None,
        "publisherAvatar": publisher.user_avatar if publisher else None,
        "commit": publish.commit,
        "publishEnv": publish.publish_env_code,
        "publishStatus": publish.publish_status_code,
    }
