"""
Application Service — applications, members and iterations.

Functions:
    - create_application:   Register an app, assign its port, add the creator as owner
    - list_applications:    Created-or-joined apps (or all apps), paginated
    - list_applications_by_count: Created-or-joined apps after an offset ("load more")
    - list_app_dynamics:    Change records of an app
    - list_my_applications: id/name options for a user's apps
    - get_app_basic_info:   App fields plus the caller's membership
    - add_app_member:       Add a user to an app with a role
    - get_app_member_role:  Role code of a user in an app ("0" when not a member)
    - edit_basic_info:      Update description / product type, recording change dynamics
    - create_iteration:     Bind a branch to a new iteration
    - list_iterations:      Iterations of an app
"""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import or_, select

from release_console.core.exceptions import ConflictError, NotFoundError, ValidationError
from release_console.models import db
from release_console.models.application import AppDynamic, Application, Iteration, Member
from release_console.models.registry import ROLE_OWNER
from release_console.models.user import User
from release_console.services import registry_service
from release_console.utils.helpers import (
    first_value,
    get_or_not_found,
    offset_window,
    paginate_list,
    require_text,
    to_positive_int,
)

logger = logging.getLogger(__name__)

NOT_A_MEMBER = "0"


# ── Applications ──────────────────────────────────────────────────────────────


def create_application(
    user_id: int,
    app_name: str,
    repository: str,
    description: str,
    product_type: str | None = None,
    publish_type: str | None = None,
) -> dict:
    """Create an application owned by ``user_id``.

    Business rule: app_name and repository are each unique across all apps.
    The port is derived from the generated id, so the row is flushed before
    it is assigned.

    Returns:
        {"appId", "appName", "port"}

    Raises:
        NotFoundError: Creator does not exist.
        ConflictError: Name or repository already used.
    """
    app_name = require_text(app_name, "appName")
    repository = require_text(repository, "repository")
    creator = get_or_not_found(User, user_id, "User")

    existing = db.session.execute(
        select(Application).where(
            or_(Application.app_name == app_name, Application.repository == repository)
        )
    ).scalars().first()
    if existing is not None:
        field = "app_name" if existing.app_name == app_name else "repository"
        value = app_name if field == "app_name" else repository
        raise ConflictError(resource="Application", field=field, value=value)

    app = Application(
        app_name=app_name,
        repository=repository,
        description=description,
        product_type=product_type,
        publish_type=publish_type,
        progressing_iteration_count=0,
        creator=creator,
    )
    db.session.add(app)
    db.session.flush()
    app.assign_port()

    db.session.add(
        Member(
            app=app,
            user=creator,
            role=registry_service.get_member_role(ROLE_OWNER),
        )
    )
    db.session.commit()
    logger.info(
        "Application created",
        extra={"app_id": app.id, "repository": repository, "port": app.port},
    )
    return {"appId": app.id, "appName": app.app_name, "port": app.port}


def _apps_for_user(user: User) -> list[Application]:
    joined = db.session.execute(
        select(Application)
        .join(Member, Member.app_id == Application.id)
        .where(Member.user_id == user.id)
    ).scalars().all()
    by_id = {a.id: a for a in joined}
    for app in user.created_apps:
        by_id.setdefault(app.id, app)
    # Ids grow with creation time; SQLite hands back naive datetimes
    return sorted(by_id.values(), key=lambda a: a.id, reverse=True)


def list_applications(
    page: int,
    page_size: int,
    user_id: int | None = None,
    app_name: str | None = None,
    publish_type: str | None = None,
) -> dict:
    """List applications, newest first.

    With ``user_id`` only apps the user created or joined are considered.
    ``app_name`` and ``publish_type`` are exact-match filters.
    """
    page = to_positive_int(page, "page")
    page_size = to_positive_int(page_size, "pageSize")

    if user_id:
        user = get_or_not_found(User, user_id, "User")
        apps = [
            a for a in _apps_for_user(user)
            if (not app_name or a.app_name == app_name)
            and (not publish_type or a.publish_type == publish_type)
        ]
    else:
        stmt = select(Application)
        if app_name:
            stmt = stmt.where(Application.app_name == app_name)
        if publish_type:
            stmt = stmt.where(Application.publish_type == publish_type)
        stmt = stmt.order_by(Application.create_time.desc(), Application.id.desc())
        apps = list(db.session.execute(stmt).scalars().all())

    result = paginate_list(apps, page, page_size)
    result["list"] = [a.to_dict() for a in result["list"]]
    return result


def list_applications_by_count(user_id: int, count, loaded_count, publish_type=None) -> dict:
    """Per-user list windowed by offset: ``count`` apps after the first ``loaded_count``.

    Returns:
        {"hasMore", "total", "list"}

    Raises:
        ValidationError: count < 1 or loaded_count not a non-negative integer.
        PageOutOfRangeError: loaded_count beyond the filtered total.
    """
    count = to_positive_int(count, "count")
    try:
        loaded_count = int(loaded_count)
    except (TypeError, ValueError):
        loaded_count = -1
    if loaded_count < 0:
        raise ValidationError("loadedCount must be >= 0", details={"loadedCount": "invalid"})

    user = get_or_not_found(User, user_id, "User")
    publish_type = first_value(publish_type)
    apps = [
        a for a in _apps_for_user(user)
        if not publish_type or a.publish_type == publish_type
    ]
    result = offset_window(apps, loaded_count, count)
    result["list"] = [a.to_dict() for a in result["list"]]
    return result


def list_app_dynamics(app_id: int) -> list[dict]:
    app = get_or_not_found(Application, app_id, "Application")
    return [d.to_dict() for d in app.dynamics]


def list_my_applications(user_id: int) -> list[dict]:
    user = get_or_not_found(User, user_id, "User")
    return [{"appId": a.id, "appName": a.app_name} for a in _apps_for_user(user)]


def get_app_basic_info(app_id: int, user_id: int) -> dict:
    """Application fields plus whether ``user_id`` is a member and in which role.

    Non-members get ``"0"`` for both joinTime and memberRole.
    """
    app = get_or_not_found(Application, app_id, "Application")
    member = _find_member(app.id, user_id)
    info = app.to_dict()
    info.update({
        "isJoin": member is not None,
        "joinTime": member.join_time.isoformat() if member and member.join_time else NOT_A_MEMBER,
        "memberRole": member.role_code if member else NOT_A_MEMBER,
    })
    return info


def edit_basic_info(app_id: int, user_id: int, description: str, product_type: str) -> dict:
    """Update description / product type, recording one AppDynamic per changed field."""
    app = get_or_not_found(Application, app_id, "Application")
    editor = get_or_not_found(User, user_id, "User")
    changed = []
    if app.description != description:
        db.session.add(AppDynamic(
            app=app, user=editor, content=f"Changed the description to {description}",
        ))
        app.description = description
        changed.append("description")
    if app.product_type != product_type:
        db.session.add(AppDynamic(
            app=app, user=editor, content=f"Changed the product type to {product_type}",
        ))
        app.product_type = product_type
        changed.append("product_type")
    db.session.commit()
    if changed:
        logger.info("Application updated", extra={"app_id": app.id, "fields": changed})
    return app.to_dict()


# ── Members ───────────────────────────────────────────────────────────────────


def _find_member(app_id: int, user_id) -> Member | None:
    if user_id is None:
        return None
    return db.session.execute(
        select(Member).where(Member.app_id == app_id, Member.user_id == user_id)
    ).scalar_one_or_none()


def add_app_member(app_id: int, user_name: str, role_code: str, use_time=None) -> dict:
    """Add ``user_name`` to an application.

    Args:
        use_time: Optional membership duration in milliseconds; no expiry when omitted.

    Raises:
        NotFoundError: App, user or role does not exist.
        ConflictError: The user is already a member.
    """
    app = get_or_not_found(Application, app_id, "Application")
    user = db.session.execute(
        select(User).where(User.user_name == user_name)
    ).scalar_one_or_none()
    if user is None:
        raise NotFoundError(resource="User", resource_id=user_name)
    role = registry_service.get_member_role(role_code)

    if _find_member(app.id, user.id) is not None:
        raise ConflictError(resource="Member", field="user_name", value=user_name)

    now = datetime.now(timezone.utc)
    expired_time = None
    if use_time not in (None, ""):
        try:
            expired_time = now + timedelta(milliseconds=int(use_time))
        except (TypeError, ValueError):
            raise ValidationError("useTime must be a number of milliseconds",
                                  details={"useTime": "invalid"})

    member = Member(app=app, user=user, role=role, join_time=now, expired_time=expired_time)
    db.session.add(member)
    db.session.commit()
    logger.info(
        "Member added",
        extra={"app_id": app.id, "user_id": user.id, "role": role.code},
    )
    return member.to_dict()


def get_app_member_role(app_id: int, user_id: int) -> str:
    app = get_or_not_found(Application, app_id, "Application")
    member = _find_member(app.id, user_id)
    return member.role_code if member else NOT_A_MEMBER


# ── Iterations ────────────────────────────────────────────────────────────────


def _version_from_branch(branch: str) -> str | None:
    """``daily/1.0.3`` → ``1.0.3``; branches without a prefix have no version."""
    parts = branch.split("/", 1)
    return parts[1] if len(parts) == 2 and parts[1] else None


def create_iteration(
    app_id: int,
    branch: str,
    iteration_name: str | None = None,
    version: str | None = None,
) -> dict:
    """Bind ``branch`` to a new iteration of the application.

    Raises:
        NotFoundError: Application does not exist.
        ConflictError: The branch is already bound to an iteration.
    """
    branch = require_text(branch, "branch")
    app = get_or_not_found(Application, app_id, "Application")
    existing = db.session.execute(
        select(Iteration).where(Iteration.app_id == app.id, Iteration.branch == branch)
    ).scalar_one_or_none()
    if existing is not None:
        raise ConflictError(resource="Iteration", field="branch", value=branch)

    version = version or _version_from_branch(branch)
    iteration = Iteration(
        app=app,
        branch=branch,
        version=version,
        iteration_name=iteration_name or branch,
    )
    db.session.add(iteration)
    app.progressing_iteration_count = (app.progressing_iteration_count or 0) + 1
    db.session.commit()
    logger.info(
        "Iteration created",
        extra={"app_id": app.id, "iteration_id": iteration.id, "branch": branch},
    )
    return iteration.to_dict()


def list_iterations(app_id: int) -> list[dict]:
    app = get_or_not_found(Application, app_id, "Application")
    return [i.to_dict() for i in app.iterations]
