"""Shared request/query helpers used by services and blueprints.

get_or_not_found:  PK lookup that raises NotFoundError instead of returning None
require_fields:    presence check for JSON bodies (ValidationError on miss)
require_text:      string type check + strip for free-text identifiers
first_value:       list-or-scalar filter normalisation
to_positive_int:   page/pageSize coercion
paginate_list:     page window over an already-loaded result set
offset_window:     offset/count window ("load more" lists)
"""
import logging

from release_console.core.exceptions import NotFoundError, PageOutOfRangeError, ValidationError
from release_console.models import db
from release_console.utils.errors import PARAM_MISSING

logger = logging.getLogger(__name__)


def get_or_not_found(model, pk, label=None):
    """Fetch a model instance by primary key or raise NotFoundError."""
    label = label or model.__name__
    if pk is None:
        raise NotFoundError(resource=label)
    obj = db.session.get(model, pk)
    if obj is None:
        logger.debug("get_or_not_found: %s id=%s not found", label, pk)
        raise NotFoundError(resource=label, resource_id=pk)
    return obj


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def require_fields(data: dict, *names: str) -> None:
    """Raise ValidationError listing every field in ``names`` that is missing or blank.

    Empty lists count as present: list-valued filters use ``[]`` for
    "no constraint".
    """
    missing = [name for name in names if _is_blank(data.get(name))]
    if missing:
        raise ValidationError(
            PARAM_MISSING,
            details={name: "required" for name in missing},
        )


def require_text(value, field: str) -> str:
    """Return ``value`` stripped, or raise ValidationError when it is not a non-blank string."""
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", details={field: "invalid"})
    text = value.strip()
    if not text:
        raise ValidationError(PARAM_MISSING, details={field: "required"})
    return text


def first_value(value):
    """Normalise a list-or-scalar filter: ``[]`` → None, ``[a, ...]`` → a."""
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    if isinstance(value, str) and not value.strip():
        return None
    return value


def to_positive_int(value, field: str) -> int:
    """Coerce ``value`` to an int >= 1 or raise ValidationError."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer", details={field: "invalid"})
    if number < 1:
        raise ValidationError(f"{field} must be >= 1", details={field: "invalid"})
    return number


def paginate_list(items: list, page: int, page_size: int) -> dict:
    """Return the ``[(page-1)*page_size, page*page_size)`` window of ``items``.

    A start offset equal to the total yields an empty page; anything beyond
    it raises PageOutOfRangeError.

    Returns:
        {"page", "pageSize", "hasMore", "total", "list"}
    """
    window = offset_window(items, (page - 1) * page_size, page_size)
    return {"page": page, "pageSize": page_size, **window}


def offset_window(items: list, start: int, count: int) -> dict:
    """Return ``count`` items of ``items`` beginning at offset ``start``.

    Raises PageOutOfRangeError when ``start`` lies beyond the total.

    Returns:
        {"hasMore", "total", "list"}
    """
    total = len(items)
    if start > total:
        raise PageOutOfRangeError(start=start, total=total)
    return {
        "hasMore": start + count < total,
        "total": total,
        "list": items[start:start + count],
    }
