"""
Service-layer exception hierarchy.

Services raise these types; blueprints register handlers against them once
and map them onto the response envelope. Business rejections of a publish
request are NOT exceptions: they are returned as ``AdmissionDecision``
values because they are expected control flow.

Usage:
    from release_console.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Application", resource_id="group/web-portal")
    raise ValidationError("branch is required", details={"branch": "missing"})
"""


class NotFoundError(Exception):
    """Raised when a referenced entity or registry row does not exist.

    Args:
        resource: Human-readable entity name (e.g. "Publish", "Iteration").
        resource_id: The key that was looked up. Included in the message.
    """

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" {resource_id!r}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when a required field is missing, empty or malformed.

    Maps to HTTP 400.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown. Keys are field names.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class ConflictError(Exception):
    """Raised when a create would duplicate a unique value.

    Args:
        resource: Model name.
        field: The unique field that would be duplicated.
        value: The conflicting value.
    """

    def __init__(self, resource: str, field: str, value: str | None = None) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        msg = f"{resource} with {field}={value!r} already exists"
        super().__init__(msg)


class PageOutOfRangeError(Exception):
    """Raised when a page starts beyond the end of the filtered result set."""

    def __init__(self, start: int, total: int) -> None:
        self.start = start
        self.total = total
        super().__init__(f"Out of data range (start={start}, total={total})")
