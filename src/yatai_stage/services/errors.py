"""Exceptions raised by the service layer.

Endpoints translate these into HTTP responses; services never build
``HTTPException`` themselves.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for expected, caller-caused failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    """Referenced entity does not exist or is not visible."""


class InvalidRequestError(ServiceError):
    """Request is well-formed but cannot be applied."""


class PermissionDeniedError(ServiceError):
    """Caller may not act on the referenced entity."""


class TimelineError(ServiceError):
    """Base class for timeline assembly failures."""


class CursorNotFoundError(TimelineError, NotFoundError):
    """Cursor id matches neither a post nor a repost."""

    def __init__(self, cursor_id: str) -> None:
        super().__init__(f"Cursor {cursor_id!r} not found")
        self.cursor_id = cursor_id


class UnknownScopeError(TimelineError, InvalidRequestError):
    """Requested tag does not exist."""

    def __init__(self, tag_name: str) -> None:
        super().__init__(f"tagName: unknown tag {tag_name!r}")
        self.tag_name = tag_name
