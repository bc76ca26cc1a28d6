"""Domain error → HTTP translation.

Endpoints wrap each service call::

    try:
        ...
    except CourseError as exc:
        raise to_http(exc) from None

so every rejected operation produces exactly one WARNING line and one
status code, decided here.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from app.core.errors import CourseError, FailedPrecondition, Forbidden, NotFound, ValidationError

logger = logging.getLogger(__name__)

_STATUS: list[tuple[type[CourseError], int]] = [
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (FailedPrecondition, status.HTTP_409_CONFLICT),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (Forbidden, status.HTTP_403_FORBIDDEN),
]


def to_http(exc: CourseError) -> HTTPException:
    code = status.HTTP_400_BAD_REQUEST
    for cls, mapped in _STATUS:
        if isinstance(exc, cls):
            code = mapped
            break
    logger.warning("Rejected %s: %s", type(exc).__name__, exc)
    return HTTPException(status_code=code, detail=str(exc))
