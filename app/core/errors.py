"""Domain error taxonomy.

Services raise these; the HTTP layer translates them (see app/api/errors.py).
A service that raises has not mutated any state.
"""

from __future__ import annotations


class CourseError(Exception):
    """Base class for every user-displayable domain failure."""


class ValidationError(CourseError, ValueError):
    """Malformed or out-of-range input (answer count, score bounds, fields)."""


class FailedPrecondition(CourseError):
    """Operation not allowed in the current state (locked week, reviewed submission)."""


class NotFound(CourseError, LookupError):
    """Referenced week/phase/submission/student does not exist."""


class Forbidden(CourseError):
    """Role or ownership mismatch."""
