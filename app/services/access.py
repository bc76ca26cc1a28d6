"""Role and ownership checks shared by the services.

Plain functions called at the top of a service operation.  The routers are
already role-gated, but the services check again so that a mismatch fails
the operation no matter how it was reached.
"""

from __future__ import annotations

from uuid import UUID

from app.core.errors import Forbidden
from app.models.principal import Principal


def require_student(principal: Principal) -> None:
    if not principal.is_student():
        raise Forbidden("student role required")


def require_admin(principal: Principal) -> None:
    if not principal.is_admin():
        raise Forbidden("admin role required")


def check_owner_or_admin(principal: Principal, owner_id: UUID) -> None:
    """Raise Forbidden unless the principal owns the record or is an admin."""
    if principal.is_admin() or principal.id == owner_id:
        return
    raise Forbidden("you can only act on your own records")
