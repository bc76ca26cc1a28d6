from __future__ import annotations

import logging
import time
from uuid import UUID

from app.core.errors import NotFound
from app.models.certificate import Certificate
from app.models.principal import Principal
from app.repos.store import Store
from app.services.access import check_owner_or_admin

logger = logging.getLogger(__name__)


async def issue_once(store: Store, student_id: UUID, *, now: int | None = None) -> Certificate:
    """Return the student's certificate, issuing it on first call."""
    existing = await store.certificates.get_for_student(student_id)
    if existing is not None:
        return existing

    cert = Certificate.new(
        student_id=student_id, issued_at=now if now is not None else int(time.time())
    )
    try:
        await store.certificates.add(cert)
    except ValueError:
        # issued concurrently; the stored one wins
        stored = await store.certificates.get_for_student(student_id)
        if stored is None:
            raise
        return stored

    logger.info(
        "Issued certificate code=%s",
        cert.certificate_code,
        extra={"student_id": str(student_id)},
    )
    return cert


async def get_certificate(
    store: Store, principal: Principal, student_id: UUID
) -> Certificate:
    check_owner_or_admin(principal, student_id)
    cert = await store.certificates.get_for_student(student_id)
    if cert is None:
        raise NotFound("no certificate issued yet")
    return cert
