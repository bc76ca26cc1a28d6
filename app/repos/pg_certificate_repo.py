"""PostgreSQL implementation of CertificateRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.engine import insert_unique
from app.db.tables import CertificateRow
from app.models.certificate import Certificate


class PgCertificateRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_for_student(self, student_id: UUID) -> Certificate | None:
        stmt = select(CertificateRow).where(CertificateRow.student_id == student_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return Certificate(
            id=row.id,
            student_id=row.student_id,
            certificate_code=row.certificate_code,
            issued_at=row.issued_at,
        )

    async def add(self, certificate: Certificate) -> None:
        row = CertificateRow(
            id=certificate.id,
            student_id=certificate.student_id,
            certificate_code=certificate.certificate_code,
            issued_at=certificate.issued_at,
        )
        await insert_unique(self._session, row, "certificate already issued")

    async def count(self) -> int:
        stmt = select(func.count()).select_from(CertificateRow)
        return int((await self._session.execute(stmt)).scalar_one())
