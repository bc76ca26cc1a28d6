from __future__ import annotations

from typing import Protocol
from uuid import UUID

from app.models.certificate import Certificate


class CertificateRepo(Protocol):
    async def get_for_student(self, student_id: UUID) -> Certificate | None: ...
    async def add(self, certificate: Certificate) -> None: ...
    async def count(self) -> int: ...


class InMemoryCertificateRepo:
    def __init__(self) -> None:
        self._by_student: dict[UUID, Certificate] = {}

    async def get_for_student(self, student_id: UUID) -> Certificate | None:
        return self._by_student.get(student_id)

    async def add(self, certificate: Certificate) -> None:
        if certificate.student_id in self._by_student:
            raise ValueError("certificate already issued")
        self._by_student[certificate.student_id] = certificate

    async def count(self) -> int:
        return len(self._by_student)

    def clear(self) -> None:
        self._by_student.clear()
