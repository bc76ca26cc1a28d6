from __future__ import annotations

import secrets
from dataclasses import dataclass
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Certificate:
    id: UUID
    student_id: UUID
    certificate_code: str
    issued_at: int

    @staticmethod
    def new(*, student_id: UUID, issued_at: int) -> Certificate:
        code = f"CERT-{issued_at}-{secrets.token_hex(4).upper()}"
        return Certificate(
            id=uuid4(), student_id=student_id, certificate_code=code, issued_at=issued_at
        )
