"""Duplicate inserts against PostgreSQL surface as ValueError.

No database here: the DDL is compiled for the postgresql dialect and the
repos run against a session stub whose flush fails the way asyncpg does
on a unique violation.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from uuid import uuid4

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import IntegrityError
from sqlalchemy.schema import CreateIndex

from app.db.tables import SubmissionRow
from app.models.certificate import Certificate
from app.models.submission import Submission
from app.repos.pg_certificate_repo import PgCertificateRepo
from app.repos.pg_submission_repo import PgSubmissionRepo


class _Session:
    def __init__(self, *, duplicate: bool) -> None:
        self.duplicate = duplicate
        self.added: list[object] = []
        self.rolled_back = 0

    @asynccontextmanager
    async def begin_nested(self):
        try:
            yield
        except IntegrityError:
            self.rolled_back += 1
            raise

    def add(self, row: object) -> None:
        self.added.append(row)

    async def flush(self) -> None:
        if self.duplicate:
            raise IntegrityError("INSERT", {}, Exception("duplicate key value"))


def _quiz() -> Submission:
    return Submission(
        id=uuid4(),
        week_id=uuid4(),
        student_id=uuid4(),
        type="quiz",
        submitted_at=1_700_000_000,
        score=2,
        answers=(1, 0),
        total_questions=2,
    )


def test_one_quiz_index_is_partial_and_unique() -> None:
    index = next(i for i in SubmissionRow.__table__.indexes if i.name == "uq_submissions_one_quiz")
    ddl = str(CreateIndex(index).compile(dialect=postgresql.dialect()))

    assert ddl.startswith("CREATE UNIQUE INDEX uq_submissions_one_quiz")
    assert "(student_id, week_id)" in ddl
    assert "WHERE type = 'quiz'" in ddl


def test_duplicate_quiz_becomes_value_error() -> None:
    session = _Session(duplicate=True)

    with pytest.raises(ValueError, match="quiz already submitted"):
        asyncio.run(PgSubmissionRepo(session).add(_quiz()))  # type: ignore[arg-type]

    assert session.rolled_back == 1


def test_first_quiz_is_inserted() -> None:
    session = _Session(duplicate=False)
    quiz = _quiz()

    asyncio.run(PgSubmissionRepo(session).add(quiz))  # type: ignore[arg-type]

    assert [row.id for row in session.added] == [quiz.id]
    assert session.rolled_back == 0


def test_duplicate_certificate_becomes_value_error() -> None:
    session = _Session(duplicate=True)
    cert = Certificate.new(student_id=uuid4(), issued_at=1_700_000_000)

    with pytest.raises(ValueError, match="certificate already issued"):
        asyncio.run(PgCertificateRepo(session).add(cert))  # type: ignore[arg-type]
