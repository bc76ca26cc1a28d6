"""course progress schema

Revision ID: 3b1f0c9a7d21
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b1f0c9a7d21"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("role", sa.String(length=16), nullable=False, server_default="student"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("current_phase", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("awaiting_approval_phase", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_login_at", sa.Integer(), nullable=True),
    )
    op.create_table(
        "phases",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("number", sa.Integer(), nullable=False, unique=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("start_week", sa.Integer(), nullable=False),
        sa.Column("end_week", sa.Integer(), nullable=False),
    )
    op.create_table(
        "weeks",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "phase_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("phases.id"),
            nullable=False,
        ),
        sa.Column("week_number", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("video_points", sa.Integer(), nullable=False, server_default="40"),
        sa.Column(
            "assignment_points", sa.Integer(), nullable=False, server_default="60"
        ),
        sa.UniqueConstraint("phase_id", "week_number"),
    )
    op.create_table(
        "week_contents",
        sa.Column(
            "week_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("weeks.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("blocks", sa.JSON(), nullable=False),
        sa.Column(
            "is_published", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("updated_at", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_table(
        "progress_records",
        sa.Column(
            "student_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            primary_key=True,
        ),
        sa.Column(
            "week_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("weeks.id"),
            primary_key=True,
        ),
        sa.Column(
            "video_watched", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("video_progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("video_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "assignment_submitted",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
        sa.Column(
            "assignment_points", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column("points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_locked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("video_watched_at", sa.Integer(), nullable=True),
        sa.Column("completed_at", sa.Integer(), nullable=True),
    )
    op.create_table(
        "submissions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "week_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("weeks.id"),
            nullable=False,
        ),
        sa.Column(
            "student_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            nullable=False,
        ),
        sa.Column("type", sa.String(length=16), nullable=False),
        sa.Column(
            "status", sa.String(length=16), nullable=False, server_default="submitted"
        ),
        sa.Column("submitted_at", sa.Integer(), nullable=False),
        sa.Column("score", sa.Integer(), nullable=True),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("answers", sa.JSON(), nullable=False),
        sa.Column("total_questions", sa.Integer(), nullable=True),
        sa.Column("github_url", sa.Text(), nullable=True),
        sa.Column("file_name", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_on_time", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("reviewed_at", sa.Integer(), nullable=True),
        sa.Column(
            "reviewed_by",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            nullable=True,
        ),
    )
    op.create_index(
        "ix_submissions_student_week", "submissions", ["student_id", "week_id"]
    )
    op.create_index(
        "uq_submissions_one_quiz",
        "submissions",
        ["student_id", "week_id"],
        unique=True,
        postgresql_where=sa.text("type = 'quiz'"),
    )
    op.create_table(
        "certificates",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "student_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            nullable=False,
            unique=True,
        ),
        sa.Column(
            "certificate_code", sa.String(length=64), nullable=False, unique=True
        ),
        sa.Column("issued_at", sa.Integer(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("certificates")
    op.drop_index("uq_submissions_one_quiz", table_name="submissions")
    op.drop_index("ix_submissions_student_week", table_name="submissions")
    op.drop_table("submissions")
    op.drop_table("progress_records")
    op.drop_table("week_contents")
    op.drop_table("weeks")
    op.drop_table("phases")
    op.drop_table("users")
