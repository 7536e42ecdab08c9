"""Initial schema for attempts, steps and grading

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18

"""

import typing as t

from alembic import op
from sqlalchemy import func as f
from sqlalchemy.schema import Column, ForeignKey, UniqueConstraint
from sqlalchemy.types import JSON, Boolean, DateTime, Integer, LargeBinary, Numeric, String

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | t.Sequence[str] | None = None
depends_on: str | t.Sequence[str] | None = None


def upgrade() -> None:
    # Attempts
    op.create_table(
        "attempts",
        Column("attempt_id", String(22), primary_key=True),
        Column("usage_id", String(22), nullable=False),
        Column("slot", Integer, nullable=False),
        Column("max_mark", Numeric(12, 7), nullable=False),
        Column("min_fraction", Numeric(12, 7), nullable=False),
        Column("max_fraction", Numeric(12, 7), nullable=False),
        Column("state", String, nullable=False, server_default="notstarted"),
        Column("fraction", Numeric(12, 7), nullable=True),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), onupdate=f.now(), nullable=False),
        UniqueConstraint("usage_id", "slot"),
    )
    op.create_index("attempts_state_idx", "attempts", ["state"])

    # Attempt steps
    op.create_table(
        "attempt_steps",
        Column("step_id", String(22), primary_key=True),
        Column("attempt_id", String(22), ForeignKey("attempts.attempt_id"), nullable=False),
        Column("sequence", Integer, nullable=False),
        Column("state", String, nullable=False),
        Column("event", JSON, nullable=True),
        Column("response", JSON, nullable=False),
        Column("fraction", Numeric(12, 7), nullable=True),
        Column("summary", String, nullable=True),
        Column("applied", Boolean, nullable=False, server_default="false"),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        UniqueConstraint("attempt_id", "sequence"),
    )

    op.create_table(
        "step_files",
        Column("step_id", String(22), ForeignKey("attempt_steps.step_id"), primary_key=True),
        Column("filename", String, primary_key=True),
        Column("content", LargeBinary, nullable=False),
        Column("content_type", String, nullable=False),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
    )

    # Grading jobs
    op.create_table(
        "grading_jobs",
        Column("job_id", String(22), primary_key=True),
        Column("attempt_id", String(22), ForeignKey("attempts.attempt_id"), nullable=False),
        Column("step_id", String(22), nullable=True),
        Column("status", String, nullable=False, server_default="queued"),
        Column("response", JSON, nullable=False),
        Column("filenames", JSON, nullable=False),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), onupdate=f.now(), nullable=False),
    )
    op.create_index("grading_jobs_attempt_id_idx", "grading_jobs", ["attempt_id"])

    # Regrade overrides
    op.create_table(
        "regrade_overrides",
        Column("override_id", String(22), primary_key=True),
        Column("usage_id", String(22), nullable=False),
        Column("slot", Integer, nullable=False),
        Column("attempt_id", String(22), ForeignKey("attempts.attempt_id"), nullable=False),
        Column("old_fraction", Numeric(12, 7), nullable=True),
        Column("new_fraction", Numeric(12, 7), nullable=True),
        Column("dry_run", Boolean, nullable=False, server_default="false"),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), onupdate=f.now(), nullable=False),
        UniqueConstraint("usage_id", "slot"),
    )


def downgrade() -> None:
    op.drop_table("regrade_overrides")
    op.drop_index("grading_jobs_attempt_id_idx", table_name="grading_jobs")
    op.drop_table("grading_jobs")
    op.drop_table("step_files")
    op.drop_table("attempt_steps")
    op.drop_index("attempts_state_idx", table_name="attempts")
    op.drop_table("attempts")
