import datetime
import decimal
import typing as t

from sqlalchemy import ForeignKey, func, MetaData, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, MappedAsDataclass
from sqlalchemy.types import DateTime, JSON, LargeBinary, Numeric

from gradeflow.model import AttemptID, GradingJobID, OverrideID, StepID, UsageID

from .type import ShortUUIDKeyType

metadata = MetaData()


class base(MappedAsDataclass, DeclarativeBase):
    metadata = metadata
    type_annotation_map = {
        UsageID: ShortUUIDKeyType(UsageID),
        AttemptID: ShortUUIDKeyType(AttemptID),
        StepID: ShortUUIDKeyType(StepID),
        GradingJobID: ShortUUIDKeyType(GradingJobID),
        OverrideID: ShortUUIDKeyType(OverrideID),
        datetime.datetime: DateTime(timezone=True),
        decimal.Decimal: Numeric(12, 7),
        dict[str, t.Any]: JSON,
        list[str]: JSON,
    }


# Attempts


class attempts(base):
    __tablename__ = "attempts"
    __table_args__ = (UniqueConstraint("usage_id", "slot"),)

    attempt_id: Mapped[AttemptID] = mapped_column(primary_key=True)
    usage_id: Mapped[UsageID]
    slot: Mapped[int]

    max_mark: Mapped[decimal.Decimal]
    min_fraction: Mapped[decimal.Decimal] = mapped_column(default=decimal.Decimal(0))
    max_fraction: Mapped[decimal.Decimal] = mapped_column(default=decimal.Decimal(1))

    # denormalized from the latest step
    state: Mapped[str] = mapped_column(default="notstarted")
    fraction: Mapped[decimal.Decimal | None] = mapped_column(default=None)

    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


class attempt_steps(base):
    __tablename__ = "attempt_steps"
    __table_args__ = (UniqueConstraint("attempt_id", "sequence"),)

    step_id: Mapped[StepID] = mapped_column(primary_key=True)
    attempt_id: Mapped[AttemptID] = mapped_column(ForeignKey("attempts.attempt_id"))
    sequence: Mapped[int]

    state: Mapped[str]
    event: Mapped[dict[str, t.Any] | None] = mapped_column(default=None)
    response: Mapped[dict[str, t.Any]] = mapped_column(default_factory=dict)
    fraction: Mapped[decimal.Decimal | None] = mapped_column(default=None)
    summary: Mapped[str | None] = mapped_column(default=None)
    applied: Mapped[bool] = mapped_column(default=False)

    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())


class step_files(base):
    __tablename__ = "step_files"

    step_id: Mapped[StepID] = mapped_column(ForeignKey("attempt_steps.step_id"), primary_key=True)
    filename: Mapped[str] = mapped_column(primary_key=True)
    content: Mapped[bytes] = mapped_column(LargeBinary)
    content_type: Mapped[str] = mapped_column(default="application/octet-stream")

    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())


# Grading


class grading_jobs(base):
    __tablename__ = "grading_jobs"

    job_id: Mapped[GradingJobID] = mapped_column(primary_key=True)
    attempt_id: Mapped[AttemptID] = mapped_column(ForeignKey("attempts.attempt_id"))
    # steps are rewritten by a regrade, so the link is not a foreign key
    step_id: Mapped[StepID | None] = mapped_column(default=None)

    status: Mapped[str] = mapped_column(default="queued")
    response: Mapped[dict[str, t.Any]] = mapped_column(default_factory=dict)
    filenames: Mapped[list[str]] = mapped_column(default_factory=list)

    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


# Regrades


class regrade_overrides(base):
    __tablename__ = "regrade_overrides"
    __table_args__ = (UniqueConstraint("usage_id", "slot"),)

    override_id: Mapped[OverrideID] = mapped_column(primary_key=True)
    usage_id: Mapped[UsageID]
    slot: Mapped[int]
    attempt_id: Mapped[AttemptID] = mapped_column(ForeignKey("attempts.attempt_id"))

    old_fraction: Mapped[decimal.Decimal | None] = mapped_column(default=None)
    new_fraction: Mapped[decimal.Decimal | None] = mapped_column(default=None)
    dry_run: Mapped[bool] = mapped_column(default=False)

    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())
