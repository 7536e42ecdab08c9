from __future__ import annotations

import typing as t

import sqlalchemy as sqla

from gradeflow.core import di
from gradeflow.model import AttemptID, GradingJob, GradingJobID, GradingJobStatus, Response, StepID

from . import Session
from .table import grading_jobs


def get(key: GradingJobID, session: Session = di.Provide["storage.persistent.session"]) -> GradingJob | None:
    stmt = sqla.select(grading_jobs.__table__).where(grading_jobs.job_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return GradingJob(**row) if row else None


def exists(
    key: GradingJobID,
    *,
    attempt_id: AttemptID | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> bool:
    """With `attempt_id`, the job must also belong to that attempt"""
    where = [grading_jobs.job_id == key]
    if attempt_id is not None:
        where.append(grading_jobs.attempt_id == attempt_id)
    stmt = sqla.select(sqla.exists().where(*where))
    return bool(session.execute(stmt).scalar())


def find(
    *,
    attempt_id: AttemptID | None = None,
    status: GradingJobStatus | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[GradingJob, ...]:
    stmt = sqla.select(grading_jobs.__table__).order_by(grading_jobs.create_time)
    if attempt_id is not None:
        stmt = stmt.where(grading_jobs.attempt_id == attempt_id)
    if status is not None:
        stmt = stmt.where(grading_jobs.status == status.value)
    rows = session.execute(stmt).mappings().all()
    return tuple(GradingJob(**row) for row in rows)


def create(params: JobCreateParams, session: Session = di.Provide["storage.persistent.session"]) -> GradingJob:
    job = grading_jobs(
        job_id=GradingJobID(),
        attempt_id=params["attempt_id"],
        step_id=params.get("step_id"),
        response=params.get("response", {}),
        filenames=list(params.get("filenames", ())),
    )
    session.add(job)
    session.flush()
    return get(job.job_id, session=session)  # type: ignore


def update_status(
    key: GradingJobID,
    status: GradingJobStatus,
    session: Session = di.Provide["storage.persistent.session"],
) -> GradingJob | None:
    stmt = sqla.select(grading_jobs).where(grading_jobs.job_id == key)
    job = session.execute(stmt).scalar_one_or_none()
    if job is None:
        return None
    job.status = status.value
    session.flush()
    return get(key, session=session)


def delete(
    *,
    attempt_id: AttemptID,
    session: Session = di.Provide["storage.persistent.session"],
) -> int:
    """Delete an attempt's grading jobs, making any outstanding results stale

    Returns:
        The number of jobs deleted
    """
    result = session.execute(sqla.delete(grading_jobs).where(grading_jobs.attempt_id == attempt_id))
    return result.rowcount  # pyright: ignore[reportAttributeAccessIssue]


class JobCreateParams(t.TypedDict, total=False):
    attempt_id: t.Required[AttemptID]
    step_id: StepID | None
    response: Response
    filenames: t.Sequence[str]
