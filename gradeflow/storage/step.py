from __future__ import annotations

import typing as t

import sqlalchemy as sqla

from gradeflow.core import di
from gradeflow.model import AttemptID, Step, StepID

from . import file as file_storage
from . import Session
from .table import attempt_steps


def get(step_id: StepID, session: Session = di.Provide["storage.persistent.session"]) -> Step | None:
    stmt = sqla.select(attempt_steps.__table__).where(attempt_steps.step_id == step_id)
    row = session.execute(stmt).mappings().one_or_none()
    if row is None:
        return None
    return _to_model(row, file_storage.find(step_id=step_id, session=session))


def find(
    attempt_id: AttemptID,
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Step, ...]:
    """All steps of an attempt, oldest first, with their files"""
    stmt = (
        sqla.select(attempt_steps.__table__)
        .where(attempt_steps.attempt_id == attempt_id)
        .order_by(attempt_steps.sequence)
    )
    rows = session.execute(stmt).mappings().all()
    files = file_storage.find_for_steps([row["step_id"] for row in rows], session=session)
    return tuple(_to_model(row, files.get(row["step_id"], ())) for row in rows)


def is_applied(step_id: StepID, session: Session = di.Provide["storage.persistent.session"]) -> bool:
    stmt = sqla.select(attempt_steps.applied).where(attempt_steps.step_id == step_id)
    return bool(session.execute(stmt).scalar_one_or_none())


def create(step: Step, session: Session = di.Provide["storage.persistent.session"]) -> Step:
    stmt = sqla.insert(attempt_steps).values(
        step_id=step.step_id,
        attempt_id=step.attempt_id,
        sequence=step.sequence,
        state=step.state.value,
        event=step.event.model_dump(mode="json") if step.event is not None else None,
        response=step.response,
        fraction=step.fraction,
        summary=step.summary,
        applied=step.applied,
    )
    # core insert: replayed steps reuse the ids of steps deleted in the same transaction
    session.execute(stmt)
    if step.files:
        file_storage.create(step.step_id, step.files, session=session)
    return get(step.step_id, session=session)  # type: ignore


def delete(
    *,
    attempt_id: AttemptID,
    session: Session = di.Provide["storage.persistent.session"],
) -> int:
    """Delete every step of an attempt, along with their files

    Returns:
        The number of steps deleted
    """
    step_ids = sqla.select(attempt_steps.step_id).where(attempt_steps.attempt_id == attempt_id)
    file_storage.delete(step_ids=step_ids, session=session)
    result = session.execute(sqla.delete(attempt_steps).where(attempt_steps.attempt_id == attempt_id))
    return result.rowcount  # pyright: ignore[reportAttributeAccessIssue]


def _to_model(row: t.Mapping[str, t.Any], files: t.Iterable[t.Any]) -> Step:
    return Step(**row, files=tuple(files))
