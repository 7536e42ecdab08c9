from __future__ import annotations

import typing as t

import sqlalchemy as sqla

from gradeflow.core import di
from gradeflow.model import ResponseFile, StepID, UsageID

from . import Session
from .table import attempt_steps, attempts, step_files


def find(
    *,
    step_id: StepID,
    usage_id: UsageID | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[ResponseFile, ...]:
    """Files persisted with a step, optionally scoped to the usage owning the step"""
    stmt = (
        sqla.select(step_files.filename, step_files.content_type, step_files.content)
        .where(step_files.step_id == step_id)
        .order_by(step_files.filename)
    )
    if usage_id is not None:
        stmt = (
            stmt.join(attempt_steps, attempt_steps.step_id == step_files.step_id)
            .join(attempts, attempts.attempt_id == attempt_steps.attempt_id)
            .where(attempts.usage_id == usage_id)
        )
    rows = session.execute(stmt).mappings().all()
    return tuple(ResponseFile(**row) for row in rows)


def find_for_steps(
    step_ids: t.Sequence[StepID],
    *,
    session: Session = di.Provide["storage.persistent.session"],
) -> dict[StepID, tuple[ResponseFile, ...]]:
    if not step_ids:
        return {}
    stmt = (
        sqla.select(step_files.step_id, step_files.filename, step_files.content_type, step_files.content)
        .where(step_files.step_id.in_(step_ids))
        .order_by(step_files.step_id, step_files.filename)
    )
    found: dict[StepID, list[ResponseFile]] = {}
    for row in session.execute(stmt).mappings():
        found.setdefault(row["step_id"], []).append(
            ResponseFile(filename=row["filename"], content_type=row["content_type"], content=row["content"])
        )
    return {k: tuple(v) for k, v in found.items()}


def create(
    step_id: StepID,
    files: t.Iterable[ResponseFile],
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    values = [
        {"step_id": step_id, "filename": f.filename, "content": f.content, "content_type": f.content_type}
        for f in files
    ]
    if values:
        session.execute(sqla.insert(step_files), values)


def delete(
    *,
    step_ids: t.Any,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Delete the files of the given steps; `step_ids` may be a list or a subquery"""
    session.execute(sqla.delete(step_files).where(step_files.step_id.in_(step_ids)))
