from __future__ import annotations

import decimal
import typing as t

import sqlalchemy as sqla

from gradeflow.core import di
from gradeflow.model import Attempt, AttemptID, InteractionState, UsageID

from . import Session
from . import step as step_storage
from .table import attempts

_AttemptColumns = ("attempt_id", "usage_id", "slot", "max_mark", "min_fraction", "max_fraction", "create_time")


def get(
    key: AttemptID,
    *,
    for_update: bool = False,
    session: Session = di.Provide["storage.persistent.session"],
) -> Attempt | None:
    """Load an attempt with its full step history.

    With `for_update`, the attempt row stays locked until the end of the
    transaction, serializing event processing for the attempt.
    """
    stmt = sqla.select(attempts.__table__).where(attempts.attempt_id == key)
    if for_update:
        stmt = stmt.with_for_update()
    row = session.execute(stmt).mappings().one_or_none()
    if row is None:
        return None
    return _to_model(row, session=session)


def find(
    *,
    usage_id: UsageID | None = None,
    state: InteractionState | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Attempt, ...]:
    stmt = sqla.select(attempts.__table__).order_by(attempts.usage_id, attempts.slot)
    if usage_id is not None:
        stmt = stmt.where(attempts.usage_id == usage_id)
    if state is not None:
        stmt = stmt.where(attempts.state == state.value)
    rows = session.execute(stmt).mappings().all()
    return tuple(_to_model(row, session=session) for row in rows)


def create(params: AttemptCreateParams, session: Session = di.Provide["storage.persistent.session"]) -> Attempt:
    attempt = attempts(
        attempt_id=AttemptID(),
        usage_id=params.get("usage_id") or UsageID(),
        slot=params.get("slot", 1),
        max_mark=params["max_mark"],
        min_fraction=params.get("min_fraction", decimal.Decimal(0)),
        max_fraction=params.get("max_fraction", decimal.Decimal(1)),
    )
    session.add(attempt)
    session.flush()
    return get(attempt.attempt_id, session=session)  # type: ignore


def update(
    key: AttemptID,
    params: AttemptUpdateParams,
    session: Session = di.Provide["storage.persistent.session"],
) -> Attempt | None:
    stmt = sqla.select(attempts).where(attempts.attempt_id == key)
    attempt = session.execute(stmt).scalar_one_or_none()
    if attempt is None:
        return None
    for field, value in params.items():
        actual_value: t.Any = value
        if field == "state" and isinstance(value, InteractionState):
            actual_value = value.value
        setattr(attempt, field, actual_value)
    session.flush()
    return get(key, session=session)


class AttemptCreateParams(t.TypedDict, total=False):
    max_mark: t.Required[decimal.Decimal]
    usage_id: UsageID
    slot: int
    min_fraction: decimal.Decimal
    max_fraction: decimal.Decimal


class AttemptUpdateParams(t.TypedDict, total=False):
    state: InteractionState
    fraction: decimal.Decimal | None


def _to_model(row: t.Mapping[str, t.Any], *, session: Session) -> Attempt:
    fields = {k: row[k] for k in _AttemptColumns}
    return Attempt(**fields, steps=step_storage.find(row["attempt_id"], session=session))
