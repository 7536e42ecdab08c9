from __future__ import annotations

import decimal
import typing as t

import sqlalchemy as sqla

from gradeflow.core import di
from gradeflow.model import AttemptID, OverrideID, RegradeOverride, UsageID

from . import Session
from .table import regrade_overrides


@t.overload
def get(
    override_id: OverrideID,
    *,
    session: Session = ...,
) -> RegradeOverride | None: ...


@t.overload
def get(
    override_id: None = None,
    *,
    usage_id: UsageID,
    slot: int,
    session: Session = ...,
) -> RegradeOverride | None: ...


def get(
    override_id: OverrideID | None = None,
    *,
    usage_id: UsageID | None = None,
    slot: int | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> RegradeOverride | None:
    """Get a regrade override by ID or by usage and slot.

    Exactly one lookup key must be provided.
    """
    if override_id is not None:
        stmt = sqla.select(regrade_overrides.__table__).where(regrade_overrides.override_id == override_id)
    elif usage_id is not None and slot is not None:
        stmt = sqla.select(regrade_overrides.__table__).where(
            regrade_overrides.usage_id == usage_id,
            regrade_overrides.slot == slot,
        )
    else:
        raise ValueError("exactly one of override_id or (usage_id, slot) must be provided")

    row = session.execute(stmt).mappings().one_or_none()
    return RegradeOverride(**row) if row else None


def find(
    *,
    usage_id: UsageID | None = None,
    attempt_id: AttemptID | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[RegradeOverride, ...]:
    stmt = sqla.select(regrade_overrides.__table__).order_by(regrade_overrides.usage_id, regrade_overrides.slot)
    if usage_id is not None:
        stmt = stmt.where(regrade_overrides.usage_id == usage_id)
    if attempt_id is not None:
        stmt = stmt.where(regrade_overrides.attempt_id == attempt_id)
    rows = session.execute(stmt).mappings().all()
    return tuple(RegradeOverride(**row) for row in rows)


def create(
    params: OverrideCreateParams, session: Session = di.Provide["storage.persistent.session"]
) -> RegradeOverride:
    override = regrade_overrides(
        override_id=OverrideID(),
        usage_id=params["usage_id"],
        slot=params["slot"],
        attempt_id=params["attempt_id"],
        old_fraction=params.get("old_fraction"),
        new_fraction=params.get("new_fraction"),
        dry_run=params.get("dry_run", False),
    )
    session.add(override)
    session.flush()
    return get(override.override_id, session=session)  # type: ignore


def update(
    key: OverrideID,
    params: OverrideUpdateParams,
    session: Session = di.Provide["storage.persistent.session"],
) -> RegradeOverride | None:
    stmt = sqla.select(regrade_overrides).where(regrade_overrides.override_id == key)
    override = session.execute(stmt).scalar_one_or_none()
    if override is None:
        return None
    for field, value in params.items():
        setattr(override, field, value)
    session.flush()
    return get(key, session=session)


class OverrideCreateParams(t.TypedDict, total=False):
    usage_id: t.Required[UsageID]
    slot: t.Required[int]
    attempt_id: t.Required[AttemptID]
    old_fraction: decimal.Decimal | None
    new_fraction: decimal.Decimal | None
    dry_run: bool


class OverrideUpdateParams(t.TypedDict, total=False):
    new_fraction: decimal.Decimal | None
    dry_run: bool
