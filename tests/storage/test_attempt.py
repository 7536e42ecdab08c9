from __future__ import annotations

import decimal
import typing as t

from sqlalchemy.orm import Session

from gradeflow.model import Attempt, AttemptID, InteractionState, UsageID
from gradeflow.storage import attempt as attempt_storage

D = decimal.Decimal


class TestAttemptStorage(object):
    def test_get_missing(self, db_session: Session) -> None:
        with db_session.begin():
            assert attempt_storage.get(AttemptID(), session=db_session) is None

    def test_create_defaults(self, db_session: Session) -> None:
        with db_session.begin():
            created = attempt_storage.create({"max_mark": D(4)}, session=db_session)

        assert created.slot == 1
        assert created.min_fraction == D(0)
        assert created.max_fraction == D(1)
        assert created.steps == ()
        assert created.state is InteractionState.NotStarted
        assert created.create_time is not None

    def test_get_for_update(self, db_session: Session, test_attempt: Attempt) -> None:
        with db_session.begin():
            found = attempt_storage.get(test_attempt.attempt_id, for_update=True, session=db_session)
        assert found == test_attempt

    def test_find_by_usage_and_state(self, db_session: Session, attempt_factory: t.Callable[..., Attempt]) -> None:
        usage_id = UsageID()
        first = attempt_factory(usage_id=usage_id, slot=1)
        second = attempt_factory(usage_id=usage_id, slot=2)
        attempt_factory()

        with db_session.begin():
            found = attempt_storage.find(usage_id=usage_id, session=db_session)
            todo = attempt_storage.find(usage_id=usage_id, state=InteractionState.Todo, session=db_session)
            graded = attempt_storage.find(usage_id=usage_id, state=InteractionState.GradedRight, session=db_session)

        assert [a.attempt_id for a in found] == [first.attempt_id, second.attempt_id]
        assert len(todo) == 2
        assert graded == ()

    def test_update_denormalized_state(self, db_session: Session, test_attempt: Attempt) -> None:
        with db_session.begin():
            attempt_storage.update(
                test_attempt.attempt_id,
                {"state": InteractionState.GradedRight, "fraction": D(1)},
                session=db_session,
            )
            found = attempt_storage.find(state=InteractionState.GradedRight, session=db_session)

        assert [a.attempt_id for a in found] == [test_attempt.attempt_id]

    def test_update_missing(self, db_session: Session) -> None:
        with db_session.begin():
            assert attempt_storage.update(AttemptID(), {"fraction": None}, session=db_session) is None
