"""Process interaction events against persisted attempts.

Each entry point runs as one unit of work: the attempt row is locked, the
state machine consults the SQL-backed collaborators through the same session,
and a kept step is persisted before the transaction commits.
"""

from __future__ import annotations

import decimal
import logging
import typing as t

from gradeflow.core import di
from gradeflow.model import Attempt, AttemptID, Event, GraderUnavailableEvent, GradingJobStatus, \
    GradingResultEvent, InteractionState, RegradeOverride, Response, ScorePolicy, Step, StepID
from gradeflow.storage import attempt as attempt_storage
from gradeflow.storage import job as job_storage
from gradeflow.storage import regrade as regrade_storage
from gradeflow.storage import Session
from gradeflow.storage import step as step_storage
from gradeflow.storage.attempt import AttemptCreateParams
from gradeflow.storage.record import SQLFileStore, SQLRecordStore

from .collaborator import FileSaver, GradingDispatcher, Question
from .decision import Decision
from .errors import AttemptNotFoundError
from .machine import InteractionStateMachine
from .pending import PendingStep
from .replay import replay

logger = logging.getLogger(__name__)

QuestionFactory = t.Callable[[Attempt], Question]
DispatcherFactory = t.Callable[[Session], GradingDispatcher]


class ProcessResult(t.NamedTuple):
    decision: Decision
    attempt: Attempt


@di.inject
def start_attempt(
    params: AttemptCreateParams,
    *,
    session: Session = di.Provide["storage.persistent.session"],
    default_min_fraction: decimal.Decimal = di.Provide["config.grading.min_fraction"],
) -> Attempt:
    """Create an attempt along with its initial in-progress step"""
    with session.begin():
        attempt = attempt_storage.create({"min_fraction": default_min_fraction, **params}, session=session)
        step_storage.create(
            Step(step_id=StepID(), attempt_id=attempt.attempt_id, sequence=0, state=InteractionState.Todo),
            session=session,
        )
        started = attempt_storage.update(attempt.attempt_id, {"state": InteractionState.Todo}, session=session)
        assert started is not None
        logger.info(
            "started attempt",
            extra={"attempt_id": str(attempt.attempt_id), "usage_id": str(attempt.usage_id), "slot": attempt.slot},
        )
        return started


@di.inject
def process_event(
    attempt_id: AttemptID,
    event: Event,
    *,
    response: Response | None = None,
    file_saver: FileSaver | None = None,
    session: Session = di.Provide["storage.persistent.session"],
    question_factory: QuestionFactory = di.Provide["grading.question_factory"],
    dispatcher_factory: DispatcherFactory = di.Provide["grading.dispatcher_factory"],
    score_policy: ScorePolicy = di.Provide["config.grading.score_policy"],
) -> ProcessResult:
    """Run one event through the attempt's state machine and persist a kept step.

    Raises:
        AttemptNotFoundError: no such attempt
    """
    with session.begin():
        attempt = attempt_storage.get(attempt_id, for_update=True, session=session)
        if attempt is None:
            raise AttemptNotFoundError(f"no attempt {attempt_id!r}")

        machine = _build_machine(attempt, session, question_factory, dispatcher_factory, score_policy)
        pending = PendingStep(event=event, response=response or {}, file_saver=file_saver)
        decision = machine.process(pending)
        if decision is Decision.Discard:
            return ProcessResult(decision, attempt)

        step = step_storage.create(pending.to_step(attempt_id, len(attempt.steps)), session=session)
        match event:
            case GradingResultEvent(job_id=job_id):
                job_storage.update_status(job_id, GradingJobStatus.Completed, session=session)
            case GraderUnavailableEvent(job_id=job_id):
                job_storage.update_status(job_id, GradingJobStatus.Unavailable, session=session)
            case _:
                pass

        updated = attempt_storage.update(attempt_id, {"state": step.state, "fraction": step.fraction}, session=session)
        assert updated is not None
        return ProcessResult(decision, updated)


@di.inject
def regrade(
    attempt_id: AttemptID,
    *,
    dry_run: bool = False,
    session: Session = di.Provide["storage.persistent.session"],
    question_factory: QuestionFactory = di.Provide["grading.question_factory"],
    dispatcher_factory: DispatcherFactory = di.Provide["grading.dispatcher_factory"],
    score_policy: ScorePolicy = di.Provide["config.grading.score_policy"],
) -> RegradeOverride:
    """Replay an attempt's history, superseding its outstanding grading jobs.

    Submissions are dispatched afresh, so results of the superseded jobs are
    discarded when they arrive. The override record tracks the fraction before
    the regrade and is brought up to date as new results land. A dry run
    records the override without changing the attempt.
    """
    with session.begin():
        attempt = attempt_storage.get(attempt_id, for_update=True, session=session)
        if attempt is None:
            raise AttemptNotFoundError(f"no attempt {attempt_id!r}")

        def factory(a: Attempt) -> InteractionStateMachine:
            return _build_machine(a, session, question_factory, dispatcher_factory, score_policy)

        savepoint = session.begin_nested() if dry_run else None
        superseded = job_storage.delete(attempt_id=attempt_id, session=session)
        replayed = replay(attempt, factory)
        if savepoint is not None:
            savepoint.rollback()
        else:
            step_storage.delete(attempt_id=attempt_id, session=session)
            for step in replayed.steps:
                step_storage.create(step, session=session)
            attempt_storage.update(
                attempt_id, {"state": replayed.state, "fraction": replayed.fraction}, session=session
            )

        override = regrade_storage.get(usage_id=attempt.usage_id, slot=attempt.slot, session=session)
        if override is None:
            override = regrade_storage.create(
                {
                    "usage_id": attempt.usage_id,
                    "slot": attempt.slot,
                    "attempt_id": attempt_id,
                    "old_fraction": attempt.fraction,
                    "new_fraction": replayed.fraction,
                    "dry_run": dry_run,
                },
                session=session,
            )
        else:
            override = regrade_storage.update(
                override.override_id, {"new_fraction": replayed.fraction, "dry_run": dry_run}, session=session
            )
        assert override is not None

        logger.info(
            "regraded attempt",
            extra={
                "attempt_id": str(attempt_id),
                "dry_run": dry_run,
                "superseded_jobs": superseded,
                "steps_before": len(attempt.steps),
                "steps_after": len(replayed.steps),
                "state": replayed.state.value,
            },
        )
        return override


def _build_machine(
    attempt: Attempt,
    session: Session,
    question_factory: QuestionFactory,
    dispatcher_factory: DispatcherFactory,
    score_policy: ScorePolicy,
) -> InteractionStateMachine:
    return InteractionStateMachine(
        attempt,
        question=question_factory(attempt),
        records=SQLRecordStore(session),
        dispatcher=dispatcher_factory(session),
        files=SQLFileStore(session),
        score_policy=ScorePolicy(score_policy),
    )
