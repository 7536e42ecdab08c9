from __future__ import annotations

import logging
import typing as t

from gradeflow.model import Attempt

from .decision import Decision
from .machine import InteractionStateMachine
from .pending import PendingStep

logger = logging.getLogger(__name__)

MachineFactory = t.Callable[[Attempt], InteractionStateMachine]


def replay(attempt: Attempt, machine_factory: MachineFactory) -> Attempt:
    """Re-run an attempt's history from its first step.

    Every step after the first is replayed as a pending step with its
    original id and without a live file saver. Returns a copy of the attempt
    holding only the steps which were kept on replay.
    """
    if not attempt.steps:
        return attempt

    first, *rest = attempt.steps
    replayed = attempt.model_copy(update={"steps": (first,)})
    for step in rest:
        pending = PendingStep.replaying(step)
        decision = machine_factory(replayed).process(pending)
        if decision is Decision.Keep:
            replayed = replayed.with_step(pending.to_step(attempt.attempt_id, len(replayed.steps)))
        else:
            logger.info(
                "step dropped on replay",
                extra={
                    "attempt_id": str(attempt.attempt_id),
                    "step_id": str(step.step_id),
                    "kind": pending.event.kind,
                },
            )
    return replayed
