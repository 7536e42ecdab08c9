"""Default comment and save processing shared by interaction behaviours.

The state machine composes these explicitly: its comment and save handlers
run their own checks before or after calling into a `BaseOperations`.
"""

from __future__ import annotations

import logging
import typing as t

from gradeflow.model import Attempt, CommentEvent, InteractionState

from .collaborator import Question
from .decision import Decision
from .errors import ManualGradingError, MarkOutOfRangeError
from .pending import PendingStep

logger = logging.getLogger(__name__)


class BaseOperations(t.Protocol):
    def process_comment(self, attempt: Attempt, pending: PendingStep) -> Decision: ...

    def process_save(self, attempt: Attempt, question: Question, pending: PendingStep) -> Decision: ...


class DefaultBaseOperations(object):
    def process_comment(self, attempt: Attempt, pending: PendingStep) -> Decision:
        """Apply a manual comment and, optionally, a manual mark.

        Raises:
            ManualGradingError: the attempt is still active
            MarkOutOfRangeError: the mark falls outside the attempt's fraction bounds
        """
        event = pending.event
        assert isinstance(event, CommentEvent)

        current = attempt.state
        if current.is_active:
            raise ManualGradingError(f"cannot manually grade attempt {attempt.attempt_id!r} in state {current.value}")

        if event.clear_mark:
            pending.fraction = None
        elif event.mark is not None:
            max_mark = event.max_mark if event.max_mark is not None else attempt.max_mark
            if max_mark <= 0:
                raise MarkOutOfRangeError(f"max mark must be positive, got {max_mark}")
            fraction = event.mark / max_mark
            if fraction < attempt.min_fraction or fraction > attempt.max_fraction:
                raise MarkOutOfRangeError(
                    f"mark {event.mark} out of range [{attempt.min_fraction * max_mark}, "
                    f"{attempt.max_fraction * max_mark}]"
                )
            pending.fraction = fraction
        else:
            pending.fraction = attempt.fraction

        pending.state = current.corresponding_commented_state(pending.fraction)
        logger.debug(
            "applied manual comment",
            extra={
                "attempt_id": str(attempt.attempt_id),
                "step_id": str(pending.step_id),
                "state": pending.state.value,
            },
        )
        return Decision.Keep

    def process_save(self, attempt: Attempt, question: Question, pending: PendingStep) -> Decision:
        current = attempt.state
        if current.is_finished:
            return Decision.Discard

        last = attempt.last_step
        prev_files = last.files if last is not None else ()
        files = pending.file_saver.get_files() if pending.file_saver is not None else pending.files
        if question.is_same_response(attempt.last_response, prev_files, pending.response, files):
            return Decision.Discard

        pending.files = files
        pending.summary = question.summarize(pending.response)
        if question.is_complete(pending.response, files):
            pending.state = InteractionState.Complete
        else:
            pending.state = InteractionState.Todo
        return Decision.Keep
