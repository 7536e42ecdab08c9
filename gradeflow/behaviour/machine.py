"""Interaction state machine for asynchronously graded responses.

A student may submit a response once; submission dispatches it to an external
grader and the attempt waits in NeedsGrading until a grading result (or a
grader-unavailable notice) arrives as a separate event. Results for jobs which
have since been superseded by a regrade are discarded.
"""

from __future__ import annotations

import decimal
import logging

from gradeflow.model import Attempt, CommentEvent, FinishEvent, GraderUnavailableEvent, GradingResultEvent, \
    InteractionState, ResponseFile, SaveEvent, ScorePolicy, SubmitEvent

from .base import BaseOperations, DefaultBaseOperations
from .collaborator import FileStore, GradingDispatcher, Question, RecordStore
from .decision import Decision
from .errors import ScoreOutOfRangeError
from .pending import PendingStep

logger = logging.getLogger(__name__)


class InteractionStateMachine(object):
    def __init__(
        self,
        attempt: Attempt,
        *,
        question: Question,
        records: RecordStore,
        dispatcher: GradingDispatcher,
        files: FileStore,
        base: BaseOperations | None = None,
        score_policy: ScorePolicy = ScorePolicy.Clamp,
    ):
        self.attempt = attempt
        self.question = question
        self.records = records
        self.dispatcher = dispatcher
        self.files = files
        self.base = base or DefaultBaseOperations()
        self.score_policy = score_policy

    @property
    def state(self) -> InteractionState:
        return self.attempt.state

    def process(self, pending: PendingStep) -> Decision:
        match pending.event:
            case CommentEvent():
                decision = self.process_comment(pending)
            case SubmitEvent():
                decision = self.process_submit(pending)
            case FinishEvent():
                decision = self.process_finish(pending)
            case GradingResultEvent():
                decision = self.process_grading_result(pending)
            case GraderUnavailableEvent():
                decision = self.process_grader_unavailable(pending)
            case SaveEvent():
                decision = self.process_save(pending)
            case _:
                raise TypeError(f"unsupported event {pending.event!r}")

        logger.debug(
            "processed event",
            extra={
                "attempt_id": str(self.attempt.attempt_id),
                "step_id": str(pending.step_id),
                "kind": pending.event.kind,
                "decision": decision.value,
                "state": pending.state.value if pending.state else None,
            },
        )
        return decision

    def process_comment(self, pending: PendingStep) -> Decision:
        # a comment replayed during a regrade refers to the superseded result
        if self.records.is_applied(pending.step_id):
            return Decision.Discard

        decision = self.base.process_comment(self.attempt, pending)
        pending.applied = True
        return decision

    def process_submit(self, pending: PendingStep) -> Decision:
        if self.state.is_finished:
            return Decision.Discard

        files = self._resolve_files(pending)
        if not self.question.is_complete(pending.response, files):
            pending.state = InteractionState.Invalid
            return Decision.Keep

        pending.files = files
        pending.state = self.dispatcher.submit(self.attempt, pending.response, files, step_id=pending.step_id)
        pending.summary = self.question.summarize(pending.response)
        return Decision.Keep

    def process_finish(self, pending: PendingStep) -> Decision:
        if self.state.is_finished:
            return Decision.Discard

        last = self.attempt.last_step
        response = self.attempt.last_response
        files = last.files if last is not None else ()
        if not self.question.is_gradable(response, files):
            pending.state = InteractionState.GaveUp
            pending.fraction = self.question.min_fraction
            return Decision.Keep

        pending.state = self.dispatcher.submit(self.attempt, response, files, step_id=pending.step_id)
        pending.summary = self.question.summarize(response)
        return Decision.Keep

    def process_grading_result(self, pending: PendingStep) -> Decision:
        event = pending.event
        assert isinstance(event, GradingResultEvent)

        if not self.records.job_exists(event.job_id, self.attempt.attempt_id):
            logger.debug(
                "discarding result for superseded grading job",
                extra={"attempt_id": str(self.attempt.attempt_id), "job_id": str(event.job_id)},
            )
            return Decision.Discard

        fraction = self._apply_score_policy(event.score / self.attempt.max_mark)
        pending.fraction = fraction
        pending.state = InteractionState.graded_state_for_fraction(fraction)
        pending.summary = self.question.summarize({**self.attempt.last_response, **pending.response})

        override = self.records.get_override(self.attempt.usage_id, self.attempt.slot)
        if override is not None:
            self.records.update_override(override.model_copy(update={"new_fraction": fraction}))
        return Decision.Keep

    def process_grader_unavailable(self, pending: PendingStep) -> Decision:
        event = pending.event
        assert isinstance(event, GraderUnavailableEvent)

        if not self.records.job_exists(event.job_id, self.attempt.attempt_id):
            return Decision.Discard

        logger.warning(
            "grader unavailable, attempt requires manual grading",
            extra={"attempt_id": str(self.attempt.attempt_id), "job_id": str(event.job_id), "reason": event.reason},
        )
        pending.state = InteractionState.NeedsGrading
        return Decision.Keep

    def process_save(self, pending: PendingStep) -> Decision:
        decision = self.base.process_save(self.attempt, self.question, pending)
        # only an explicit submit can make a response ready for grading
        if decision is Decision.Keep and pending.state is InteractionState.Complete:
            pending.state = InteractionState.Todo
        return decision

    def _resolve_files(self, pending: PendingStep) -> tuple[ResponseFile, ...]:
        if pending.file_saver is not None:
            return pending.file_saver.get_files()
        # replaying a persisted step: the original upload is gone
        return self.files.get_files(self.attempt.usage_id, pending.step_id)

    def _apply_score_policy(self, fraction: decimal.Decimal) -> decimal.Decimal:
        lo, hi = self.attempt.min_fraction, self.attempt.max_fraction
        if lo <= fraction <= hi or self.score_policy is ScorePolicy.PassThrough:
            return fraction
        if self.score_policy is ScorePolicy.Reject:
            raise ScoreOutOfRangeError(
                f"score fraction {fraction} for attempt {self.attempt.attempt_id!r} outside [{lo}, {hi}]"
            )
        clamped = min(max(fraction, lo), hi)
        logger.warning(
            "clamping out of range grading result",
            extra={"attempt_id": str(self.attempt.attempt_id), "fraction": str(fraction), "clamped": str(clamped)},
        )
        return clamped
