from __future__ import annotations

import decimal

import pydantic as p

from gradeflow.model import AttemptID, BaseModel, Event, InteractionState, Response, ResponseFile, Step, StepID

from .collaborator import FileSaver


class PendingStep(BaseModel):
    """A step being filled in by an event handler.

    Handlers mutate the pending step in place. A kept pending step becomes an
    immutable Step via `to_step`; a discarded one is dropped.
    """

    model_config = p.ConfigDict(arbitrary_types_allowed=True)

    step_id: StepID = p.Field(default_factory=StepID)
    event: Event
    response: Response = {}
    files: tuple[ResponseFile, ...] = ()
    file_saver: FileSaver | None = p.Field(default=None, exclude=True)

    state: InteractionState | None = None
    fraction: decimal.Decimal | None = None
    summary: str | None = None
    applied: bool = False

    @classmethod
    def replaying(cls, step: Step) -> PendingStep:
        """Pending step which re-runs a persisted step during a regrade.

        The step id is preserved and there is no live file saver, so
        handlers must fall back to the files persisted with the step.
        """
        if step.event is None:
            raise ValueError(f"step {step.step_id!r} has no event to replay")
        return cls(step_id=step.step_id, event=step.event, response=dict(step.response), files=step.files)

    def to_step(self, attempt_id: AttemptID, sequence: int) -> Step:
        if self.state is None:
            raise ValueError(f"pending step {self.step_id!r} was kept without a state")
        return Step(
            step_id=self.step_id,
            attempt_id=attempt_id,
            sequence=sequence,
            event=self.event,
            response=dict(self.response),
            files=self.files,
            state=self.state,
            fraction=self.fraction,
            summary=self.summary,
            applied=self.applied,
        )
