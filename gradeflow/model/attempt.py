from __future__ import annotations

import decimal
import typing as t

import pydantic as p

from .base import FrozenModel, WithCtime
from .event import Event
from .id import AttemptID, StepID, UsageID
from .state import InteractionState

Response = dict[str, t.Any]


class ResponseFile(FrozenModel):
    filename: str
    content_type: str = "application/octet-stream"
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


class Step(FrozenModel, WithCtime):
    step_id: StepID
    attempt_id: AttemptID
    sequence: int

    event: Event | None = None
    response: Response = {}
    files: tuple[ResponseFile, ...] = ()

    state: InteractionState
    fraction: decimal.Decimal | None = None
    summary: str | None = None

    # set once a manual comment step has been processed
    applied: bool = False


class Attempt(WithCtime):
    attempt_id: AttemptID
    usage_id: UsageID
    slot: int

    max_mark: t.Annotated[decimal.Decimal, p.Field(gt=0)]
    min_fraction: decimal.Decimal = decimal.Decimal(0)
    max_fraction: decimal.Decimal = decimal.Decimal(1)

    steps: tuple[Step, ...] = ()

    @property
    def last_step(self) -> Step | None:
        return self.steps[-1] if self.steps else None

    @property
    def state(self) -> InteractionState:
        step = self.last_step
        return step.state if step is not None else InteractionState.NotStarted

    @property
    def fraction(self) -> decimal.Decimal | None:
        step = self.last_step
        return step.fraction if step is not None else None

    @property
    def last_response(self) -> Response:
        step = self.last_step
        return dict(step.response) if step is not None else {}

    @property
    def mark(self) -> decimal.Decimal | None:
        fraction = self.fraction
        return fraction * self.max_mark if fraction is not None else None

    def with_step(self, step: Step) -> Attempt:
        return self.model_copy(update={"steps": (*self.steps, step)})
