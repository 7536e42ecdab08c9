"""Events which drive an attempt's interaction state.

Each event is produced at the ingestion boundary (CLI, grader callback
handler, etc.) and carries only the payload its handler needs.
"""

from __future__ import annotations

import decimal
import typing as t

import pydantic as p

from .base import FrozenModel
from .id import GradingJobID


class SubmitEvent(FrozenModel):
    kind: t.Literal["submit"] = "submit"


class FinishEvent(FrozenModel):
    kind: t.Literal["finish"] = "finish"


class GradingResultEvent(FrozenModel):
    kind: t.Literal["gradingresult"] = "gradingresult"
    job_id: GradingJobID
    score: decimal.Decimal
    feedback: str | None = None


class GraderUnavailableEvent(FrozenModel):
    kind: t.Literal["graderunavailable"] = "graderunavailable"
    job_id: GradingJobID
    reason: str | None = None


class CommentEvent(FrozenModel):
    kind: t.Literal["comment"] = "comment"
    comment: str = ""
    comment_format: t.Literal["html", "markdown", "plain"] = "html"
    # a mark of None leaves the current fraction alone unless clear_mark is set
    mark: decimal.Decimal | None = None
    max_mark: decimal.Decimal | None = None
    clear_mark: bool = False


class SaveEvent(FrozenModel):
    kind: t.Literal["save"] = "save"


Event = t.Annotated[
    CommentEvent | SubmitEvent | FinishEvent | GradingResultEvent | GraderUnavailableEvent | SaveEvent,
    p.Field(discriminator="kind"),
]

EventAdapter: p.TypeAdapter[Event] = p.TypeAdapter(Event)


def load_event(data: dict[str, t.Any]) -> Event:
    return EventAdapter.validate_python(data)
