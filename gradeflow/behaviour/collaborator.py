"""Interfaces of the collaborators an interaction state machine consults."""

from __future__ import annotations

import decimal
import typing as t

from gradeflow.model import Attempt, AttemptID, GradingJobID, InteractionState, RegradeOverride, Response, \
    ResponseFile, StepID, UsageID


class RecordStore(t.Protocol):
    """Lookups and updates against grading jobs, steps and regrade overrides.

    Reads must observe writes made in the same unit of work, otherwise a job
    superseded by a regrade may still appear live.
    """

    def job_exists(self, job_id: GradingJobID, attempt_id: AttemptID) -> bool:
        """True iff the job is still the authoritative one for this attempt.

        A job queued for some other attempt is never authoritative here.
        """
        ...

    def is_applied(self, step_id: StepID) -> bool:
        """True iff a manual comment step with this id was already processed."""
        ...

    def get_override(self, usage_id: UsageID, slot: int) -> RegradeOverride | None: ...

    def update_override(self, override: RegradeOverride) -> None: ...


class GradingDispatcher(t.Protocol):
    def submit(
        self, attempt: Attempt, response: Response, files: t.Sequence[ResponseFile], *, step_id: StepID
    ) -> InteractionState:
        """Start grading a response on behalf of the step `step_id`.

        Returns the state the attempt is in once grading has been started:
        normally NeedsGrading while the result is pending, or a graded state
        if the grader answered immediately.
        """
        ...


class Question(t.Protocol):
    @property
    def min_fraction(self) -> decimal.Decimal: ...

    def is_complete(self, response: Response, files: t.Sequence[ResponseFile]) -> bool: ...

    def is_gradable(self, response: Response, files: t.Sequence[ResponseFile]) -> bool: ...

    def is_same_response(
        self,
        prev: Response,
        prev_files: t.Sequence[ResponseFile],
        new: Response,
        new_files: t.Sequence[ResponseFile],
    ) -> bool: ...

    def summarize(self, response: Response) -> str: ...


class FileStore(t.Protocol):
    def get_files(self, usage_id: UsageID, step_id: StepID) -> tuple[ResponseFile, ...]:
        """Read back the files persisted with a step."""
        ...


@t.runtime_checkable
class FileSaver(t.Protocol):
    """Live handle on files uploaded with the request being processed"""

    def get_files(self) -> tuple[ResponseFile, ...]: ...


class DraftFileSaver(object):
    def __init__(self, files: t.Iterable[ResponseFile] = ()):
        self.files = tuple(files)

    def get_files(self) -> tuple[ResponseFile, ...]:
        return self.files

    def __repr__(self) -> str:
        return f"<DraftFileSaver {[f.filename for f in self.files]!r}>"
