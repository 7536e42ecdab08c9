"""In-memory collaborators for exercising the state machine without storage."""

from __future__ import annotations

import decimal
import typing as t

import pytest

from gradeflow.behaviour import InteractionStateMachine
from gradeflow.grading import ProgrammingTaskQuestion
from gradeflow.model import Attempt, AttemptID, Event, GradingJobID, InteractionState, RegradeOverride, Response, \
    ResponseFile, ScorePolicy, Step, StepID, UsageID


class FakeRecords(object):
    def __init__(self) -> None:
        self.jobs: dict[GradingJobID, AttemptID] = {}
        self.applied: set[StepID] = set()
        self.overrides: dict[tuple[UsageID, int], RegradeOverride] = {}
        self.updated: list[RegradeOverride] = []

    def job_exists(self, job_id: GradingJobID, attempt_id: AttemptID) -> bool:
        return self.jobs.get(job_id) == attempt_id

    def is_applied(self, step_id: StepID) -> bool:
        return step_id in self.applied

    def get_override(self, usage_id: UsageID, slot: int) -> RegradeOverride | None:
        return self.overrides.get((usage_id, slot))

    def update_override(self, override: RegradeOverride) -> None:
        self.overrides[(override.usage_id, override.slot)] = override
        self.updated.append(override)


class FakeDispatcher(object):
    def __init__(self, records: FakeRecords) -> None:
        self.records = records
        self.submitted: list[tuple[Response, tuple[ResponseFile, ...]]] = []
        self.step_ids: list[StepID] = []
        self.next_state = InteractionState.NeedsGrading

    def submit(
        self, attempt: Attempt, response: Response, files: t.Sequence[ResponseFile], *, step_id: StepID
    ) -> InteractionState:
        self.submitted.append((dict(response), tuple(files)))
        self.step_ids.append(step_id)
        self.records.jobs[GradingJobID()] = attempt.attempt_id
        return self.next_state


class FakeFiles(object):
    def __init__(self) -> None:
        self.files: dict[StepID, tuple[ResponseFile, ...]] = {}

    def get_files(self, usage_id: UsageID, step_id: StepID) -> tuple[ResponseFile, ...]:
        return self.files.get(step_id, ())


class MachineHarness(object):
    """Bundles an attempt with fake collaborators and builds machines over it"""

    def __init__(self, max_mark: decimal.Decimal = decimal.Decimal(10)) -> None:
        self.records = FakeRecords()
        self.dispatcher = FakeDispatcher(self.records)
        self.files = FakeFiles()
        self.question = ProgrammingTaskQuestion()
        self.score_policy = ScorePolicy.Clamp
        attempt_id = AttemptID()
        self.attempt = Attempt(
            attempt_id=attempt_id,
            usage_id=UsageID(),
            slot=1,
            max_mark=max_mark,
            steps=(Step(step_id=StepID(), attempt_id=attempt_id, sequence=0, state=InteractionState.Todo),),
        )

    def machine(self, attempt: Attempt | None = None) -> InteractionStateMachine:
        return InteractionStateMachine(
            attempt or self.attempt,
            question=self.question,
            records=self.records,
            dispatcher=self.dispatcher,
            files=self.files,
            score_policy=self.score_policy,
        )

    def push(
        self,
        state: InteractionState,
        *,
        event: Event | None = None,
        response: Response | None = None,
        fraction: decimal.Decimal | None = None,
        files: tuple[ResponseFile, ...] = (),
    ) -> Step:
        """Append a kept step to the attempt directly"""
        step = Step(
            step_id=StepID(),
            attempt_id=self.attempt.attempt_id,
            sequence=len(self.attempt.steps),
            event=event,
            response=response or {},
            files=files,
            state=state,
            fraction=fraction,
        )
        self.attempt = self.attempt.with_step(step)
        return step

    def job(self, attempt_id: AttemptID | None = None) -> GradingJobID:
        """Queue a job for this attempt, or for another one named by `attempt_id`"""
        job_id = GradingJobID()
        self.records.jobs[job_id] = attempt_id or self.attempt.attempt_id
        return job_id


@pytest.fixture
def harness() -> MachineHarness:
    return MachineHarness()
