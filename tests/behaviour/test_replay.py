from __future__ import annotations

import decimal

from gradeflow.behaviour import replay
from gradeflow.model import CommentEvent, GradingResultEvent, InteractionState, ResponseFile, SaveEvent, SubmitEvent

from .conftest import MachineHarness

D = decimal.Decimal


class TestReplay(object):
    """Tests for replay()."""

    def test_attempt_without_steps_is_unchanged(self, harness: MachineHarness) -> None:
        empty = harness.attempt.model_copy(update={"steps": ()})
        assert replay(empty, harness.machine) is empty

    def test_first_step_is_kept_as_is(self, harness: MachineHarness) -> None:
        first = harness.attempt.steps[0]
        replayed = replay(harness.attempt, harness.machine)
        assert replayed.steps == (first,)

    def test_submission_is_dispatched_again(self, harness: MachineHarness) -> None:
        submitted = harness.push(InteractionState.NeedsGrading, event=SubmitEvent(), response={"answer": "x = 1"})

        replayed = replay(harness.attempt, harness.machine)

        assert len(replayed.steps) == 2
        step = replayed.steps[1]
        assert step.step_id == submitted.step_id
        assert step.sequence == 1
        assert step.state is InteractionState.NeedsGrading
        assert harness.dispatcher.submitted == [({"answer": "x = 1"}, ())]

    def test_submission_files_are_read_back_from_storage(self, harness: MachineHarness) -> None:
        upload = ResponseFile(filename="main.py", content=b"print(1)")
        submitted = harness.push(InteractionState.NeedsGrading, event=SubmitEvent(), files=(upload,))
        harness.files.files[submitted.step_id] = (upload,)

        replayed = replay(harness.attempt, harness.machine)

        assert replayed.steps[1].files == (upload,)
        assert harness.dispatcher.submitted == [({}, (upload,))]

    def test_stale_result_is_dropped(self, harness: MachineHarness) -> None:
        """Results of superseded jobs do not survive a regrade."""
        harness.push(InteractionState.NeedsGrading, event=SubmitEvent(), response={"answer": "x = 1"})
        # the job this result answers was deleted when the regrade began
        stale = GradingResultEvent(job_id=harness.job(), score=D(7))
        harness.records.jobs.clear()
        harness.push(InteractionState.GradedPartial, event=stale, fraction=D("0.7"))

        replayed = replay(harness.attempt, harness.machine)

        assert [s.state for s in replayed.steps] == [InteractionState.Todo, InteractionState.NeedsGrading]
        assert replayed.state is InteractionState.NeedsGrading
        assert replayed.fraction is None

    def test_applied_comment_is_dropped(self, harness: MachineHarness) -> None:
        harness.push(InteractionState.NeedsGrading, event=SubmitEvent(), response={"answer": "x = 1"})
        comment = harness.push(InteractionState.ManGradedRight, event=CommentEvent(comment="ok", mark=D(10)))
        harness.records.applied.add(comment.step_id)

        replayed = replay(harness.attempt, harness.machine)

        assert comment.step_id not in {s.step_id for s in replayed.steps}

    def test_saves_are_replayed(self, harness: MachineHarness) -> None:
        harness.push(InteractionState.Todo, event=SaveEvent(), response={"answer": "draft"})

        replayed = replay(harness.attempt, harness.machine)

        assert [s.response for s in replayed.steps] == [{}, {"answer": "draft"}]
        assert replayed.steps[1].summary == "draft"

    def test_original_is_not_modified(self, harness: MachineHarness) -> None:
        harness.push(InteractionState.NeedsGrading, event=SubmitEvent(), response={"answer": "x = 1"})
        before = harness.attempt.steps

        replay(harness.attempt, harness.machine)

        assert harness.attempt.steps == before
