"""Tests for gradeflow.behaviour.runner against the test database."""

from __future__ import annotations

import decimal
import typing as t

import pytest
from sqlalchemy.orm import Session

from gradeflow.behaviour import AttemptNotFoundError, Decision, DraftFileSaver, runner
from gradeflow.model import Attempt, AttemptID, CommentEvent, GraderUnavailableEvent, GradingJob, GradingJobStatus, \
    GradingResultEvent, InteractionState, ResponseFile, SaveEvent, SubmitEvent
from gradeflow.storage import attempt as attempt_storage
from gradeflow.storage import job as job_storage
from gradeflow.storage import regrade as regrade_storage
from gradeflow.storage import step as step_storage

D = decimal.Decimal


def reload(session: Session, attempt: Attempt) -> Attempt:
    with session.begin():
        found = attempt_storage.get(attempt.attempt_id, session=session)
    assert found is not None
    return found


def jobs(session: Session, attempt: Attempt) -> tuple[GradingJob, ...]:
    with session.begin():
        return job_storage.find(attempt_id=attempt.attempt_id, session=session)


def submit(session: Session, attempt: Attempt, answer: str = "print(42)") -> GradingJob:
    runner.process_event(attempt.attempt_id, SubmitEvent(), response={"answer": answer}, session=session)
    (job,) = [j for j in jobs(session, attempt) if j.status is GradingJobStatus.Queued]
    return job


class TestStartAttempt(object):
    def test_initial_step(self, db_session: Session, test_attempt: Attempt) -> None:
        assert test_attempt.state is InteractionState.Todo
        assert [s.sequence for s in test_attempt.steps] == [0]
        assert test_attempt.steps[0].event is None

    def test_default_min_fraction(self, db_session: Session) -> None:
        started = runner.start_attempt({"max_mark": D(5)}, session=db_session)
        assert started.min_fraction == D(0)
        assert started.slot == 1


class TestProcessEvent(object):
    """Tests for runner.process_event()."""

    def test_unknown_attempt(self, db_session: Session) -> None:
        with pytest.raises(AttemptNotFoundError):
            runner.process_event(AttemptID(), SubmitEvent(), session=db_session)

    def test_submit_queues_job(self, db_session: Session, test_attempt: Attempt) -> None:
        decision, updated = runner.process_event(
            test_attempt.attempt_id, SubmitEvent(), response={"answer": "print(42)"}, session=db_session
        )

        assert decision is Decision.Keep
        assert updated.state is InteractionState.NeedsGrading
        assert [s.sequence for s in updated.steps] == [0, 1]
        (job,) = jobs(db_session, test_attempt)
        assert job.status is GradingJobStatus.Queued
        assert job.response == {"answer": "print(42)"}
        assert job.step_id == updated.steps[-1].step_id

    def test_result_for_another_attempts_job_is_discarded(
        self, db_session: Session, test_attempt: Attempt, attempt_factory: t.Callable[..., Attempt]
    ) -> None:
        """A job id belonging to a different attempt neither grades nor completes anything."""
        other = attempt_factory()
        submit(db_session, test_attempt)
        foreign = submit(db_session, other)

        decision, unchanged = runner.process_event(
            test_attempt.attempt_id, GradingResultEvent(job_id=foreign.job_id, score=D(10)), session=db_session
        )

        assert decision is Decision.Discard
        assert unchanged.state is InteractionState.NeedsGrading
        assert reload(db_session, test_attempt).state is InteractionState.NeedsGrading
        (still_queued,) = jobs(db_session, other)
        assert still_queued.status is GradingJobStatus.Queued

    def test_submitted_files_are_persisted(self, db_session: Session, test_attempt: Attempt) -> None:
        upload = ResponseFile(filename="main.py", content_type="text/x-python", content=b"print(42)")
        _, updated = runner.process_event(
            test_attempt.attempt_id,
            SubmitEvent(),
            file_saver=DraftFileSaver([upload]),
            session=db_session,
        )

        assert updated.steps[-1].files == (upload,)
        (job,) = jobs(db_session, test_attempt)
        assert job.filenames == ["main.py"]

    def test_grading_result_completes_job(self, db_session: Session, test_attempt: Attempt) -> None:
        job = submit(db_session, test_attempt)

        decision, updated = runner.process_event(
            test_attempt.attempt_id,
            GradingResultEvent(job_id=job.job_id, score=D(7), feedback="3 of 4 tests pass"),
            response={"feedback": "3 of 4 tests pass"},
            session=db_session,
        )

        assert decision is Decision.Keep
        assert updated.state is InteractionState.GradedPartial
        assert updated.fraction == D("0.7")
        assert updated.mark == D(7)
        assert updated.steps[-1].summary == "print(42); feedback: 3 of 4 tests pass"
        (completed,) = jobs(db_session, test_attempt)
        assert completed.status is GradingJobStatus.Completed

    def test_grader_unavailable_marks_job(self, db_session: Session, test_attempt: Attempt) -> None:
        job = submit(db_session, test_attempt)

        _, updated = runner.process_event(
            test_attempt.attempt_id,
            GraderUnavailableEvent(job_id=job.job_id, reason="timeout"),
            session=db_session,
        )

        assert updated.state is InteractionState.NeedsGrading
        assert len(updated.steps) == 3
        (unavailable,) = jobs(db_session, test_attempt)
        assert unavailable.status is GradingJobStatus.Unavailable

    def test_discard_persists_nothing(self, db_session: Session, test_attempt: Attempt) -> None:
        decision, unchanged = runner.process_event(test_attempt.attempt_id, SaveEvent(), session=db_session)

        assert decision is Decision.Discard
        assert unchanged.steps == test_attempt.steps
        assert reload(db_session, test_attempt).steps == test_attempt.steps

    def test_comment_is_marked_applied(self, db_session: Session, test_attempt: Attempt) -> None:
        job = submit(db_session, test_attempt)
        runner.process_event(
            test_attempt.attempt_id, GradingResultEvent(job_id=job.job_id, score=D(7)), session=db_session
        )

        _, updated = runner.process_event(
            test_attempt.attempt_id, CommentEvent(comment="Nearly", mark=D(9)), session=db_session
        )

        assert updated.state is InteractionState.ManGradedPartial
        assert updated.fraction == D("0.9")
        with db_session.begin():
            assert step_storage.is_applied(updated.steps[-1].step_id, session=db_session)


class TestRegrade(object):
    """Tests for runner.regrade()."""

    @pytest.fixture
    def graded(self, db_session: Session, test_attempt: Attempt) -> t.Generator[tuple[Attempt, GradingJob]]:
        job = submit(db_session, test_attempt)
        runner.process_event(
            test_attempt.attempt_id, GradingResultEvent(job_id=job.job_id, score=D(7)), session=db_session
        )
        yield reload(db_session, test_attempt), job

    def test_regrade_supersedes_jobs(self, db_session: Session, graded: tuple[Attempt, GradingJob]) -> None:
        attempt, old_job = graded

        override = runner.regrade(attempt.attempt_id, session=db_session)

        assert override.old_fraction == D("0.7")
        assert override.new_fraction is None
        assert not override.dry_run

        regraded = reload(db_session, attempt)
        assert [s.state for s in regraded.steps] == [InteractionState.Todo, InteractionState.NeedsGrading]
        assert [s.step_id for s in regraded.steps] == [s.step_id for s in attempt.steps[:2]]
        (new_job,) = jobs(db_session, attempt)
        assert new_job.job_id != old_job.job_id

    def test_stale_result_after_regrade(self, db_session: Session, graded: tuple[Attempt, GradingJob]) -> None:
        attempt, old_job = graded
        runner.regrade(attempt.attempt_id, session=db_session)

        decision, _ = runner.process_event(
            attempt.attempt_id, GradingResultEvent(job_id=old_job.job_id, score=D(10)), session=db_session
        )

        assert decision is Decision.Discard
        assert reload(db_session, attempt).state is InteractionState.NeedsGrading

    def test_new_result_updates_override(self, db_session: Session, graded: tuple[Attempt, GradingJob]) -> None:
        attempt, _ = graded
        created = runner.regrade(attempt.attempt_id, session=db_session)
        (new_job,) = jobs(db_session, attempt)

        runner.process_event(
            attempt.attempt_id, GradingResultEvent(job_id=new_job.job_id, score=D(10)), session=db_session
        )

        with db_session.begin():
            override = regrade_storage.get(created.override_id, session=db_session)
        assert override is not None
        assert override.old_fraction == D("0.7")
        assert override.new_fraction == D(1)

    def test_dry_run_leaves_attempt_alone(self, db_session: Session, graded: tuple[Attempt, GradingJob]) -> None:
        attempt, old_job = graded

        override = runner.regrade(attempt.attempt_id, dry_run=True, session=db_session)

        assert override.dry_run
        assert override.old_fraction == D("0.7")
        assert override.new_fraction is None
        assert reload(db_session, attempt).steps == attempt.steps
        (job,) = jobs(db_session, attempt)
        assert job.job_id == old_job.job_id
