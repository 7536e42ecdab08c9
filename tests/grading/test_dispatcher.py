from __future__ import annotations

from sqlalchemy.orm import Session

from gradeflow.grading import JobGradingDispatcher
from gradeflow.model import Attempt, GradingJobStatus, InteractionState, ResponseFile
from gradeflow.storage import job as job_storage


class TestJobGradingDispatcher(object):
    def test_submit_queues_job(self, db_session: Session, test_attempt: Attempt) -> None:
        files = [ResponseFile(filename="main.py", content=b"print(42)")]
        with db_session.begin():
            state = JobGradingDispatcher(db_session).submit(
                test_attempt, {"answer": "print(42)"}, files, step_id=test_attempt.steps[0].step_id
            )
            (job,) = job_storage.find(attempt_id=test_attempt.attempt_id, session=db_session)

        assert state is InteractionState.NeedsGrading
        assert job.status is GradingJobStatus.Queued
        assert job.response == {"answer": "print(42)"}
        assert job.filenames == ["main.py"]
        assert job.step_id == test_attempt.steps[0].step_id
