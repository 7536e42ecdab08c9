from __future__ import annotations

from sqlalchemy.orm import Session

from gradeflow.model import Attempt, GradingJobID, GradingJobStatus
from gradeflow.storage import job as job_storage


class TestJobStorage(object):
    def test_create(self, db_session: Session, test_attempt: Attempt) -> None:
        with db_session.begin():
            job = job_storage.create(
                {"attempt_id": test_attempt.attempt_id, "response": {"answer": "x"}, "filenames": ["a.py"]},
                session=db_session,
            )

        assert job.status is GradingJobStatus.Queued
        assert job.response == {"answer": "x"}
        assert job.filenames == ["a.py"]

    def test_exists(self, db_session: Session, test_attempt: Attempt) -> None:
        with db_session.begin():
            job = job_storage.create({"attempt_id": test_attempt.attempt_id}, session=db_session)
            assert job_storage.exists(job.job_id, session=db_session)
            assert not job_storage.exists(GradingJobID(), session=db_session)

    def test_exists_for_attempt(self, db_session: Session, test_attempt: Attempt, attempt_factory) -> None:
        other = attempt_factory()
        with db_session.begin():
            job = job_storage.create({"attempt_id": test_attempt.attempt_id}, session=db_session)
            assert job_storage.exists(job.job_id, attempt_id=test_attempt.attempt_id, session=db_session)
            assert not job_storage.exists(job.job_id, attempt_id=other.attempt_id, session=db_session)

    def test_create_links_step(self, db_session: Session, test_attempt: Attempt) -> None:
        step_id = test_attempt.steps[0].step_id
        with db_session.begin():
            job = job_storage.create({"attempt_id": test_attempt.attempt_id, "step_id": step_id}, session=db_session)
            unlinked = job_storage.create({"attempt_id": test_attempt.attempt_id}, session=db_session)

        assert job.step_id == step_id
        assert unlinked.step_id is None

    def test_update_status(self, db_session: Session, test_attempt: Attempt) -> None:
        with db_session.begin():
            job = job_storage.create({"attempt_id": test_attempt.attempt_id}, session=db_session)
            updated = job_storage.update_status(job.job_id, GradingJobStatus.Completed, session=db_session)
            completed = job_storage.find(status=GradingJobStatus.Completed, session=db_session)

        assert updated is not None
        assert updated.status is GradingJobStatus.Completed
        assert [j.job_id for j in completed] == [job.job_id]

    def test_update_status_of_missing_job(self, db_session: Session) -> None:
        with db_session.begin():
            assert job_storage.update_status(GradingJobID(), GradingJobStatus.Completed, session=db_session) is None

    def test_delete_makes_jobs_stale(self, db_session: Session, test_attempt: Attempt, attempt_factory) -> None:
        other = attempt_factory()
        with db_session.begin():
            first = job_storage.create({"attempt_id": test_attempt.attempt_id}, session=db_session)
            job_storage.create({"attempt_id": test_attempt.attempt_id}, session=db_session)
            kept = job_storage.create({"attempt_id": other.attempt_id}, session=db_session)

            deleted = job_storage.delete(attempt_id=test_attempt.attempt_id, session=db_session)

            assert deleted == 2
            assert not job_storage.exists(first.job_id, session=db_session)
            assert job_storage.exists(kept.job_id, session=db_session)
