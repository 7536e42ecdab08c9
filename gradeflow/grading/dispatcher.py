from __future__ import annotations

import logging
import typing as t

from gradeflow.model import Attempt, InteractionState, Response, ResponseFile, StepID
from gradeflow.storage import job as job_storage
from gradeflow.storage import Session

logger = logging.getLogger(__name__)


class JobGradingDispatcher(object):
    """Queue responses for an external grader as grading job records.

    The grader picks up queued jobs out of band and reports back with a
    grading-result or grader-unavailable event naming the job.
    """

    def __init__(self, session: Session):
        self.session = session

    def submit(
        self, attempt: Attempt, response: Response, files: t.Sequence[ResponseFile], *, step_id: StepID
    ) -> InteractionState:
        job = job_storage.create(
            {
                "attempt_id": attempt.attempt_id,
                "step_id": step_id,
                "response": dict(response),
                "filenames": [f.filename for f in files],
            },
            session=self.session,
        )
        logger.info(
            "queued grading job",
            extra={
                "attempt_id": str(attempt.attempt_id),
                "job_id": str(job.job_id),
                "step_id": str(step_id),
                "files": len(files),
            },
        )
        return InteractionState.NeedsGrading
