import enum

from .attempt import Response
from .base import WithTimestamps
from .id import AttemptID, GradingJobID, StepID


class GradingJobStatus(enum.Enum):
    Queued = "queued"
    Completed = "completed"
    Unavailable = "unavailable"


class GradingJob(WithTimestamps):
    job_id: GradingJobID
    attempt_id: AttemptID
    step_id: StepID | None = None

    status: GradingJobStatus = GradingJobStatus.Queued
    response: Response = {}
    filenames: list[str] = []
