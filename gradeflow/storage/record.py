"""SQL-backed collaborators for the interaction state machine.

Both adapters read through the session of the enclosing unit of work, so
existence checks see jobs deleted earlier in the same transaction.
"""

from __future__ import annotations

from gradeflow.model import AttemptID, GradingJobID, RegradeOverride, ResponseFile, StepID, UsageID

from . import file as file_storage
from . import job as job_storage
from . import regrade as regrade_storage
from . import Session
from . import step as step_storage


class SQLRecordStore(object):
    def __init__(self, session: Session):
        self.session = session

    def job_exists(self, job_id: GradingJobID, attempt_id: AttemptID) -> bool:
        return job_storage.exists(job_id, attempt_id=attempt_id, session=self.session)

    def is_applied(self, step_id: StepID) -> bool:
        return step_storage.is_applied(step_id, session=self.session)

    def get_override(self, usage_id: UsageID, slot: int) -> RegradeOverride | None:
        return regrade_storage.get(usage_id=usage_id, slot=slot, session=self.session)

    def update_override(self, override: RegradeOverride) -> None:
        regrade_storage.update(override.override_id, {"new_fraction": override.new_fraction}, session=self.session)


class SQLFileStore(object):
    def __init__(self, session: Session):
        self.session = session

    def get_files(self, usage_id: UsageID, step_id: StepID) -> tuple[ResponseFile, ...]:
        return file_storage.find(step_id=step_id, usage_id=usage_id, session=self.session)
