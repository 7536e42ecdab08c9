__all__ = [
    # Base
    "BaseModel",
    "FrozenModel",
    "WithCtime",
    "WithTimestamps",
    # Enums
    "DeploymentEnvironment",
    "InteractionState",
    "ScorePolicy",
    # ID Types
    "AttemptID",
    "GradingJobID",
    "OverrideID",
    "StepID",
    "UsageID",
    "parse_key",
    # Attempts
    "Attempt",
    "Response",
    "ResponseFile",
    "Step",
    # Events
    "CommentEvent",
    "Event",
    "FinishEvent",
    "GraderUnavailableEvent",
    "GradingResultEvent",
    "SaveEvent",
    "SubmitEvent",
    "load_event",
    # Grading
    "GradingJob",
    "GradingJobStatus",
    # Regrades
    "RegradeOverride",
]

from .attempt import Attempt, Response, ResponseFile, Step
from .base import BaseModel, FrozenModel, WithCtime, WithTimestamps
from .enum import DeploymentEnvironment, ScorePolicy
from .event import CommentEvent, Event, FinishEvent, GraderUnavailableEvent, GradingResultEvent, load_event, \
    SaveEvent, SubmitEvent
from .id import AttemptID, GradingJobID, OverrideID, parse_key, StepID, UsageID
from .job import GradingJob, GradingJobStatus
from .regrade import RegradeOverride
from .state import InteractionState
