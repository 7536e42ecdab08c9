__all__ = [
    "ActionDescriber",
    "AttemptNotFoundError",
    "BaseOperations",
    "BehaviourError",
    "Decision",
    "DefaultBaseOperations",
    "DraftFileSaver",
    "FileSaver",
    "FileStore",
    "GradingDispatcher",
    "InteractionStateMachine",
    "ManualGradingError",
    "MarkOutOfRangeError",
    "PendingStep",
    "Question",
    "RecordStore",
    "ScoreOutOfRangeError",
    "replay",
]

from .base import BaseOperations, DefaultBaseOperations
from .collaborator import DraftFileSaver, FileSaver, FileStore, GradingDispatcher, Question, RecordStore
from .decision import Decision
from .describe import ActionDescriber
from .errors import AttemptNotFoundError, BehaviourError, ManualGradingError, MarkOutOfRangeError, ScoreOutOfRangeError
from .machine import InteractionStateMachine
from .pending import PendingStep
from .replay import replay
