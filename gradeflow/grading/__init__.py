__all__ = [
    "JobGradingDispatcher",
    "ProgrammingTaskQuestion",
]

from .dispatcher import JobGradingDispatcher
from .question import ProgrammingTaskQuestion
