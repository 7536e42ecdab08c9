__all__ = [
    "BootConfiguration",
    "GradeflowContainer",
    "GradingContainer",
    "StorageContainer",
    "TemplateContainer",
]

from .gradeflow import BootConfiguration, GradeflowContainer
from .grading import GradingContainer
from .storage import StorageContainer
from .template import TemplateContainer
