__all__ = [
    "BootConfiguration",
    "di",
    "GradeflowContainer",
    "LoggingProvider",
    "Settings",
    "Secrets",
]


from . import di
from .config import Secrets, Settings
from .container import BootConfiguration, GradeflowContainer
from .provider import LoggingProvider
