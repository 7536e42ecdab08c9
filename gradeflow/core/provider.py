import inspect
import logging
import logging.config
import typing as t

from .logging import TRACE, TraceLogLevelLogger


class LoggingProvider(object):
    """Configures stdlib logging from the `logging` settings section.

    Provided as a container resource so logging is set up before anything
    which logs is constructed.
    """

    def __init__(self, config: dict[str, t.Any], debug: bool):
        logging.setLoggerClass(TraceLogLevelLogger)
        logging.addLevelName(TRACE, "TRACE")
        logging.config.dictConfig(config)
        self.capture_warnings(debug)

    @staticmethod
    def get_logger(name: str | None = None) -> TraceLogLevelLogger:
        """Logger for `name`, or for the calling module when no name is given"""
        if name is None:
            caller = inspect.currentframe()
            assert caller is not None and caller.f_back is not None
            name = caller.f_back.f_globals["__name__"]
        return t.cast(TraceLogLevelLogger, logging.getLogger(name))

    @staticmethod
    def capture_warnings(capture: bool) -> None:
        logging.captureWarnings(capture)
