import logging
import typing as t

TRACE: t.Final = 5


class TraceLogLevelLogger(logging.Logger):
    """Logger with a level below DEBUG for per-event chatter"""

    def trace(self, message: str, *args: t.Any, **kwargs: t.Any) -> None:
        if self.isEnabledFor(TRACE):
            self._log(TRACE, message, args, **kwargs)
