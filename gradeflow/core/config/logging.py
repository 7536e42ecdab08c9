"""Schema of the `logging` settings section.

The section is handed to `logging.config.dictConfig` as dumped, so field
aliases follow the dictConfig keys (`()` for a formatter factory, `class` for
a handler class).
"""

import pathlib
import typing as t

import pydantic as p

from .base import BaseSettings

LogLevel = t.Literal["NOTSET", "TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class FormatterSettings(BaseSettings):
    """An ExtraFormatter wrapping a colorlog formatter"""

    factory: t.Literal["gradeflow.lib.logging.ExtraFormatter"] = p.Field(alias="()")
    base: str = "colorlog.ColoredFormatter"
    format: str | None = None
    datefmt: str | None = None
    log_colors: dict[str, str] = {}
    no_color: bool = False
    indent: bool | None = None


class StreamHandlerSettings(BaseSettings):
    handler_class: t.Literal["colorlog.StreamHandler"] = p.Field(alias="class")
    formatter: str
    level: LogLevel = "NOTSET"
    stream: str = "ext://sys.stderr"


class FileHandlerSettings(BaseSettings):
    handler_class: t.Literal["logging.handlers.WatchedFileHandler"] = p.Field(alias="class")
    formatter: str
    level: LogLevel = "NOTSET"
    filename: pathlib.Path


HandlerSettings = t.Annotated[StreamHandlerSettings | FileHandlerSettings, p.Field(discriminator="handler_class")]


class LoggerSettings(BaseSettings):
    level: LogLevel = "NOTSET"
    propagate: bool = True
    handlers: list[str] = []


class LoggingSettings(BaseSettings):
    version: t.Literal[1] = 1
    disable_existing_loggers: bool = False
    formatters: dict[str, FormatterSettings]
    handlers: dict[str, HandlerSettings]
    root: LoggerSettings
    loggers: dict[str, LoggerSettings] = {}

    @p.model_validator(mode="after")
    def check_references(self) -> t.Self:
        for name, handler in self.handlers.items():
            if handler.formatter not in self.formatters:
                raise ValueError(f"handler {name!r} uses undefined formatter {handler.formatter!r}")
        for logger in (self.root, *self.loggers.values()):
            if missing := set(logger.handlers) - set(self.handlers):
                raise ValueError(f"undefined handlers {sorted(missing)}")
        return self
