import importlib
import json
import logging
import sys
import typing as t

import pygments
from pygments.formatters import Terminal256Formatter
from pygments.lexers.data import JsonLexer  # pyright: ignore [reportMissingTypeStubs]

from .json import JSONEncoder

# attributes every LogRecord carries; anything else arrived through `extra=`
ReservedKeys = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime", "color_message", "log_color"}


class ExtraFormatter(logging.Formatter):
    """Append a record's `extra` fields to the formatted message as JSON.

    The message itself is formatted by `base`, typically a colorlog
    formatter given by dotted name from the logging config. The JSON is
    highlighted with pygments when stderr is a terminal and colour is on.
    """

    def __init__(
        self,
        base: type[logging.Formatter] | str,
        format: str | None = None,
        datefmt: str | None = None,
        indent: bool | None = None,
        pyg_style: str = "monokai",
        no_color: bool = False,
        **kwargs: t.Any,
    ):
        if isinstance(base, str):
            module, _, name = base.rpartition(".")
            base = t.cast(type[logging.Formatter], getattr(importlib.import_module(module), name))
        self.base = base(format, datefmt=datefmt, no_color=no_color, **kwargs)
        self.indent = 4 if indent else None
        self.highlight = not no_color and sys.stderr.isatty()
        self.highlighter = Terminal256Formatter(style=pyg_style)

    def format(self, record: logging.LogRecord) -> str:
        message = self.base.format(record)
        extra = {k: v for k, v in record.__dict__.items() if k not in ReservedKeys}
        if not extra:
            return message

        js = json.dumps(extra, sort_keys=True, indent=self.indent, cls=JSONEncoder)
        if self.highlight:
            js = pygments.highlight(js, JsonLexer(), self.highlighter).strip()
        return f"{message} {js}"

    def __getattr__(self, name: str) -> t.Any:
        return getattr(self.base, name)
