from __future__ import annotations

import decimal
import enum
import pathlib
import typing as t

import click
import pydantic as p
from click import *  # noqa: F401, F403 # pyright: ignore [reportWildcardImportFromLibrary]

from gradeflow.model.id import parse_key, ShortUUIDKey

# Commands import this module in place of click, so the param types below sit
# alongside the usual decorators.


class EnumType(click.Choice):
    """Choice among an enum's values, converted to the enum member"""

    def __init__(self, enum_type: type[enum.Enum]):
        self.enum_type = enum_type
        super().__init__([str(e.value) for e in enum_type])
        self.name = enum_type.__name__

    def convert(self, value: t.Any, param: click.Parameter | None, ctx: click.Context | None) -> enum.Enum:
        if isinstance(value, self.enum_type):
            return value
        return self.enum_type(super().convert(value, param, ctx))


class KeyParamType(click.ParamType):
    """Accept a prefixed key, or the bare shortuuid part of one"""

    def __init__(self, key_type: type[ShortUUIDKey]):
        self.key_type = key_type
        self.name = key_type.__name__

    def convert(self, value: t.Any, param: click.Parameter | None, ctx: click.Context | None) -> ShortUUIDKey:
        if isinstance(value, self.key_type):
            return value
        try:
            return parse_key(self.key_type, str(value))
        except ValueError as e:
            self.fail(str(e), param, ctx)


class DecimalParamType(click.ParamType):
    name = "decimal"

    def convert(self, value: t.Any, param: click.Parameter | None, ctx: click.Context | None) -> decimal.Decimal:
        if isinstance(value, decimal.Decimal):
            return value
        try:
            return decimal.Decimal(str(value).strip())
        except decimal.InvalidOperation:
            self.fail(f"{value!r} is not a valid decimal number.", param, ctx)


class URIParamType(click.ParamType):
    """A URI, or a local path which is promoted to a `file://` URI.

    Local paths must exist; directories are accepted only with `dir_ok`.
    """

    name = "URI OR PATH"

    def __init__(self, dir_ok: bool = False):
        self.dir_ok = dir_ok

    def convert(self, value: t.Any, param: click.Parameter | None, ctx: click.Context | None) -> p.AnyUrl:
        if isinstance(value, p.AnyUrl):
            return value
        if isinstance(value, str) and "://" in value:
            url = p.AnyUrl(value)
            if url.scheme != "file":
                return url
            value = url.path or ""

        path = pathlib.Path(value).absolute()
        if not path.exists():
            self.fail(f"{value}: no such file or directory", param, ctx)
        if path.is_dir() and not self.dir_ok:
            self.fail(f"{value}: directory not accepted", param, ctx)
        return p.FileUrl(f"file://{path}")
