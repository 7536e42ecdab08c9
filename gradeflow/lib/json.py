"""JSON encoding for values stored in JSON columns and written to logs.

Step events and responses are dumped through pydantic first, so the encoder
only has to cope with the odd Decimal, key or enum left in a plain dict.
"""

from __future__ import annotations

import base64
import datetime
import decimal
import enum
import functools
import json as pyjson
import pathlib
import typing as t

JSONValue = str | int | float | bool | None | list["JSONValue"] | dict[str, "JSONValue"]
Encoder = t.Callable[[t.Any], JSONValue]


class JSONEncoder(pyjson.JSONEncoder):
    """Encoder for the non-JSON types which show up in stored and logged data.

    Subclasses extend `encoders`; lookups follow the MRO of the value's type,
    so an entry for `enum.Enum` covers every enum.
    """

    encoders: t.ClassVar[dict[type, Encoder]] = {
        bytes: lambda b: base64.b64encode(b).decode("ascii"),
        datetime.date: lambda d: d.isoformat(),
        decimal.Decimal: str,
        enum.Enum: lambda e: e.value,
        pathlib.PurePath: str,
        frozenset: sorted,
        set: sorted,
    }

    def default(self, o: t.Any) -> JSONValue:
        if hasattr(o, "model_dump"):
            return o.model_dump(mode="json")
        for tp in type(o).__mro__:
            if (encoder := self.encoders.get(tp)) is not None:
                return encoder(o)
        return super().default(o)


dumps = functools.partial(pyjson.dumps, cls=JSONEncoder)
loads = pyjson.loads
