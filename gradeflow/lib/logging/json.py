import typing as t

from gradeflow.lib.json import Encoder, JSONEncoder as BaseJSONEncoder, JSONValue

# file contents only ever need to be recognisable in a log line
PreviewBytes = 16


def preview_bytes(obj: bytes) -> str:
    head = " ".join(f"{b:02X}" for b in obj[:PreviewBytes])
    more = " ..." if len(obj) > PreviewBytes else ""
    return f"[{len(obj):5}] {head}{more}"


class JSONEncoder(BaseJSONEncoder):
    """Encoder for log extras; anything else unencodable is logged by repr"""

    encoders: t.ClassVar[dict[type, Encoder]] = {**BaseJSONEncoder.encoders, bytes: preview_bytes}

    def default(self, o: t.Any) -> JSONValue:
        try:
            return super().default(o)
        except TypeError:
            return repr(o)
