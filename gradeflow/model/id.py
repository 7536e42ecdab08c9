"""Prefixed shortuuid identifiers.

A key reads as `<prefix>$<shortuuid>`, e.g. `attempt$mhvXdrZT4jP5T8vBxuvm75`.
Only the shortuuid part is stored in the database.
"""

from __future__ import annotations

import typing as t

import annotated_types as ant
import pydantic as p
import pydantic_core.core_schema as core_schema
import shortuuid

KeyLength: t.Final = 22


class ShortUUIDKey(str):
    prefix: t.ClassVar[str]
    separator: t.ClassVar[str]

    @p.validate_call
    def __init_subclass__(cls, prefix: t.Annotated[str, ant.MinLen(4)], separator: t.Annotated[str, ant.Len(1)] = "$"):
        super().__init_subclass__()
        cls.prefix = prefix
        cls.separator = separator

    def __new__(cls, s: str | None = None, /, key: str | None = None) -> t.Self:
        """Validate a prefixed key `s`, or wrap a bare `key`, or generate a new key.

        A bare `key` is trusted as-is; it comes back from storage.
        """
        if key is None:
            if s is None:
                key = shortuuid.uuid()
            else:
                key = cls._strip_prefix(s)
        return super().__new__(cls, f"{cls.prefix}{cls.separator}{key}")

    @classmethod
    def _strip_prefix(cls, s: str) -> str:
        head, sep, key = s.partition(cls.separator)
        if head != cls.prefix or not sep:
            raise ValueError(f"invalid {cls.__name__}: key must begin with {cls.prefix}{cls.separator}")
        if len(key) != KeyLength:
            raise ValueError(f"invalid {cls.__name__}: key must have length {KeyLength}")
        alphabet = shortuuid.get_alphabet()
        if not set(key) <= set(alphabet):
            raise ValueError(f"invalid {cls.__name__}: key must comprise only {alphabet}")
        return key

    @classmethod
    def __get_pydantic_core_schema__(cls, src: t.Any, handler: p.GetCoreSchemaHandler) -> core_schema.CoreSchema:
        from_str = core_schema.no_info_after_validator_function(cls, core_schema.str_schema())
        return core_schema.json_or_python_schema(
            json_schema=from_str,
            python_schema=core_schema.union_schema([core_schema.is_instance_schema(cls), from_str]),
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )

    @property
    def key(self) -> str:
        return self[len(self.prefix) + len(self.separator) :]

    def __hash__(self) -> int:
        return str.__hash__(self)

    def __str__(self) -> str:
        return str.__str__(self)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.key}>"


# fmt: off
class UsageID(ShortUUIDKey, prefix="usage"): ...
class AttemptID(ShortUUIDKey, prefix="attempt"): ...
class StepID(ShortUUIDKey, prefix="step"): ...
class GradingJobID(ShortUUIDKey, prefix="gradejob"): ...
class OverrideID(ShortUUIDKey, prefix="regrade"): ...
# fmt: on


TKey = t.TypeVar("TKey", bound=ShortUUIDKey)


def parse_key(key_type: type[TKey], s: str) -> TKey:
    """Accept either a prefixed key or the bare shortuuid part"""
    s = s.strip()
    if s.startswith(key_type.prefix + key_type.separator):
        return key_type(s)
    if len(s) != KeyLength or not set(s) <= set(shortuuid.get_alphabet()):
        raise ValueError(f"invalid {key_type.__name__}: {s!r}")
    return key_type(key=s)
