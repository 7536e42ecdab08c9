import datetime
import typing as t

import pydantic as p


class BaseModel(p.BaseModel):
    """Models dump by alias unless told otherwise.

    Settings models rely on this: logging config keys such as `()` and
    `class` are only valid as aliases.
    """

    def model_dump(self, *, by_alias: bool | None = True, **kwargs: t.Any) -> dict[str, t.Any]:
        return super().model_dump(by_alias=by_alias, **kwargs)


class FrozenModel(BaseModel):
    """Records which are immutable once they have been persisted"""

    model_config = p.ConfigDict(frozen=True)


class WithCtime(BaseModel):
    create_time: datetime.datetime | None = None


class WithTimestamps(WithCtime):
    update_time: datetime.datetime | None = None
