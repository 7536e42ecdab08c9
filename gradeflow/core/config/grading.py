import decimal
import typing as t

import pydantic as p

from gradeflow.model import ScorePolicy

from .base import BaseSettings


class GradingSettings(BaseSettings):
    # what to do with grader scores outside the attempt's fraction bounds
    score_policy: ScorePolicy = ScorePolicy.Clamp
    min_fraction: decimal.Decimal = p.Field(default=decimal.Decimal(0), le=0)
    answer_format: t.Literal["text", "files", "either"] = "either"
    summary_width: int = p.Field(default=80, ge=20)
