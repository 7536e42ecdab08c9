from __future__ import annotations

import decimal
import typing as t

from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Callable, Configuration, Object, Provider

from gradeflow.behaviour.collaborator import GradingDispatcher, Question
from gradeflow.grading import JobGradingDispatcher, ProgrammingTaskQuestion
from gradeflow.model import Attempt
from gradeflow.storage import Session


def provide_question_factory(
    answer_format: t.Literal["text", "files", "either"], summary_width: int
) -> t.Callable[[Attempt], Question]:
    def factory(attempt: Attempt) -> Question:
        return ProgrammingTaskQuestion(
            min_fraction=decimal.Decimal(attempt.min_fraction),
            answer_format=answer_format,
            summary_width=summary_width,
        )

    return factory


class GradingContainer(DeclarativeContainer):
    config = Configuration(strict=True)

    question_factory: Provider[t.Callable[[Attempt], Question]] = Callable(
        provide_question_factory,
        answer_format=config.answer_format,
        summary_width=config.summary_width.as_int(),
    )
    dispatcher_factory: Provider[t.Callable[[Session], GradingDispatcher]] = Object(JobGradingDispatcher)
