"""Human readable descriptions of kept steps and interaction states."""

from __future__ import annotations

import decimal
import typing as t

import jinja2

from gradeflow.model import Attempt, CommentEvent, FinishEvent, GraderUnavailableEvent, GradingResultEvent, \
    InteractionState, Step, SubmitEvent


def render_template(env: jinja2.Environment, template_name: str, **context: t.Any) -> str:
    template = env.get_template(template_name)
    return template.render(**context).strip()


def format_mark(mark: decimal.Decimal) -> str:
    return f"{mark.normalize():f}"


class ActionDescriber(object):
    def __init__(self, env: jinja2.Environment):
        self.env = env

    def state_string(self, state: InteractionState, show_correctness: bool = True) -> str:
        return render_template(self.env, "behaviour/state.j2", state=state, show_correctness=show_correctness)

    def summarise_action(self, step: Step) -> str:
        match step.event:
            case CommentEvent() as event:
                mark = None
                if event.mark is not None and not event.clear_mark:
                    mark = format_mark(event.mark)
                return render_template(self.env, "behaviour/commented.j2", mark=mark, comment=event.comment)
            case FinishEvent():
                return render_template(
                    self.env, "behaviour/finished.j2", gave_up=step.state is InteractionState.GaveUp
                )
            case SubmitEvent():
                return render_template(self.env, "behaviour/submitted.j2")
            case GradingResultEvent() as event:
                state = self.state_string(step.state)
                return render_template(self.env, "behaviour/graded.j2", state=state, feedback=event.feedback)
            case GraderUnavailableEvent() as event:
                return render_template(self.env, "behaviour/grader_unavailable.j2", reason=event.reason)
            case _:
                return self.summarise_save(step)

    def summarise_save(self, step: Step) -> str:
        if not step.response and not step.files:
            return render_template(self.env, "behaviour/started.j2")
        summary = step.summary or ", ".join(f.filename for f in step.files)
        return render_template(self.env, "behaviour/saved.j2", summary=summary)

    def history(self, attempt: Attempt) -> list[tuple[Step, str, str]]:
        """(step, action summary, state string) for every kept step, oldest first"""
        return [(s, self.summarise_action(s), self.state_string(s.state)) for s in attempt.steps]
