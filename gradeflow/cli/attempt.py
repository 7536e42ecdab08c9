"""CLI commands for driving attempts through their interaction states."""

from __future__ import annotations

import decimal
import mimetypes
import pathlib

import jinja2
from sqlalchemy.orm import Session

import gradeflow.behaviour.runner as runner
import gradeflow.lib.cli as click
from gradeflow.behaviour import ActionDescriber, Decision, DraftFileSaver
from gradeflow.core import di
from gradeflow.model import Attempt, AttemptID, CommentEvent, Event, FinishEvent, GraderUnavailableEvent, \
    GradingJobID, GradingResultEvent, ResponseFile, SaveEvent, SubmitEvent, UsageID
from gradeflow.storage import attempt as attempt_storage
from gradeflow.storage import job as job_storage
from gradeflow.storage.attempt import AttemptCreateParams

AttemptArgument = click.argument("attempt_id", type=click.KeyParamType(AttemptID))
FileOption = click.option(
    "--file",
    "-f",
    "files",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=pathlib.Path),
    help="File to upload with the response, may be repeated",
)


@click.group("attempt")
def attempt():
    """Start attempts and feed them events."""
    ...


@attempt.command("start")
@click.option("--max-mark", "-m", type=click.DecimalParamType(), required=True, help="Marks available")
@click.option("--min-fraction", type=click.DecimalParamType(), help="Lowest fraction a grade may take")
@click.option("--usage", "usage_id", type=click.KeyParamType(UsageID), help="Usage to start the attempt in")
@click.option("--slot", type=int, default=1, show_default=True)
@di.inject
def attempt_start(
    max_mark: decimal.Decimal,
    min_fraction: decimal.Decimal | None,
    usage_id: UsageID | None,
    slot: int,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Start a new attempt."""
    params: AttemptCreateParams = {"max_mark": max_mark, "slot": slot}
    if min_fraction is not None:
        params["min_fraction"] = min_fraction
    if usage_id is not None:
        params["usage_id"] = usage_id

    with session:
        started = runner.start_attempt(params, session=session)
    click.echo(started.attempt_id)


@attempt.command("show")
@AttemptArgument
@di.inject
def attempt_show(
    attempt_id: AttemptID,
    session: Session = di.Provide["storage.persistent.session"],
    env: jinja2.Environment = di.Provide["template.text"],
) -> None:
    """Show an attempt's state, history and grading jobs."""
    with session, session.begin():
        found = attempt_storage.get(attempt_id, session=session)
        if found is None:
            raise click.ClickException(f"attempt {attempt_id} not found")
        jobs = job_storage.find(attempt_id=attempt_id, session=session)

    describer = ActionDescriber(env)
    _echo_attempt(found, describer)
    for step, action, state in describer.history(found):
        click.echo(f"  {step.sequence:>3}  {action:<48}  {state}")
    if jobs:
        click.echo("grading jobs:")
    for job in jobs:
        click.echo(f"  {job.job_id}  {job.status.value}")


@attempt.command("save")
@AttemptArgument
@click.option("--answer", "-a", help="Inline answer text")
@FileOption
def attempt_save(attempt_id: AttemptID, answer: str | None, files: tuple[pathlib.Path, ...]) -> None:
    """Save a response without submitting it."""
    _process(attempt_id, SaveEvent(), answer=answer, files=files)


@attempt.command("submit")
@AttemptArgument
@click.option("--answer", "-a", help="Inline answer text")
@FileOption
def attempt_submit(attempt_id: AttemptID, answer: str | None, files: tuple[pathlib.Path, ...]) -> None:
    """Submit a response for grading."""
    _process(attempt_id, SubmitEvent(), answer=answer, files=files)


@attempt.command("finish")
@AttemptArgument
def attempt_finish(attempt_id: AttemptID) -> None:
    """Finish the attempt, grading the last response if there is one."""
    _process(attempt_id, FinishEvent())


@attempt.command("result")
@AttemptArgument
@click.argument("job_id", type=click.KeyParamType(GradingJobID))
@click.argument("score", type=click.DecimalParamType())
@click.option("--feedback", help="Grader feedback to record with the result")
def attempt_result(attempt_id: AttemptID, job_id: GradingJobID, score: decimal.Decimal, feedback: str | None) -> None:
    """Deliver a grading result for a grading job."""
    response = {"feedback": feedback} if feedback else {}
    _process(attempt_id, GradingResultEvent(job_id=job_id, score=score, feedback=feedback), response=response)


@attempt.command("unavailable")
@AttemptArgument
@click.argument("job_id", type=click.KeyParamType(GradingJobID))
@click.option("--reason", help="Why the grader could not grade the response")
def attempt_unavailable(attempt_id: AttemptID, job_id: GradingJobID, reason: str | None) -> None:
    """Report that the grader could not grade a grading job."""
    _process(attempt_id, GraderUnavailableEvent(job_id=job_id, reason=reason))


@attempt.command("comment")
@AttemptArgument
@click.option("--comment", "-c", default="", help="Comment text")
@click.option("--mark", type=click.DecimalParamType(), help="Manual mark")
@click.option("--max-mark", type=click.DecimalParamType(), help="Marks the manual mark is out of")
@click.option("--clear-mark", is_flag=True, default=False, help="Remove any mark")
def attempt_comment(
    attempt_id: AttemptID,
    comment: str,
    mark: decimal.Decimal | None,
    max_mark: decimal.Decimal | None,
    clear_mark: bool,
) -> None:
    """Comment on, and optionally mark, a finished attempt."""
    if clear_mark and mark is not None:
        raise click.UsageError("--mark and --clear-mark are mutually exclusive")
    _process(
        attempt_id,
        CommentEvent(comment=comment, comment_format="plain", mark=mark, max_mark=max_mark, clear_mark=clear_mark),
    )


@attempt.command("regrade")
@AttemptArgument
@click.option("--dry-run", is_flag=True, default=False, help="Record the regrade without changing the attempt")
@di.inject
def attempt_regrade(
    attempt_id: AttemptID,
    dry_run: bool,
    session: Session = di.Provide["storage.persistent.session"],
) -> None:
    """Replay an attempt's history, superseding outstanding grading jobs."""
    with session:
        override = runner.regrade(attempt_id, dry_run=dry_run, session=session)
    click.echo(f"{override.override_id}  {_fmt(override.old_fraction)} -> {_fmt(override.new_fraction)}")


@di.inject
def _process(
    attempt_id: AttemptID,
    event: Event,
    *,
    answer: str | None = None,
    files: tuple[pathlib.Path, ...] = (),
    response: dict[str, str] | None = None,
    session: Session = di.Provide["storage.persistent.session"],
    env: jinja2.Environment = di.Provide["template.text"],
) -> None:
    if response is None:
        response = {"answer": answer} if answer is not None else {}
    file_saver = DraftFileSaver(_read_file(f) for f in files) if files else None

    with session:
        decision, updated = runner.process_event(
            attempt_id, event, response=response, file_saver=file_saver, session=session
        )
    if decision is Decision.Discard:
        click.echo(click.style("discarded", fg="yellow"), err=True)
    _echo_attempt(updated, ActionDescriber(env))


def _read_file(path: pathlib.Path) -> ResponseFile:
    content_type, _ = mimetypes.guess_type(path.name)
    return ResponseFile(
        filename=path.name, content_type=content_type or "application/octet-stream", content=path.read_bytes()
    )


def _echo_attempt(found: Attempt, describer: ActionDescriber) -> None:
    mark = f"{_fmt(found.mark)}/{_fmt(found.max_mark)}" if found.mark is not None else "-"
    click.echo(f"{found.attempt_id}  {describer.state_string(found.state)}  mark: {mark}")


def _fmt(d: decimal.Decimal | None) -> str:
    return f"{d.normalize():f}" if d is not None else "-"
