from __future__ import annotations

import importlib
import sys
import threading
import traceback
import types
import typing as t
from pathlib import Path

import pydantic as p

import gradeflow
import gradeflow.lib.cli as click
from gradeflow.behaviour import BehaviourError
from gradeflow.core import GradeflowContainer
from gradeflow.model import DeploymentEnvironment

_GradeflowRoot = Path(gradeflow.__file__).resolve().parents[1]

# command modules are imported lazily; boot wires whichever were loaded
_loaded: list[types.ModuleType] = []


class GradeflowMultiCommand(click.Group):
    commands_available: t.ClassVar[tuple[str, ...]] = ("attempt", "schema")

    def list_commands(self, ctx: click.Context) -> list[str]:
        return list(self.commands_available)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        if cmd_name not in self.commands_available:
            return None
        mod = importlib.import_module(f"gradeflow.cli.{cmd_name}")
        _loaded.append(mod)
        return getattr(mod, cmd_name)


@click.group(cls=GradeflowMultiCommand)
@click.option("-E", "--env", default=DeploymentEnvironment.Local, type=click.EnumType(DeploymentEnvironment))
@click.option("-c", "--config-root", default=_GradeflowRoot / "config", type=click.URIParamType(dir_ok=True))
@click.option("-s", "--secrets-path", default=None, type=click.URIParamType(dir_ok=True))
@click.option(
    "-o",
    "--override",
    multiple=True,
    help="dotted settings path and value to override config with, e.g. -o grading.score_policy=reject",
)
@click.option("-D", "--debug", is_flag=True, default=False)
@click.version_option(gradeflow.__version__)
@click.pass_obj
def main(
    ct: GradeflowContainer,
    env: DeploymentEnvironment,
    config_root: p.FileUrl,
    secrets_path: p.AnyUrl | None,
    override: tuple[str, ...],
    debug: bool,
):
    """Drive graded attempts through their interaction states."""
    GradeflowContainer.boot(
        ct,
        debug=debug,
        env=env,
        config_root=config_root,
        secrets_path=secrets_path,
        override=override,
        wiring=tuple(_loaded),
    )


def execute_command(*argv: str) -> t.NoReturn:
    threading.current_thread().name = "gradeflow-0"
    prog, *args = argv or sys.argv
    container = GradeflowContainer()

    code = 0
    try:
        with main.make_context(Path(prog).name, args=args) as ctx:
            ctx.obj = container
            main.invoke(ctx)
    except click.exceptions.Exit as e:
        code = e.exit_code
    except (EOFError, KeyboardInterrupt, click.Abort):
        click.echo("Aborted!", err=True)
        code = 1
    except click.ClickException as e:
        e.show()
        code = e.exit_code
    except BehaviourError as e:
        click.echo(click.style("REJECTED ", fg="yellow") + str(e), err=True)
        code = 2
    except Exception as e:
        click.echo(click.style("ERROR ", fg="red") + str(e), err=True)
        if "-D" in args or "--debug" in args:
            traceback.print_exc()
        code = 1
    finally:
        container.shutdown_resources()
    sys.exit(code)


def run() -> None:
    execute_command(*sys.argv)


if __name__ == "__main__":
    run()
