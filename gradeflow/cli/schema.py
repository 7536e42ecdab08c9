"""Alembic schema migrations for the persistent store."""

from __future__ import annotations

import alembic.command
import alembic.config

import gradeflow.lib.cli as click
from gradeflow.core import di


@di.inject
def alembic_config(
    conf: alembic.config.Config = di.Provide["storage.persistent.alembic_config"],
) -> alembic.config.Config:
    return conf


@click.group("schema")
def schema():
    """Manage the database schema."""
    ...


@schema.command()
@click.option("--verbose", "-v", is_flag=True, default=False)
def current(verbose: bool):
    """Show the revision the database is at."""
    alembic.command.current(alembic_config(), verbose=verbose)


@schema.command()
@click.option("--verbose", "-v", is_flag=True, default=False)
def history(verbose: bool):
    """List revisions, marking the current one."""
    alembic.command.history(alembic_config(), verbose=verbose, indicate_current=True)


@schema.command()
@click.argument("message")
@click.option("--autogenerate/--empty", default=True, show_default=True, help="Diff the tables against the database")
def generate(message: str, autogenerate: bool):
    """Create a new revision."""
    alembic.command.revision(alembic_config(), message, autogenerate=autogenerate)


@schema.command()
@click.argument("revision", default="head")
@click.option("--sql", is_flag=True, default=False, help="Print the SQL instead of running it")
def up(revision: str, sql: bool):
    """Upgrade to REVISION (default: head)."""
    alembic.command.upgrade(alembic_config(), revision, sql=sql)


@schema.command()
@click.argument("revision")
@click.option("--sql", is_flag=True, default=False, help="Print the SQL instead of running it")
def down(revision: str, sql: bool):
    """Downgrade to REVISION."""
    alembic.command.downgrade(alembic_config(), revision, sql=sql)


@schema.command()
@click.argument("revision")
def stamp(revision: str):
    """Record REVISION as current without running migrations."""
    alembic.command.stamp(alembic_config(), revision)
