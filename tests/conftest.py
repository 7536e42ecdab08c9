"""Pytest fixtures for gradeflow integration tests.

The container is booted once per session in the Test environment, which
points the persistent storage at an in-memory SQLite database. Tables are
created from the table metadata. Each test runs within a transaction that is
rolled back afterwards.

Usage:
    def test_submit(db_session: Session, attempt_factory):
        attempt = attempt_factory(max_mark=Decimal(10))
        ...
"""

from __future__ import annotations

import decimal
import os
import typing as t
from pathlib import Path

import jinja2
import pydantic as p
import pytest
from sqlalchemy.orm import Session

import gradeflow
from gradeflow.core import GradeflowContainer
from gradeflow.model import Attempt, DeploymentEnvironment, UsageID
from gradeflow.storage.table import metadata


@pytest.fixture(scope="session")
def container() -> t.Generator[GradeflowContainer]:
    """Boot the DI container for the test session."""
    ct = GradeflowContainer()
    root = Path(os.path.dirname(gradeflow.__file__)).parent

    GradeflowContainer.boot(
        ct,
        debug=True,
        env=DeploymentEnvironment.Test,
        config_root=p.FileUrl(f"file://{root}/config"),
        override=(),
    )

    engine = ct.storage().persistent().engine()
    metadata.create_all(engine)

    yield ct

    metadata.drop_all(engine)
    ct.shutdown_resources()


@pytest.fixture
def db_session(container: GradeflowContainer) -> t.Generator[Session]:
    """Provide a database session wrapped in a transaction.

    Uses join_transaction_mode="create_savepoint" so that session.begin()
    creates savepoints instead of failing when already in a transaction,
    which lets code under test manage its own transactions while the test
    still rolls everything back at the end.
    """
    engine = container.storage().persistent().engine()

    connection = engine.connect()
    transaction = connection.begin()

    session = Session(
        bind=connection,
        autobegin=False,
        join_transaction_mode="create_savepoint",
    )

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def text_env(container: GradeflowContainer) -> jinja2.Environment:
    return container.template().text()


@pytest.fixture
def attempt_factory(db_session: Session) -> t.Callable[..., Attempt]:
    """Factory fixture for starting attempts.

    Attempts are started through the runner, so each has its initial
    in-progress step.
    """
    from gradeflow.behaviour import runner

    def create_attempt(
        max_mark: decimal.Decimal = decimal.Decimal(10),
        usage_id: UsageID | None = None,
        slot: int = 1,
        min_fraction: decimal.Decimal = decimal.Decimal(0),
    ) -> Attempt:
        return runner.start_attempt(
            {
                "max_mark": max_mark,
                "usage_id": usage_id or UsageID(),
                "slot": slot,
                "min_fraction": min_fraction,
            },
            session=db_session,
        )

    return create_attempt


@pytest.fixture
def test_attempt(attempt_factory: t.Callable[..., Attempt]) -> Attempt:
    return attempt_factory()
