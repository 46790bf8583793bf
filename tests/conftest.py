"""Tests configurations and fixtures."""

from typing import TYPE_CHECKING

import pytest

from branchrun.core import RunInstance
from branchrun.settings import RunSettings
from tests.examples.doubles import FakeRunner, FakeTree

if TYPE_CHECKING:
    from collections.abc import Callable

if TYPE_CHECKING:
    from pytest_mock import MockerFixture, MockType

if TYPE_CHECKING:
    from branchrun.schema import Branch


@pytest.fixture
def reporter(mocker: 'MockerFixture') -> 'MockType':
    """Provide a Reporter double recording report refreshes."""
    return mocker.Mock(name='reporter')


@pytest.fixture
def settings() -> RunSettings:
    """Provide settings independent from the process environment.

    Explicit values take precedence over `BRANCHRUN_*` variables, so a
    developer environment can not change the behaviour under test.
    """
    return RunSettings(idle_interval=0.5, browser_directive='Execute in browser')


@pytest.fixture
def make_instance(mocker: 'MockerFixture', reporter: 'MockType',
                  settings: RunSettings) -> 'Callable[..., RunInstance]':
    """Provide a factory of execution instances over a `FakeTree`.

    The returned factory accepts the branches to serve and the number of
    `IDLE` answers the tree gives first. The instance sleeps through a
    mock, available as `instance.sleep`, so idle waits are instant.
    """
    def make(*branches: 'Branch', idle: int = 0) -> RunInstance:
        """Create an instance running the given branches.

        Args:
            branches: Branches served by the tree, in order.
            idle: Number of `IDLE` answers before the first branch.

        Returns:
            A fresh execution instance. Its runner is a `FakeRunner`.
        """
        tree = FakeTree(*branches, idle=idle)
        runner = FakeRunner(tree, reporter)

        return RunInstance(runner, settings=settings, sleep=mocker.Mock(name='sleep'))

    return make
