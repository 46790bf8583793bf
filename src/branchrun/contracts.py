"""Interfaces of the collaborators driving and observing the core.

The Tree serves branches and steps and records results, the Runner owns
the one-shot debugging flags and the persistent variables, and the
Reporter keeps a live view of the run. Only the operations listed here
are used by the execution core.
"""

from enum import Enum
from typing import TYPE_CHECKING, Any, Final, Literal, Protocol, runtime_checkable

if TYPE_CHECKING:
    from branchrun.errors import StepFault
    from branchrun.schema import Branch, Step
    from branchrun.values import RuntimeValue


class Idle(Enum):
    """Token returned by the Tree when nothing is runnable yet."""

    IDLE = 'idle'

    def __repr__(self) -> str:
        """String representation."""
        return 'IDLE'


#: Nothing is runnable yet: wait and poll the Tree again.
IDLE: Final = Idle.IDLE


@runtime_checkable
class Reporter(Protocol):
    """Live report generator."""

    def generate_report(self) -> Any:  # noqa: ANN401
        """Refresh the report. The result is not interpreted."""
        ...  # pragma: no cover


@runtime_checkable
class Tree(Protocol):
    """Source of branches and steps, and sink of their results.

    Claiming operations must be exclusive across concurrently calling
    instances: no two instances may claim the same branch or step.
    """

    def next_branch(self) -> 'Branch | Literal[Idle.IDLE] | None':
        """Claim the next branch, `IDLE`, or `None` once the run is over."""
        ...  # pragma: no cover

    def next_step(self, branch: 'Branch') -> 'Step | None':
        """Claim the next step of a branch, or `None` once it is exhausted."""
        ...  # pragma: no cover

    def mark_step(self, branch: 'Branch', step: 'Step', *,
                  passed: bool, as_expected: bool,
                  fault: 'StepFault | None',
                  fail_branch_now: bool) -> None:
        """Record the result of a step."""
        ...  # pragma: no cover

    def mark_branch(self, branch: 'Branch', passed: bool) -> None:
        """Record the status of a branch."""
        ...  # pragma: no cover

    def serialize(self) -> dict[str, Any]:
        """Return a structured snapshot of the tree."""
        ...  # pragma: no cover


@runtime_checkable
class Runner(Protocol):
    """Owner of the execution instances of a run.

    The one-shot flags are consumed with a single read-and-clear call so
    that concurrent instances can not both observe the same request.
    """

    #: Variables shared by every instance of the run.
    persistent: dict[str, 'RuntimeValue']
    #: Live report of the run.
    reporter: Reporter
    #: Tree executed by the run.
    tree: Tree

    def consume_pause_on_failure(self) -> bool:
        """Return whether pausing on the next failure was requested and clear it."""
        ...  # pragma: no cover

    def consume_single_step(self) -> bool:
        """Return whether a single step was requested and clear it."""
        ...  # pragma: no cover
