"""Variable bags and the context handed to step payloads.

Payloads never reach into the execution instance for variables. Instead
they receive an explicit `StepContext` exposing the three variable bags
and the log sink of the instance that runs them.
"""

from collections import ChainMap
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from branchrun.values import normalize

if TYPE_CHECKING:
    from collections.abc import Callable

if TYPE_CHECKING:
    from branchrun.core.instance import RunInstance
    from branchrun.values import RuntimeValue, Value


class ContextDict(dict[str, 'RuntimeValue']):
    """Flat view of the variables visible to a step.

    Provides a resolver evaluating deferred assignment values against
    the visible variables.
    """

    def resolve(self, value: Any) -> 'Value':  # noqa: ANN401
        """Resolve a deferred value into a plain value.

        Args:
            value: A deferred value to resolve.

        Returns:
            A fully resolved value or `None`.

        Raises:
            Any exception raised by deferred callables.
        """
        return normalize(value, self)


@dataclass(frozen=True, slots=True)
class StepContext:
    """Capabilities available to a step payload.

    The bags are the live mappings of the running instance: writes made
    by a payload are visible to every later step sharing the same bag.

    Attributes:
        persistent: Variables shared by every instance of the run.
        contextual: Variables private to the instance, kept across branches.
        local: Active scope frame of the instance.
        log: Sink appending a line to the active step or branch log.
        instance: Execution instance running the step.
    """

    persistent: dict[str, 'RuntimeValue']
    contextual: dict[str, 'RuntimeValue']
    local: dict[str, 'RuntimeValue']
    log: 'Callable[[str], None]'
    instance: 'RunInstance'

    @property
    def variables(self) -> ContextDict:
        """Return every visible variable, innermost bag first.

        Local variables shadow contextual ones, which shadow persistent
        ones.
        """
        return ContextDict(ChainMap(self.local, self.contextual, self.persistent))

    def get(self, name: str, default: Any = None) -> 'RuntimeValue':  # noqa: ANN401
        """Look a variable up through all bags, innermost first."""
        return self.variables.get(name, default)
