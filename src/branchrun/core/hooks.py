"""Dispatch of step-level and branch-level hooks."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

if TYPE_CHECKING:
    from branchrun.schema import Branch, Step

    from .outcome import Outcome


class HookDispatcherMixin:
    """Mixin running hook branches through the step executor.

    Every step of every hook branch runs in order, even once a hook has
    requested a pause: the request takes effect at the next boundary of
    the main sequence.
    """

    _hook_depth: int
    _step_hook_depth: int

    execute: 'Callable[[Step], Outcome | None]'

    def run_hooks(self, hooks: 'list[Branch]') -> None:
        """Execute the steps of the given hook branches.

        Args:
            hooks: Hook branches, each a plain sequence of steps.
        """
        self._hook_depth += 1
        try:
            for hook in hooks:
                for step in hook.steps:
                    self.execute(step)
        finally:
            self._hook_depth -= 1

    def run_step_hooks(self, branch: 'Branch') -> None:
        """Execute the after-every-step hooks of a branch.

        Steps of these hooks do not dispatch step hooks again.

        Args:
            branch: Branch owning the hooks.
        """
        self._step_hook_depth += 1
        try:
            self.run_hooks(branch.after_every_step)
        finally:
            self._step_hook_depth -= 1
