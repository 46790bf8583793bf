"""Execution instance driving a tree branch by branch.

An execution instance is the unit of parallelism of a run, comparable to
a thread: it claims branches and steps from the shared Tree, executes
them, and can be paused at any step boundary and resumed later without
losing its position or its variables.
"""

import logging
import time
from enum import StrEnum
from typing import TYPE_CHECKING

from branchrun.contracts import IDLE
from branchrun.errors import ContractError
from branchrun.names import ERROR, SUCCESSFUL
from branchrun.schema import Branch

from .executor import StepExecutorMixin
from .hooks import HookDispatcherMixin
from .scope import ScopeStack

if TYPE_CHECKING:
    from collections.abc import Callable

if TYPE_CHECKING:
    from branchrun.contracts import Runner, Tree
    from branchrun.schema import Step
    from branchrun.settings import RunSettings
    from branchrun.values import RuntimeValue

    from .executor import BrowserExecutor
    from .scope import Frame

logger = logging.getLogger(__name__)

#: Claims the next step of a branch, `None` once it is exhausted.
type StepSource = Callable[[Branch], Step | None]


class RunOutcome(StrEnum):
    """Result of a call to `RunInstance.run`."""

    #: The Tree has nothing left to run.
    COMPLETED = 'completed'
    #: Execution stopped at a step boundary and can be resumed.
    PAUSED = 'paused'


class RunInstance(StepExecutorMixin, HookDispatcherMixin):
    """Running test instance, executing branches served by a Tree.

    The instance keeps three variable bags: `persistent`, shared by every
    instance of the run; `contextual`, private and kept across branches;
    and `local`, the active frame of its scope stack.

    Attributes:
        runner: Runner owning the instance.
        tree: Tree being executed.
        settings: Tunable behaviour.
        paused: Whether execution is currently paused.
        exec_in_browser: In-browser execution path, injected by a setup hook.
    """

    def __init__(self, runner: 'Runner', *,
                 tree: 'Tree | None' = None,
                 settings: 'RunSettings | None' = None,
                 sleep: 'Callable[[float], None]' = time.sleep) -> None:
        """Initialize an execution instance.

        Args:
            runner: Runner owning the instance, providing the one-shot
                debugging requests, the persistent variables and the
                Reporter.
            tree: Tree to execute. Defaults to the runner's tree.
            settings: Tunable behaviour. Read from the environment when
                omitted.
            sleep: Function used to wait while the Tree is idle.
        """
        if settings is None:
            from branchrun.settings import RunSettings  # noqa: PLC0415
            settings = RunSettings()

        self.runner = runner
        self.tree = tree if tree is not None else runner.tree
        self.settings = settings
        self.sleep = sleep

        self.paused = False

        self.persistent: dict[str, 'RuntimeValue'] = runner.persistent
        self.contextual: dict[str, 'RuntimeValue'] = {}
        self.scope = ScopeStack()

        self.exec_in_browser: 'BrowserExecutor | None' = None

        self._active_branch: Branch | None = None
        self._active_step: 'Step | None' = None
        self._resume_branch: Branch | None = None
        self._previous_depth: int | None = None
        self._hook_depth = 0
        self._step_hook_depth = 0

    @property
    def local(self) -> 'Frame':
        """Active scope frame."""
        return self.scope.local

    @property
    def active_branch(self) -> Branch | None:
        """Branch currently being executed."""
        return self._active_branch

    @property
    def active_step(self) -> 'Step | None':
        """Step currently being executed."""
        return self._active_step

    def pause(self) -> None:
        """Request a pause at the next step boundary."""
        logger.info('Pause requested')
        self.paused = True

    def run(self) -> RunOutcome:
        """Execute branches until the Tree is exhausted or a pause occurs.

        Each call resumes from where the previous one stopped: a branch
        interrupted by a pause is finished before a new one is claimed.

        Returns:
            `RunOutcome.COMPLETED` once the Tree has nothing left to run,
            `RunOutcome.PAUSED` if execution stopped at a step boundary.

        Raises:
            ContractError: If the Tree serves an unexpected object.
        """
        self.paused = False

        while True:
            branch = self._resume_branch
            if branch is None:
                claimed = self.tree.next_branch()

                if claimed is None:
                    logger.info('Run completed')
                    return RunOutcome.COMPLETED

                if claimed is IDLE:
                    self.sleep(self.settings.idle_interval)
                    continue

                if not isinstance(claimed, Branch):
                    raise ContractError(f'Tree served {claimed!r} instead of a branch')

                branch = claimed
                self._active_branch = branch
                logger.debug('Claimed branch of %d step(s)', len(branch.steps))

            if self.run_branch(branch) is RunOutcome.PAUSED:
                return RunOutcome.PAUSED

    def run_branch(self, branch: Branch,
                   next_step: StepSource | None = None) -> RunOutcome:
        """Execute the remaining steps of a branch, then its branch hooks.

        Args:
            branch: Active branch.
            next_step: Source of steps. Defaults to claiming them from the Tree.

        Returns:
            `RunOutcome.PAUSED` if a step or a branch hook paused the
            instance, otherwise `RunOutcome.COMPLETED`.
        """
        if next_step is None:
            next_step = self.tree.next_step

        self._resume_branch = branch

        while (step := next_step(branch)) is not None:
            self._active_step = step
            self.execute(step)

            if self.paused:
                return RunOutcome.PAUSED

        self._resume_branch = None
        self._active_step = None

        logger.debug('Branch exhausted, running branch hooks')

        self.expose_status(branch.passed, branch.fault)
        self.run_hooks(branch.after_every_branch)

        if self.paused:
            return RunOutcome.PAUSED

        return RunOutcome.COMPLETED

    def inject_and_run(self, branch: Branch) -> bool:
        """Run an ad hoc branch while paused, then pause again.

        The active branch and step, the scope stack and the depth of the
        previous step are restored afterwards, so execution resumes at
        the original suspension point. Injected steps share the frames of
        the suspension point, but the `successful` and `error` values of
        the suspended frame are put back. Does nothing unless paused.

        Args:
            branch: Branch to run. Its steps are not claimed from the Tree.

        Returns:
            Whether the branch was run.
        """
        if not self.paused:
            return False

        logger.info('Running injected branch of %d step(s)', len(branch.steps))

        saved = (
            self._active_branch,
            self._active_step,
            self._resume_branch,
            self._previous_depth,
        )
        scope = self.scope.snapshot()
        frame = self.scope.local
        status = {name: frame[name] for name in (SUCCESSFUL, ERROR) if name in frame}

        steps = iter(branch.steps)

        self.paused = False
        self._active_branch = branch
        self._active_step = None
        try:
            self.run_branch(branch, next_step=lambda _: next(steps, None))
        finally:
            (
                self._active_branch,
                self._active_step,
                self._resume_branch,
                self._previous_depth,
            ) = saved
            self.scope.restore(scope)
            for name in (SUCCESSFUL, ERROR):
                frame.pop(name, None)
            frame.update(status)
            self.paused = True

        return True

    def log(self, text: str) -> None:
        """Append a line to the active step log, or to the branch log."""
        target: 'Branch | Step | None' = self._active_step
        if target is None:
            target = self._active_branch
        if target is None:
            return

        target.log += f'{text}\n'
