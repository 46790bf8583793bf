"""Execution of a single step.

This module defines the mixin that runs one step on behalf of an
execution instance: it adjusts the scope stack, runs the payload under a
guard, classifies the outcome, records it through the Tree, and decides
whether the instance must pause.

The same `execute` method serves the main loop and the hook dispatcher,
so hooks observe breakpoints and the one-shot debugging requests exactly
like ordinary steps.
"""

import logging
from typing import TYPE_CHECKING

from branchrun.context import StepContext
from branchrun.errors import BranchHookFault, StepFault
from branchrun.names import ERROR, SUCCESSFUL, canonicalize

from .outcome import Outcome, classify

if TYPE_CHECKING:
    from collections.abc import Callable

if TYPE_CHECKING:
    from branchrun.contracts import Runner, Tree
    from branchrun.schema import Assignment, Branch, Step, StepPayload
    from branchrun.settings import RunSettings
    from branchrun.values import RuntimeValue

    from .scope import ScopeStack

logger = logging.getLogger(__name__)

#: Replacement for the payload of browser directive steps.
type BrowserExecutor = Callable[[StepPayload, StepContext], RuntimeValue]


class StepExecutorMixin:
    """Mixin running single steps against the state of an instance.

    Implementers provide the collaborators, the variable bags, and the
    position attributes declared below. The mixin reads and updates them
    but never owns their lifecycle.

    Attributes:
        exec_in_browser: In-browser execution path for steps whose text
            is the browser directive. Injected at run time by a setup
            hook, `None` until then.
    """

    runner: 'Runner'
    tree: 'Tree'
    settings: 'RunSettings'

    paused: bool

    persistent: dict[str, 'RuntimeValue']
    contextual: dict[str, 'RuntimeValue']
    scope: 'ScopeStack'

    exec_in_browser: BrowserExecutor | None

    _active_branch: 'Branch | None'
    _active_step: 'Step | None'
    _previous_depth: int | None
    _hook_depth: int
    _step_hook_depth: int

    log: 'Callable[[str], None]'
    run_step_hooks: 'Callable[[Branch], None]'

    def execute(self, step: 'Step') -> Outcome | None:
        """Execute a single step.

        Breakpoint steps only pause the instance. Other steps adjust the
        scope, run, get classified and recorded. Unless the instance
        pauses on this failure, the status is exposed as `successful`
        and `error` local variables and step hooks run. Finally the
        report is refreshed and a single step request is honoured.

        Steps of step hooks do not dispatch step hooks themselves. Steps
        of branch hooks do, like ordinary steps.

        Steps without a payload are still classified and recorded: a plain
        one passes, an expect-failure one is an unexpected pass.

        Args:
            step: Step to execute.

        Returns:
            The classified outcome, or `None` for breakpoint steps.
        """
        if step.is_debug:
            logger.info('Paused on breakpoint %s', self._describe(step))
            self.paused = True
            return None

        self.scope.adjust(self._previous_depth, step.depth)
        self._previous_depth = step.depth

        logger.debug('Executing step %s', self._describe(step))

        context = self.make_context()
        outcome = classify(step, self.run_payload(step, context))

        self.record(outcome)

        if outcome.failed and self.runner.consume_pause_on_failure():
            logger.info('Paused on failure of step %s', self._describe(step))
            self.paused = True
            return outcome

        if not self._step_hook_depth:
            self.expose_status(outcome.passed, outcome.fault)
            if self._active_branch is not None:
                self.run_step_hooks(self._active_branch)

        self.refresh_report()

        if self.runner.consume_single_step():
            logger.info('Paused after single step %s', self._describe(step))
            self.paused = True

        return outcome

    def make_context(self) -> StepContext:
        """Build the context handed to payloads of the active frame."""
        return StepContext(
            persistent=self.persistent,
            contextual=self.contextual,
            local=self.scope.local,
            log=self.log,
            instance=self,  # type: ignore[arg-type]
        )

    def run_payload(self, step: 'Step', context: StepContext) -> StepFault | None:
        """Run the assignments and the payload of a step under a guard.

        Args:
            step: Step to run.
            context: Context handed to the payload.

        Returns:
            The fault raised while running, located at the step, or
            `None` if nothing was raised.
        """
        try:
            if not step.is_function_call:
                for assignment in step.assignments:
                    self.assign(assignment, context.variables.resolve(assignment.value), context)

            if step.payload is None:
                return None

            if canonicalize(step.text) == self.settings.browser_directive:
                result = self.run_in_browser(step.payload, context)
            else:
                result = step.payload(context)

            if step.is_function_call and len(step.assignments) == 1:
                self.assign(step.assignments[0], result, context)

        except StepFault as fault:
            return fault.stamp(
                step.filename,
                step.line_number,
                text=step.text,
                variables=dict(context.variables),
            )

        except Exception as error:  # noqa: BLE001
            fault = StepFault.from_exception(
                error,
                filename=step.filename,
                line_number=step.line_number,
            )
            return fault.stamp(
                step.filename,
                step.line_number,
                text=step.text,
                variables=dict(context.variables),
            )

        return None

    def run_in_browser(self, payload: 'StepPayload',
                       context: StepContext) -> 'RuntimeValue':
        """Dispatch a payload to the injected in-browser execution path.

        Raises:
            StepFault: If no in-browser execution path was injected.
        """
        if self.exec_in_browser is None:
            raise StepFault('Browser execution is not available')

        return self.exec_in_browser(payload, context)

    @staticmethod
    def assign(assignment: 'Assignment', value: 'RuntimeValue',
               context: StepContext) -> None:
        """Store a value into the bag selected by an assignment."""
        if assignment.is_local:
            context.local[assignment.name] = value
        else:
            context.contextual[assignment.name] = value

    def record(self, outcome: Outcome) -> None:
        """Record an outcome through the Tree.

        The outcome is recorded on the active step, which for a step hook
        is the hooked step; hooks only record failures so that a passing
        hook never overwrites the result of the hooked step. Without an
        active step, a branch hook is running: a failure is then attached
        to the active branch, which is marked failed.

        Args:
            outcome: Classified outcome of the executed step.
        """
        branch = self._active_branch
        if branch is None:
            return

        if self._hook_depth and not outcome.failed:
            return

        if self._active_step is not None:
            self.tree.mark_step(
                branch,
                self._active_step,
                passed=outcome.passed,
                as_expected=outcome.as_expected,
                fault=outcome.fault,
                fail_branch_now=outcome.fail_branch_now,
            )
        elif outcome.failed and outcome.fault is not None:
            branch.fault = BranchHookFault.from_fault(outcome.fault)
            self.tree.mark_branch(branch, False)

    def expose_status(self, passed: bool | None, fault: StepFault | None) -> None:
        """Publish a status as `successful` and `error` local variables."""
        self.scope.local[SUCCESSFUL] = passed
        self.scope.local[ERROR] = fault

    def refresh_report(self) -> None:
        """Ask the Reporter to refresh the live report without waiting on it."""
        try:
            self.runner.reporter.generate_report()
        except Exception:  # noqa: BLE001
            logger.warning('Report refresh failed', exc_info=True)

    @staticmethod
    def _describe(step: 'Step') -> str:
        """Short human-readable step reference for log records."""
        return f'{step.text.strip()!r} ({step.filename or "<unknown file>"}:{step.line_number})'
