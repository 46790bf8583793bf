"""Pass/fail classification of executed steps.

The classification crosses whether a step expects to fail with whether
it produced a fault:

=================  =============  ======  ===========  ===================
expects failure    fault present  passed  as expected  reported fault
=================  =============  ======  ===========  ===================
no                 no             yes     yes          none
no                 yes            no      no           the given fault
yes                yes            no      yes          the given fault
yes                no             yes     no           unexpected pass
=================  =============  ======  ===========  ===================
"""

from typing import TYPE_CHECKING, NamedTuple

from branchrun.errors import UnexpectedPassFault

if TYPE_CHECKING:
    from branchrun.errors import StepFault
    from branchrun.schema import Step


class Outcome(NamedTuple):
    """Classified result of a step."""

    passed: bool
    as_expected: bool
    fault: 'StepFault | None'

    @property
    def failed(self) -> bool:
        """Whether the outcome should be treated as a failure."""
        return not self.passed or not self.as_expected

    @property
    def fail_branch_now(self) -> bool:
        """Whether the reported fault asks to fail the whole branch."""
        return bool(self.fault and self.fault.fail_branch_now)


def classify(step: 'Step', fault: 'StepFault | None') -> Outcome:
    """Classify the result of a step.

    Args:
        step: Executed step, providing the expectation and its location.
        fault: Fault produced by the step, if any.

    Returns:
        The classified outcome. An expect-failure step that produced no
        fault reports a synthesized unexpected pass fault located at the
        step itself.
    """
    if not step.expects_failure:
        if fault is None:
            return Outcome(passed=True, as_expected=True, fault=None)
        return Outcome(passed=False, as_expected=False, fault=fault)

    if fault is not None:
        return Outcome(passed=False, as_expected=True, fault=fault)

    return Outcome(
        passed=True,
        as_expected=False,
        fault=UnexpectedPassFault(
            filename=step.filename,
            line_number=step.line_number,
        ),
    )
