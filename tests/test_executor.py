"""Tests for single step execution."""

import logging
from typing import TYPE_CHECKING

import pytest

from branchrun.context import StepContext
from branchrun.core import RunOutcome
from branchrun.errors import BranchHookFault, StepFault, UnexpectedPassFault
from branchrun.schema import Assignment, Branch, Step

if TYPE_CHECKING:
    from collections.abc import Callable

if TYPE_CHECKING:
    from pytest_mock import MockerFixture, MockType

    from branchrun.core import RunInstance


def _fail(ctx: StepContext) -> None:
    raise ValueError('bad value')


def test_payload_receives_context(make_instance: 'Callable[..., RunInstance]') -> None:
    """Payloads get the instance bags and may write to all of them."""
    def payload(ctx: StepContext) -> None:
        ctx.local['localVar'] = 1
        ctx.contextual['contextVar'] = 2
        ctx.persistent['persistentVar'] = 3
        ctx.log('written')

    step = Step(text='Write variables', payload=payload)
    instance = make_instance(Branch(steps=[step]))

    assert instance.run() is RunOutcome.COMPLETED

    assert instance.local['localVar'] == 1
    assert instance.contextual == {'contextVar': 2}
    assert instance.runner.persistent == {'persistentVar': 3}
    assert step.log == 'written\n'
    assert step.passed is True
    assert step.as_expected is True


def test_payload_exception_is_wrapped(make_instance: 'Callable[..., RunInstance]') -> None:
    """Exceptions raised by payloads become located step faults."""
    step = Step(text='Fail', payload=_fail, filename='cart.smash', line_number=7)
    instance = make_instance(Branch(steps=[step]))

    assert instance.run() is RunOutcome.COMPLETED

    assert step.passed is False
    assert step.as_expected is False
    assert isinstance(step.fault, StepFault)
    assert isinstance(step.fault.__cause__, ValueError)
    assert step.fault.filename == 'cart.smash'
    assert step.fault.line_number == 7
    assert 'in "cart.smash", line 7' in str(step.fault)


def test_raised_step_fault_is_recorded_as_is(make_instance: 'Callable[..., RunInstance]') -> None:
    """A step fault raised by a payload is stamped and recorded in place."""
    fault = StepFault('Element not found', fail_branch_now=True)

    def payload(ctx: StepContext) -> None:
        raise fault

    step = Step(payload=payload, filename='nav.smash', line_number=2)
    skipped = Step(payload=lambda ctx: None)
    branch = Branch(steps=[step, skipped])
    instance = make_instance(branch)

    instance.run()

    assert step.fault is fault
    assert fault.filename == 'nav.smash'
    assert fault.line_number == 2
    assert instance.tree.marked_steps[0][-1] is True
    assert skipped.passed is None


def test_expected_failure(make_instance: 'Callable[..., RunInstance]') -> None:
    """A failing expect-failure step is recorded as an expected failure."""
    step = Step(payload=_fail, expects_failure=True)
    branch = Branch(steps=[step])
    instance = make_instance(branch)

    instance.run()

    assert step.passed is False
    assert step.as_expected is True
    assert isinstance(step.fault.__cause__, ValueError)
    assert branch.passed is True


def test_unexpected_pass(make_instance: 'Callable[..., RunInstance]') -> None:
    """A passing expect-failure step records a synthesized fault."""
    step = Step(payload=lambda ctx: None, expects_failure=True, filename='a.smash', line_number=4)
    branch = Branch(steps=[step])
    instance = make_instance(branch)

    instance.run()

    assert step.passed is True
    assert step.as_expected is False
    assert isinstance(step.fault, UnexpectedPassFault)
    assert step.fault.line_number == 4
    assert branch.passed is False


def test_step_without_payload_passes(make_instance: 'Callable[..., RunInstance]') -> None:
    """Steps without payload are classified as passing."""
    step = Step(text='Just a label')
    instance = make_instance(Branch(steps=[step]))

    instance.run()

    assert step.passed is True
    assert step.fault is None


def test_breakpoint_pauses_before_anything(make_instance: 'Callable[..., RunInstance]',
                                           reporter: 'MockType') -> None:
    """A breakpoint pauses without running, scoping, hooks or recording."""
    hook_calls = []
    breakpoint_step = Step(text='~', is_debug=True, depth=1)
    hook = Branch(steps=[Step(payload=lambda ctx: hook_calls.append(1))])
    branch = Branch(steps=[breakpoint_step], after_every_step=[hook])
    instance = make_instance(branch)

    assert instance.run() is RunOutcome.PAUSED

    assert instance.active_step is breakpoint_step
    assert len(instance.scope) == 0
    assert hook_calls == []
    assert instance.tree.marked_steps == []
    reporter.generate_report.assert_not_called()


def test_step_hooks_see_status(make_instance: 'Callable[..., RunInstance]') -> None:
    """Step hooks run after each step and see its status."""
    seen = []

    def hook_payload(ctx: StepContext) -> None:
        seen.append((ctx.local['successful'], ctx.local['error']))

    hook = Branch(steps=[Step(text='After every step', payload=hook_payload)])
    first = Step(payload=lambda ctx: None)
    second = Step(payload=_fail)
    instance = make_instance(Branch(steps=[first, second], after_every_step=[hook]))

    instance.run()

    assert seen == [(True, None), (False, second.fault)]


def test_step_hook_failure_is_recorded_on_hooked_step(
    make_instance: 'Callable[..., RunInstance]',
) -> None:
    """A failing step hook marks the hooked step, not the hook step."""
    hook_step = Step(payload=_fail)
    step = Step(payload=lambda ctx: None)
    instance = make_instance(Branch(steps=[step], after_every_step=[Branch(steps=[hook_step])]))

    instance.run()

    assert step.passed is False
    assert isinstance(step.fault.__cause__, ValueError)
    assert hook_step.passed is None


def test_pause_on_failure(make_instance: 'Callable[..., RunInstance]') -> None:
    """A failing step pauses once, without running its step hooks."""
    hook_calls = []
    failing = Step(payload=_fail)
    following = Step(payload=lambda ctx: None)
    hook = Branch(steps=[Step(payload=lambda ctx: hook_calls.append(1))])
    branch = Branch(steps=[failing, following], after_every_step=[hook])
    instance = make_instance(branch)
    instance.runner.pause_on_failure.set()

    assert instance.run() is RunOutcome.PAUSED

    assert not instance.runner.pause_on_failure
    assert hook_calls == []
    assert instance.active_branch is branch
    assert instance.active_step is failing
    assert following.passed is None

    assert instance.run() is RunOutcome.COMPLETED

    assert following.passed is True
    assert hook_calls == [1]


def test_pause_on_failure_ignores_passing_steps(make_instance: 'Callable[..., RunInstance]') -> None:
    """The pause-on-failure request waits for an actual failure."""
    instance = make_instance(Branch(steps=[Step(payload=lambda ctx: None)]))
    instance.runner.pause_on_failure.set()

    assert instance.run() is RunOutcome.COMPLETED
    assert instance.runner.pause_on_failure


@pytest.mark.parametrize('payload', (
    pytest.param(lambda ctx: None, id='passing'),
    pytest.param(_fail, id='failing'),
))
def test_single_step(make_instance: 'Callable[..., RunInstance]',
                     payload: 'Callable[[StepContext], None]') -> None:
    """A single step request runs one step and its hooks, then pauses."""
    hook_calls = []
    first = Step(payload=payload)
    second = Step(payload=lambda ctx: None)
    hook = Branch(steps=[Step(payload=lambda ctx: hook_calls.append(1))])
    instance = make_instance(Branch(steps=[first, second], after_every_step=[hook]))
    instance.runner.single_step.set()

    assert instance.run() is RunOutcome.PAUSED

    assert not instance.runner.single_step
    assert first.passed is not None
    assert second.passed is None
    assert hook_calls == [1]
    assert instance.active_step is first


def test_report_refreshed_after_each_step(make_instance: 'Callable[..., RunInstance]',
                                          reporter: 'MockType') -> None:
    """The Reporter is asked for a refresh after every step."""
    instance = make_instance(Branch(steps=[Step(), Step(), Step()]))

    instance.run()

    assert reporter.generate_report.call_count == 3


def test_report_failure_does_not_stop_run(make_instance: 'Callable[..., RunInstance]',
                                          reporter: 'MockType',
                                          caplog: pytest.LogCaptureFixture) -> None:
    """A failing Reporter is logged and execution goes on."""
    reporter.generate_report.side_effect = OSError('disk full')
    step = Step()
    instance = make_instance(Branch(steps=[step]))

    with caplog.at_level(logging.WARNING, logger='branchrun.core.executor'):
        assert instance.run() is RunOutcome.COMPLETED

    assert step.passed is True
    assert 'Report refresh failed' in caplog.text


def test_browser_directive_dispatch(make_instance: 'Callable[..., RunInstance]',
                                    mocker: 'MockerFixture') -> None:
    """Browser directive steps run through the injected browser path."""
    payload = mocker.Mock()
    step = Step(text='  execute   IN browser ', payload=payload)
    instance = make_instance(Branch(steps=[step]))
    instance.exec_in_browser = mocker.Mock()

    instance.run()

    payload.assert_not_called()
    instance.exec_in_browser.assert_called_once()
    called_payload, context = instance.exec_in_browser.call_args.args
    assert called_payload is payload
    assert isinstance(context, StepContext)
    assert step.passed is True


def test_browser_directive_without_browser(make_instance: 'Callable[..., RunInstance]') -> None:
    """Without an injected browser path the directive step faults."""
    step = Step(text='Execute in browser', payload=lambda ctx: None)
    instance = make_instance(Branch(steps=[step]))

    instance.run()

    assert step.passed is False
    assert step.fault.message == 'Browser execution is not available'


def test_assignments(make_instance: 'Callable[..., RunInstance]') -> None:
    """Plain assignments store resolved values in the selected bag."""
    step = Step(
        text='{user}="alice", {{greeting}}="hello"',
        assignments=[
            Assignment(name='user', value='alice'),
            Assignment(name='greeting', value=lambda variables: f'hello {variables['user']}', is_local=True),
        ],
    )
    instance = make_instance(Branch(steps=[step]))

    instance.run()

    assert instance.contextual['user'] == 'alice'
    assert instance.local['greeting'] == 'hello alice'


def test_function_call_assigns_return_value(make_instance: 'Callable[..., RunInstance]') -> None:
    """A function call step stores the payload return value."""
    handle = object()
    step = Step(
        text='{browser} = Open browser',
        is_function_call=True,
        assignments=[Assignment(name='browser')],
        payload=lambda ctx: handle,
    )
    instance = make_instance(Branch(steps=[step]))

    instance.run()

    assert instance.contextual['browser'] is handle


def test_failing_assignment_faults_step(make_instance: 'Callable[..., RunInstance]') -> None:
    """Errors resolving an assigned value are recorded as step faults."""
    step = Step(assignments=[Assignment(name='missing', value=lambda variables: variables['nope'])])
    instance = make_instance(Branch(steps=[step]))

    instance.run()

    assert step.passed is False
    assert isinstance(step.fault.__cause__, KeyError)


def test_branch_hook_failure_fails_branch(make_instance: 'Callable[..., RunInstance]') -> None:
    """A failing branch hook attaches its fault to the branch."""
    hook_step = Step(payload=_fail, filename='hooks.smash', line_number=9)
    branch = Branch(steps=[Step()], after_every_branch=[Branch(steps=[hook_step])])
    instance = make_instance(branch)

    instance.run()

    assert branch.passed is False
    assert isinstance(branch.fault, BranchHookFault)
    assert branch.fault.line_number == 9
    assert instance.tree.marked_branches == [(branch, False)]


def test_passing_branch_hook_keeps_branch(make_instance: 'Callable[..., RunInstance]') -> None:
    """A passing branch hook leaves the branch status untouched."""
    branch = Branch(steps=[Step()], after_every_branch=[Branch(steps=[Step()])])
    instance = make_instance(branch)

    instance.run()

    assert branch.passed is True
    assert instance.tree.marked_branches == []


def test_expect_failure_without_payload(make_instance: 'Callable[..., RunInstance]') -> None:
    """An expect-failure step without payload is an unexpected pass."""
    step = Step(text='Nothing to fail', expects_failure=True)
    branch = Branch(steps=[step])
    instance = make_instance(branch)

    instance.run()

    assert step.passed is True
    assert step.as_expected is False
    assert isinstance(step.fault, UnexpectedPassFault)
    assert instance.tree.marked_steps[0][0] is step
    assert branch.passed is False
