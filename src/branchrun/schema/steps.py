"""Step definitions consumed and annotated by the execution core.

A step is the smallest executable unit of a branch. It carries its
indentation depth, which drives the scope stack, an optional payload
bound when the tree was built, the flags that change how it is executed
and classified, and the result fields written back after execution.
"""

from collections.abc import Callable
from typing import Any

from pydantic import Field

from branchrun.errors import StepFault  # noqa: TC001
from branchrun.models import RuntimeModel
from branchrun.names import Variable  # noqa: TC001
from branchrun.values import Deferred, Value  # noqa: TC001

#: A payload receives the step context and may return a value. The return
#: value is only used by function-call steps assigning a single variable.
type StepPayload = Callable[..., Any]


class Assignment(RuntimeModel):
    """Variable assignment performed by a step.

    Plain assignments store a value before the payload runs. Function
    call steps with a single assignment store the payload return value
    instead.
    """

    name: Variable = Field(
        title='Variable name',
        description='Name of the variable being set.',
    )

    value: Deferred[Value] = Field(
        default=None,
        title='Assigned value',
        description=(
            'Value stored into the variable. Callables are resolved '
            'against the variables visible to the step.'
        ),
    )

    is_local: bool = Field(
        default=False,
        title='Local flag',
        description=(
            'Whether the variable is stored in the current scope frame '
            'instead of the instance-wide contextual variables.'
        ),
    )


class Step(RuntimeModel):
    """Executable step of a branch."""

    text: str = Field(
        default='',
        title='Step text',
        description='Original text of the step.',
    )

    depth: int = Field(
        default=0,
        ge=0,
        title='Indentation depth',
        description=(
            'Number of nested scopes the step belongs to. A deeper step '
            'opens a new scope frame, a shallower one closes frames.'
        ),
    )

    payload: StepPayload | None = Field(
        default=None,
        title='Payload',
        description='Executable unit bound to the step when the tree was built.',
    )

    is_debug: bool = Field(
        default=False,
        title='Breakpoint flag',
        description='Pause execution before this step.',
    )
    is_function_call: bool = Field(
        default=False,
        title='Function call flag',
        description='Whether the step calls a function.',
    )
    expects_failure: bool = Field(
        default=False,
        title='Expected failure flag',
        description='Whether the step is expected to fail.',
    )

    assignments: list[Assignment] = Field(
        default_factory=list,
        title='Assignments',
        description='Variables set by the step.',
    )

    filename: str | None = Field(
        default=None,
        title='Source file',
    )
    line_number: int | None = Field(
        default=None,
        ge=1,
        title='Source line',
    )

    passed: bool | None = Field(
        default=None,
        title='Passed flag',
        description='Execution status, `None` until the step is recorded.',
    )
    as_expected: bool | None = Field(
        default=None,
        title='As expected flag',
        description='Whether the status matched the expectation.',
    )
    fault: StepFault | None = Field(
        default=None,
        title='Fault',
        description='Fault recorded for the step.',
    )
    log: str = Field(
        default='',
        title='Log',
        description='Text accumulated by the step while it was active.',
    )
