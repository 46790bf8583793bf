"""Branch definitions consumed and annotated by the execution core.

A branch is one path through the test tree: an ordered sequence of steps
with hooks attached. Hooks are branch-shaped themselves, each one being a
plain sequence of steps.
"""

from pydantic import Field

from branchrun.errors import StepFault  # noqa: TC001
from branchrun.models import RuntimeModel

from .steps import Step  # noqa: TC001


class Branch(RuntimeModel):
    """Ordered sequence of steps with attached hooks."""

    steps: list[Step] = Field(
        default_factory=list,
        title='Steps',
        description='Steps of the branch, in execution order.',
    )

    before_every_branch: list['Branch'] = Field(
        default_factory=list,
        title='Before every branch hooks',
        description=(
            'Hooks served by the Tree at the outer boundary of a run. '
            'The execution core does not drive them.'
        ),
    )
    after_every_step: list['Branch'] = Field(
        default_factory=list,
        title='After every step hooks',
        description='Hooks executed after each step of the branch.',
    )
    after_every_branch: list['Branch'] = Field(
        default_factory=list,
        title='After every branch hooks',
        description='Hooks executed once the branch is exhausted.',
    )

    passed: bool | None = Field(
        default=None,
        title='Passed flag',
        description='Execution status, `None` until the branch is marked.',
    )
    fault: StepFault | None = Field(
        default=None,
        title='Fault',
        description='Fault attached to the branch.',
    )
    log: str = Field(
        default='',
        title='Log',
        description='Text logged while the branch was active without a step.',
    )
