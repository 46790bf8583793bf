"""Tree entities shared with the Tree collaborator.

Defines mutable Pydantic models for branches, steps, and assignments. The
Tree builds and owns them; the execution core reads them and records
results on them.
"""

from .branches import Branch
from .steps import Assignment, Step, StepPayload

__all__ = (
    'Assignment',
    'Branch',
    'Step',
    'StepPayload',
)
