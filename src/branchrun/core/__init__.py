"""Execution core walking a tree of branches and steps.

It provides:
- a scope stack mirroring the indentation of executed steps;
- classification of step outcomes against their expectation;
- a reentrant step executor shared by the main loop and hooks;
- a resumable execution loop with cooperative pausing.

The primary public entry point is `RunInstance`.
"""

from .instance import RunInstance, RunOutcome
from .outcome import Outcome, classify
from .scope import ScopeStack

__all__ = (
    'Outcome',
    'RunInstance',
    'RunOutcome',
    'ScopeStack',
    'classify',
)
