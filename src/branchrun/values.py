"""Variable value types for the execution core.

This module defines the value vocabulary shared by variable bags, scope
frames, and step assignments. It separates plain values, which can be
stored and serialized directly, from deferred values, which are callables
evaluated against the visible variables when a step runs.
"""

from collections.abc import Callable, Mapping, Sequence
from datetime import date, datetime, timedelta
from typing import Any

#: Atomic values stored as-is in variable bags.
type Scalar = date | datetime | timedelta | str | bytes | int | float | bool

#: A plain value contains no deferred computations.
type Value = Scalar | Sequence['Value'] | Mapping[str, 'Value'] | None

#: Anything a step payload may produce or store (browser handles,
#: clients, and other runtime objects included).
type RuntimeValue = Any

#: Variables visible to a step, merged from all bags.
type Variables = Mapping[str, RuntimeValue]

#: Deferred values are resolved eagerly and deeply before assignment.
type DeferredCallable[T] = Callable[[Variables], T]
type Deferred[T] = T | DeferredCallable[T] | Sequence['Deferred[T]'] | Mapping[str, 'Deferred[T]']

MAPPINGS = (dict,)
SCALARS = (date, datetime, timedelta, str, bytes, int, float, bool)
SEQUENCES = (list, tuple, set)


def _normalize_key(value: RuntimeValue) -> str:
    """Validate a mapping key.

    Args:
        value: Candidate mapping key.

    Returns:
        The validated key.

    Raises:
        TypeError: If the key is not a string.
    """
    if not isinstance(value, str):
        raise TypeError(f'Can not use {value!r} as mapping key')

    return value


def normalize(value: RuntimeValue, variables: Variables | None = None) -> Value:
    """Recursively resolve a deferred value into a plain `Value`.

    Callables found anywhere in the structure are called with the
    visible variables and their results are normalized in turn.

    Args:
        value: Deferred or plain value.
        variables: Variables visible to the callables. An empty
            mapping is used when omitted.

    Returns:
        A plain value.

    Raises:
        TypeError: If the value type is unsupported.
    """
    if value is None:
        return None

    if isinstance(value, SCALARS):
        return value

    if isinstance(value, MAPPINGS):
        return {
            _normalize_key(key): normalize(item, variables)
            for key, item in value.items()
        }

    if isinstance(value, SEQUENCES):
        return [
            normalize(item, variables)
            for item in value
        ]

    if callable(value):
        if variables is None:
            variables = {}
        return normalize(value(variables), variables)

    raise TypeError(f'{value!r} has unsupported type')
