"""One-shot debugging flags shared by execution instances."""

import threading


class OneShotFlag:
    """Boolean request consumed by whoever reads it first.

    Runners keep the pause-on-failure and single-step requests in flags
    of this type. Reading and clearing happen under one lock, so two
    instances running on different threads never both act on a single
    request.
    """

    def __init__(self, value: bool = False) -> None:
        self._value = value
        self._lock = threading.Lock()

    def __bool__(self) -> bool:
        return self._value

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self._value!r})'

    def set(self, value: bool = True) -> None:
        """Raise (or lower) the request."""
        with self._lock:
            self._value = value

    def consume(self) -> bool:
        """Return the current request and clear it atomically."""
        with self._lock:
            value, self._value = self._value, False
        return value
