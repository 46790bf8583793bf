"""Lexically nested scope frames following the indentation of steps."""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from branchrun.values import RuntimeValue

logger = logging.getLogger(__name__)

#: A scope frame maps variable names to values.
type Frame = dict[str, 'RuntimeValue']

#: Saved state of a scope stack: the enclosing frames and the active one.
type ScopeSnapshot = tuple[tuple[Frame, ...], Frame]


class ScopeStack:
    """Stack of local variable frames driven by step depths.

    The active frame is exposed as `local`. Saved enclosing frames are
    kept on the stack, so `len(stack)` is the number of scopes entered and
    not yet left. Frames are restored by identity: leaving a scope brings
    back the very mapping that was active before entering it.
    """

    def __init__(self) -> None:
        self.local: Frame = {}
        self._frames: list[Frame] = []

    def __len__(self) -> int:
        return len(self._frames)

    def __repr__(self) -> str:
        return f'<{type(self).__name__} depth={len(self)}>'

    def push(self) -> Frame:
        """Save the active frame and start a fresh empty one.

        Returns:
            The new active frame.
        """
        self._frames.append(self.local)
        self.local = {}

        return self.local

    def pop(self) -> Frame:
        """Restore the enclosing frame.

        Popping past the ground frame keeps the ground frame active.

        Returns:
            The restored active frame.
        """
        if not self._frames:
            logger.warning('Scope underflow, keeping the ground frame')
            return self.local

        self.local = self._frames.pop()

        return self.local

    def adjust(self, previous_depth: int | None, current_depth: int) -> Frame:
        """Enter or leave scopes before a step runs.

        A deeper step enters exactly one new scope whatever the size of
        the increase. A shallower step leaves one scope per level.

        Args:
            previous_depth: Depth of the previously executed step, or
                `None` before the first step of a run.
            current_depth: Depth of the step about to run.

        Returns:
            The active frame for the step.
        """
        if previous_depth is None or current_depth == previous_depth:
            return self.local

        if current_depth > previous_depth:
            logger.debug('Entering scope %d -> %d', previous_depth, current_depth)
            return self.push()

        logger.debug('Leaving scope %d -> %d', previous_depth, current_depth)
        for _ in range(previous_depth - current_depth):
            self.pop()

        return self.local

    def snapshot(self) -> ScopeSnapshot:
        """Capture the frames by reference for a later `restore`."""
        return tuple(self._frames), self.local

    def restore(self, snapshot: ScopeSnapshot) -> None:
        """Bring back frames captured by `snapshot`."""
        frames, local = snapshot

        self._frames = list(frames)
        self.local = local
