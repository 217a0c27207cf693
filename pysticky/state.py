"""Sticky and staged window registry.

StateStore is the single owner of the two window sets. It is created by
the daemon and passed to the command engine and the event reactor:

- `snapshot()` is a consistent read, safe at any time
- `exclusive()` is the one lock serializing every read-then-write sequence
- `mutate()` swaps both sets in together, and only while the lock is held
"""

import asyncio
import contextlib
from collections.abc import AsyncIterator, Callable, Iterable
from dataclasses import dataclass

from .models import PreconditionViolated, WindowId

__all__ = [
    "Snapshot",
    "StateStore",
]

Transformation = Callable[[frozenset[WindowId], frozenset[WindowId]], tuple[Iterable[WindowId], Iterable[WindowId]]]


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time view of both sets."""

    sticky: frozenset[WindowId] = frozenset()
    staged: frozenset[WindowId] = frozenset()

    @property
    def floating(self) -> frozenset[WindowId]:
        """Sticky windows which must follow the active workspace."""
        return self.sticky - self.staged


class StateStore:
    """Holds the sticky and staged window sets."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._snapshot = Snapshot()
        self.commits = 0

    def snapshot(self) -> Snapshot:
        """Return the current sets."""
        return self._snapshot

    @contextlib.asynccontextmanager
    async def exclusive(self) -> AsyncIterator[Snapshot]:
        """Hold the store lock, yielding the snapshot at acquisition time."""
        async with self._lock:
            yield self._snapshot

    @property
    def locked(self) -> bool:
        """Return True while some task holds `exclusive()`."""
        return self._lock.locked()

    def mutate(self, transformation: Transformation) -> Snapshot:
        """Replace both sets with `transformation(sticky, staged)`.

        Nothing changes when the transformation raises or when its result
        would stage a window which isn't sticky.

        Args:
            transformation: Pure function returning the new (sticky, staged) pair

        Raises:
            RuntimeError: `exclusive()` isn't held
            PreconditionViolated: The new staged set isn't a subset of the sticky set
        """
        if not self._lock.locked():
            msg = "StateStore.mutate() called without holding exclusive()"
            raise RuntimeError(msg)
        sticky, staged = transformation(self._snapshot.sticky, self._snapshot.staged)
        new = Snapshot(frozenset(sticky), frozenset(staged))
        if not new.staged <= new.sticky:
            msg = f"Staged windows must be sticky: {', '.join(sorted(new.staged - new.sticky))}"
            raise PreconditionViolated(msg)
        self._snapshot = new
        self.commits += 1
        return new

    async def update(self, transformation: Transformation) -> Snapshot:
        """Acquire the lock then `mutate()`.

        Args:
            transformation: Pure function returning the new (sticky, staged) pair
        """
        async with self.exclusive():
            return self.mutate(transformation)

    def stats(self) -> dict[str, int]:
        """Return counters describing the store."""
        snap = self._snapshot
        return {
            "sticky": len(snap.sticky),
            "staged": len(snap.staged),
            "floating": len(snap.floating),
            "commits": self.commits,
        }
