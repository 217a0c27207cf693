"""Event reactor: keeps sticky windows on the active workspace.

The listener publishes the latest switch target, the reconciler moves the
non-staged sticky windows there. A reconciliation running for an older
target stops as soon as a newer one is published.
"""

import asyncio
from logging import Logger
from typing import TYPE_CHECKING

from .models import ReactorState, StickyError

if TYPE_CHECKING:
    from .adapters.proxy import BackendProxy
    from .engine import StageWorkspace
    from .state import StateStore

__all__ = ["EventReactor"]


class EventReactor:
    """Reacts to workspace switches."""

    def __init__(self, store: "StateStore", backend: "BackendProxy", stage: "StageWorkspace", log: Logger) -> None:
        self.store = store
        self.backend = backend
        self.stage = stage
        self.log = log
        self.state = ReactorState.IDLE
        self.target: str | None = None
        self.generation = 0
        self.reconciliations = 0
        self._wakeup = asyncio.Event()

    def publish(self, workspace_id: str) -> None:
        """Record a new switch target, superseding the previous one."""
        self.target = workspace_id
        self.generation += 1
        self._wakeup.set()

    async def listen(self) -> None:
        """Publish every workspace switch. Never returns."""
        async for workspace_id in self.backend.workspace_switch_events():
            self.log.debug("Workspace switched to %s", workspace_id)
            self.publish(workspace_id)

    async def reconcile_forever(self) -> None:
        """Reconcile the latest published target. Never returns."""
        while True:
            await self._wakeup.wait()
            self._wakeup.clear()
            if self.target is None:
                continue
            try:
                await self.reconcile(self.target, self.generation)
            except Exception:  # pylint: disable=W0718
                self.log.exception("Reconciliation to %s failed", self.target)

    async def reconcile(self, workspace_id: str, generation: int) -> int:
        """Move every non-staged sticky window to `workspace_id`.

        Args:
            workspace_id: The newly active workspace
            generation: Value of `self.generation` when the target was published

        Returns:
            The number of windows moved
        """
        if self.stage.matches(workspace_id):
            self.log.debug("Switched to the stage workspace, nothing to do")
            return 0
        moved = 0
        self.state = ReactorState.RECONCILING
        try:
            async with self.store.exclusive() as snap:
                for window_id in sorted(snap.floating):
                    if generation != self.generation:
                        self.log.debug("Reconciliation to %s superseded", workspace_id)
                        break
                    try:
                        await self.backend.move_window_to_workspace(window_id, workspace_id)
                    except StickyError as e:
                        self.log.warning("Failed to move %s to workspace %s: %s", window_id, workspace_id, e)
                    except Exception:  # pylint: disable=W0718
                        self.log.exception("Unexpected error moving %s to workspace %s", window_id, workspace_id)
                    else:
                        moved += 1
        finally:
            self.state = ReactorState.IDLE
        self.reconciliations += 1
        return moved

    async def run(self) -> None:
        """Run the listener and the reconciler until cancelled."""
        async with asyncio.TaskGroup() as group:
            group.create_task(self.listen(), name="reactor-listener")
            group.create_task(self.reconcile_forever(), name="reactor-reconciler")
