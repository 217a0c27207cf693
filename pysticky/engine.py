"""Command engine: applies user intents to the window sets.

Every operation runs while holding `StateStore.exclusive()`, from the
window listing to the final commit. The window manager moves happen first
and the set membership is committed last, so a failed move never leaves a
window registered in a place it isn't.

Single-window failures are raised as `StickyError` subclasses. Bulk
operations never raise for a single window: they return one `ItemResult`
per window instead.
"""

from logging import Logger
from typing import TYPE_CHECKING

from .models import (
    CommandResult,
    ItemResult,
    Outcome,
    PreconditionViolated,
    StickyError,
    WindowId,
    WindowInfo,
)
from .selectors import Selector, resolve

if TYPE_CHECKING:
    from .adapters.proxy import BackendProxy
    from .state import StateStore

__all__ = ["CommandEngine", "StageWorkspace"]


class StageWorkspace:
    """The workspace hosting staged windows.

    Resolved (and created if needed) on first use, then cached for the
    daemon lifetime. It is never removed.
    """

    def __init__(self, backend: "BackendProxy", name: str) -> None:
        self.backend = backend
        self.name = name
        self._id: str | None = None

    @property
    def resolved_id(self) -> str | None:
        """The workspace id if already resolved."""
        return self._id

    async def get_id(self) -> str:
        """Return the workspace id, creating the workspace on first call."""
        if self._id is None:
            self._id = await self.backend.find_or_create_workspace(self.name)
            self.backend.log.info("Stage workspace %r is %s", self.name, self._id)
        return self._id

    def matches(self, workspace_id: str) -> bool:
        """Return True if `workspace_id` is the stage workspace."""
        return self._id is not None and workspace_id == self._id


class CommandEngine:
    """Validates intents, moves windows and commits the sets."""

    def __init__(  # noqa: PLR0913
        self,
        store: "StateStore",
        backend: "BackendProxy",
        stage: StageWorkspace,
        log: Logger,
        *,
        follow_on_add: bool = True,
        focus_on_unstage: bool = False,
    ) -> None:
        self.store = store
        self.backend = backend
        self.stage = stage
        self.log = log
        self.follow_on_add = follow_on_add
        self.focus_on_unstage = focus_on_unstage

    # Helpers

    async def _fresh_windows(self) -> list[WindowInfo]:
        """List windows and forget the closed ones. Requires the lock."""
        windows = await self.backend.list_windows()
        existing = {w.id for w in windows}
        closed = self.store.snapshot().sticky - existing
        if closed:
            self.log.info("Forgetting closed windows: %s", ", ".join(sorted(closed)))
            self.store.mutate(lambda sticky, staged: (sticky - closed, staged - closed))
        return windows

    async def _resolve(self, selector: Selector) -> WindowInfo:
        return await resolve(selector, self.backend, await self._fresh_windows())

    def _add(self, sticky: frozenset[WindowId] = frozenset(), staged: frozenset[WindowId] = frozenset()) -> None:
        self.store.mutate(lambda s, t: (s | sticky, t | staged))

    def _discard(self, sticky: frozenset[WindowId] = frozenset(), staged: frozenset[WindowId] = frozenset()) -> None:
        self.store.mutate(lambda s, t: (s - sticky, t - staged))

    async def _focus(self, window_id: WindowId) -> None:
        if not self.focus_on_unstage:
            return
        try:
            await self.backend.focus_window(window_id)
        except StickyError as e:
            self.log.warning("Failed to focus %s: %s", window_id, e)

    # Sticky operations

    async def sticky_add(self, selector: Selector) -> CommandResult:
        """Make a window sticky."""
        async with self.store.exclusive():
            return await self._sticky_add(await self._resolve(selector))

    async def sticky_remove(self, selector: Selector) -> CommandResult:
        """Make a window non-sticky, bringing it back first if staged."""
        async with self.store.exclusive():
            return await self._sticky_remove(await self._resolve(selector))

    async def sticky_toggle(self, selector: Selector) -> CommandResult:
        """Make a window sticky, or non-sticky if it already is."""
        async with self.store.exclusive():
            window = await self._resolve(selector)
            if window.id in self.store.snapshot().sticky:
                return await self._sticky_remove(window)
            return await self._sticky_add(window)

    async def sticky_list(self) -> CommandResult:
        """List the sticky windows."""
        async with self.store.exclusive():
            windows = await self._fresh_windows()
            sticky = self.store.snapshot().sticky
            found = [w for w in windows if w.id in sticky]
            return CommandResult(Outcome.OK, f"{len(found)} sticky window(s)", windows=found)

    async def toggle_active_sticky(self) -> CommandResult:
        """Toggle the sticky state of the focused window."""
        return await self.sticky_toggle(Selector.active())

    async def _sticky_add(self, window: WindowInfo) -> CommandResult:
        if window.id in self.store.snapshot().sticky:
            return CommandResult(Outcome.NOOP, f"{window.describe()} is already sticky", windows=[window])
        if self.follow_on_add:
            await self.backend.move_window_to_workspace(window.id, await self.backend.get_active_workspace())
        self._add(sticky=frozenset({window.id}))
        self.log.info("Sticky: %s", window.describe())
        return CommandResult(Outcome.OK, f"{window.describe()} is now sticky", windows=[window])

    async def _sticky_remove(self, window: WindowInfo) -> CommandResult:
        snap = self.store.snapshot()
        if window.id not in snap.sticky:
            return CommandResult(Outcome.NOOP, f"{window.describe()} is not sticky", windows=[window])
        was_staged = window.id in snap.staged
        if was_staged:
            await self.backend.move_window_to_workspace(window.id, await self.backend.get_active_workspace())
        only = frozenset({window.id})
        self._discard(sticky=only, staged=only)
        self.log.info("No longer sticky: %s", window.describe())
        if was_staged:
            await self._focus(window.id)
        return CommandResult(Outcome.OK, f"{window.describe()} is no longer sticky", windows=[window])

    # Stage operations

    async def stage_add(self, selector: Selector) -> CommandResult:
        """Park a sticky window on the stage workspace."""
        async with self.store.exclusive():
            return await self._stage_add(await self._resolve(selector))

    async def stage_remove(self, selector: Selector) -> CommandResult:
        """Bring a staged window back to the active workspace."""
        async with self.store.exclusive():
            return await self._stage_remove(await self._resolve(selector))

    async def stage_toggle(self, selector: Selector) -> CommandResult:
        """Stage a sticky window, or un-stage it if already staged."""
        async with self.store.exclusive():
            window = await self._resolve(selector)
            snap = self.store.snapshot()
            if window.id not in snap.sticky:
                msg = f"Cannot stage a non-sticky window: {window.describe()}"
                raise PreconditionViolated(msg)
            if window.id in snap.staged:
                return await self._stage_remove(window)
            return await self._stage_add(window)

    async def toggle_active_stage(self) -> CommandResult:
        """Toggle the staged state of the focused window."""
        return await self.stage_toggle(Selector.active())

    async def stage_list(self) -> CommandResult:
        """List the staged windows."""
        async with self.store.exclusive():
            windows = await self._fresh_windows()
            staged = self.store.snapshot().staged
            found = [w for w in windows if w.id in staged]
            return CommandResult(Outcome.OK, f"{len(found)} staged window(s)", windows=found)

    async def stage_add_all(self) -> CommandResult:
        """Stage every sticky window, committing each success on its own."""
        async with self.store.exclusive():
            windows = await self._fresh_windows()
            floating = self.store.snapshot().floating
            targets = [w for w in windows if w.id in floating]
            if not targets:
                return CommandResult.from_items("staged", [])
            stage_id = await self.stage.get_id()
            items = []
            for window in targets:
                try:
                    await self.backend.move_window_to_workspace(window.id, stage_id)
                except StickyError as e:
                    self.log.warning("Failed to stage %s: %s", window.describe(), e)
                    items.append(ItemResult(window.id, ok=False, reason=str(e)))
                    continue
                self._add(staged=frozenset({window.id}))
                items.append(ItemResult(window.id, ok=True))
            result = CommandResult.from_items("staged", items)
            result.windows = targets
            return result

    async def stage_remove_all(self) -> CommandResult:
        """Un-stage every staged window, committing each success on its own."""
        async with self.store.exclusive():
            windows = await self._fresh_windows()
            staged = self.store.snapshot().staged
            targets = [w for w in windows if w.id in staged]
            if not targets:
                return CommandResult.from_items("unstaged", [])
            workspace_id = await self.backend.get_active_workspace()
            items = []
            for window in targets:
                try:
                    await self.backend.move_window_to_workspace(window.id, workspace_id)
                except StickyError as e:
                    self.log.warning("Failed to unstage %s: %s", window.describe(), e)
                    items.append(ItemResult(window.id, ok=False, reason=str(e)))
                    continue
                self._discard(staged=frozenset({window.id}))
                items.append(ItemResult(window.id, ok=True))
                await self._focus(window.id)
            result = CommandResult.from_items("unstaged", items)
            result.windows = targets
            return result

    async def _stage_add(self, window: WindowInfo) -> CommandResult:
        snap = self.store.snapshot()
        if window.id not in snap.sticky:
            msg = f"Cannot stage a non-sticky window: {window.describe()}"
            raise PreconditionViolated(msg)
        if window.id in snap.staged:
            return CommandResult(Outcome.NOOP, f"{window.describe()} is already staged", windows=[window])
        await self.backend.move_window_to_workspace(window.id, await self.stage.get_id())
        self._add(staged=frozenset({window.id}))
        self.log.info("Staged: %s", window.describe())
        return CommandResult(Outcome.OK, f"{window.describe()} is now staged", windows=[window])

    async def _stage_remove(self, window: WindowInfo) -> CommandResult:
        if window.id not in self.store.snapshot().staged:
            msg = f"Window is not staged: {window.describe()}"
            raise PreconditionViolated(msg)
        await self.backend.move_window_to_workspace(window.id, await self.backend.get_active_workspace())
        self._discard(staged=frozenset({window.id}))
        self.log.info("Unstaged: %s", window.describe())
        await self._focus(window.id)
        return CommandResult(Outcome.OK, f"{window.describe()} is no longer staged", windows=[window])
