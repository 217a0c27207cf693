"""Window selectors.

A selector designates one window by id, app-id, title or focus. When
several windows match, the first one in the window manager's enumeration
order wins.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from .models import SelectorNotFound, WindowInfo

if TYPE_CHECKING:
    from .adapters.proxy import BackendProxy

__all__ = ["Selector", "SelectorKind", "first_match", "resolve"]


class SelectorKind(StrEnum):
    """How a selector designates its window."""

    ID = "id"
    APP_ID = "app_id"
    TITLE = "title"
    ACTIVE = "active"


@dataclass(frozen=True)
class Selector:
    """Designates a window."""

    kind: SelectorKind
    value: str = ""

    @classmethod
    def by_id(cls, window_id: str) -> "Selector":
        """Select the window with this id."""
        return cls(SelectorKind.ID, window_id)

    @classmethod
    def by_app_id(cls, app_id: str) -> "Selector":
        """Select the first window with exactly this app-id."""
        return cls(SelectorKind.APP_ID, app_id)

    @classmethod
    def by_title(cls, text: str) -> "Selector":
        """Select the first window whose title contains `text`."""
        return cls(SelectorKind.TITLE, text)

    @classmethod
    def active(cls) -> "Selector":
        """Select the focused window."""
        return cls(SelectorKind.ACTIVE)

    def matches(self, window: WindowInfo) -> bool:
        """Return True if `window` is designated by this selector."""
        match self.kind:
            case SelectorKind.ID:
                return window.id == self.value
            case SelectorKind.APP_ID:
                return window.app_id == self.value
            case SelectorKind.TITLE:
                return self.value in window.title
        return False

    def __str__(self) -> str:
        if self.kind == SelectorKind.ACTIVE:
            return "active window"
        return f"{self.kind}={self.value!r}"


def first_match(selector: Selector, windows: list[WindowInfo]) -> WindowInfo:
    """Return the first window of `windows` matching `selector`.

    Raises:
        SelectorNotFound: No window matches
    """
    for window in windows:
        if selector.matches(window):
            return window
    msg = f"No window matches {selector}"
    raise SelectorNotFound(msg)


async def resolve(selector: Selector, backend: "BackendProxy", windows: list[WindowInfo]) -> WindowInfo:
    """Resolve `selector` against a fresh window listing.

    Args:
        selector: The selector
        backend: Used to query the focused window
        windows: The current window listing, in enumeration order

    Raises:
        SelectorNotFound: No window matches
    """
    if selector.kind == SelectorKind.ACTIVE:
        window = await backend.get_active_window()
        if window is None:
            msg = "No focused window"
            raise SelectorNotFound(msg)
        return window
    return first_match(selector, windows)
