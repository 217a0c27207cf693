import pytest

from pysticky.models import SelectorNotFound, WindowInfo
from pysticky.selectors import Selector, SelectorKind, first_match, resolve

from .testtools import default_windows


def test_by_id():
    assert first_match(Selector.by_id("2"), default_windows()).app_id == "firefox"


def test_app_id_is_exact():
    with pytest.raises(SelectorNotFound):
        first_match(Selector.by_app_id("fire"), default_windows())
    assert first_match(Selector.by_app_id("firefox"), default_windows()).id == "2"


def test_title_is_substring():
    assert first_match(Selector.by_title("Firefox"), default_windows()).id == "2"


def test_first_enumerated_window_wins():
    assert first_match(Selector.by_app_id("kitty"), default_windows()).id == "1"
    reordered = list(reversed(default_windows()))
    assert first_match(Selector.by_app_id("kitty"), reordered).id == "3"


def test_unknown_id():
    with pytest.raises(SelectorNotFound, match="No window matches"):
        first_match(Selector.by_id("42"), default_windows())


def test_active_never_matches_listing():
    assert not Selector.active().matches(WindowInfo("1"))


def test_str():
    assert str(Selector.by_title("docs")) == "title='docs'"
    assert str(Selector.active()) == "active window"
    assert Selector.by_app_id("x").kind == SelectorKind.APP_ID


@pytest.mark.asyncio
async def test_resolve_active(proxy, fake_backend):
    fake_backend.focused = "3"
    window = await resolve(Selector.active(), proxy, [])
    assert window.title == "editor"


@pytest.mark.asyncio
async def test_resolve_active_without_focus(proxy, fake_backend):
    fake_backend.focused = None
    with pytest.raises(SelectorNotFound):
        await resolve(Selector.active(), proxy, default_windows())


@pytest.mark.asyncio
async def test_resolve_uses_listing(proxy):
    window = await resolve(Selector.by_title("shell"), proxy, default_windows())
    assert window.id == "1"
