" generic fixtures "
import logging

import pytest
from pytest_asyncio import fixture

from pysticky.adapters.proxy import BackendProxy
from pysticky.engine import CommandEngine, StageWorkspace
from pysticky.state import StateStore

from .testtools import FakeBackend


def pytest_configure():
    "Runs once before all"
    from pysticky.logging_setup import init_logger

    init_logger("/dev/null", force_debug=True)


@pytest.fixture
def test_logger():
    return logging.getLogger("tests")


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def proxy(fake_backend, test_logger):
    return BackendProxy(fake_backend, test_logger)


@pytest.fixture
def store():
    return StateStore()


@pytest.fixture
def stage(proxy):
    return StageWorkspace(proxy, "stage")


@pytest.fixture
def engine(store, proxy, stage, test_logger):
    return CommandEngine(store, proxy, stage, test_logger)


@fixture
async def sticky_store(store):
    "Store with windows 1 and 2 sticky, 2 staged"
    await store.update(lambda sticky, staged: ({"1", "2"}, {"2"}))
    return store


@fixture
async def manager(monkeypatch, tmp_path, fake_backend):
    "A daemon using the fake backend and no configuration file"
    monkeypatch.setattr("pysticky.constants.CONFIG_FILE", tmp_path / "missing.toml")
    from pysticky.manager import Pysticky

    m = Pysticky(backend=fake_backend)
    await m.initialize()
    return m
