import asyncio

import pytest

from pysticky.models import ReactorState
from pysticky.reactor import EventReactor

from .testtools import STAGE_ID


@pytest.fixture
def reactor(store, proxy, stage, test_logger):
    return EventReactor(store, proxy, stage, test_logger)


@pytest.mark.asyncio
async def test_only_floating_windows_follow(reactor, sticky_store, fake_backend):
    reactor.publish("3")
    moved = await reactor.reconcile("3", reactor.generation)
    assert moved == 1
    assert fake_backend.moves == [("1", "3")]
    assert fake_backend.position("2") == "2"


@pytest.mark.asyncio
async def test_membership_untouched(reactor, sticky_store, fake_backend):
    before = sticky_store.snapshot()
    fake_backend.failing.add("1")
    reactor.publish("3")
    await reactor.reconcile("3", reactor.generation)
    assert sticky_store.snapshot() == before
    assert sticky_store.commits == 1


@pytest.mark.asyncio
async def test_failures_do_not_abort(reactor, store, fake_backend, mocker):
    await store.update(lambda sticky, staged: ({"1", "2", "3"}, set()))
    fake_backend.failing.add("2")
    warning = mocker.spy(reactor.log, "warning")
    reactor.publish("3")
    moved = await reactor.reconcile("3", reactor.generation)
    assert moved == 2
    assert sorted(fake_backend.moves) == [("1", "3"), ("3", "3")]
    warning.assert_called_once()


@pytest.mark.asyncio
async def test_switch_to_stage_workspace_is_ignored(reactor, sticky_store, stage, fake_backend):
    await stage.get_id()
    reactor.publish(STAGE_ID)
    assert await reactor.reconcile(STAGE_ID, reactor.generation) == 0
    assert fake_backend.moves == []


@pytest.mark.asyncio
async def test_superseded_target_is_abandoned(reactor, store, fake_backend):
    await store.update(lambda sticky, staged: ({"1", "2", "3"}, set()))
    reactor.publish("2")
    generation = reactor.generation
    fake_backend.on_move = lambda window_id, workspace_id: reactor.publish("3")
    moved = await reactor.reconcile("2", generation)
    assert moved == 1
    assert len(fake_backend.moves) == 1


@pytest.mark.asyncio
async def test_state_transitions(reactor, sticky_store, fake_backend):
    seen = []
    fake_backend.on_move = lambda *_: seen.append(reactor.state)
    assert reactor.state == ReactorState.IDLE
    reactor.publish("3")
    await reactor.reconcile("3", reactor.generation)
    assert seen == [ReactorState.RECONCILING]
    assert reactor.state == ReactorState.IDLE
    assert reactor.reconciliations == 1


@pytest.mark.asyncio
async def test_waits_for_running_command(reactor, sticky_store, fake_backend):
    reactor.publish("3")
    async with sticky_store.exclusive():
        task = asyncio.create_task(reactor.reconcile("3", reactor.generation))
        await asyncio.sleep(0.01)
        assert fake_backend.moves == []
    assert await task == 1


@pytest.mark.asyncio
async def test_run_follows_switch_events(reactor, sticky_store, fake_backend):
    task = asyncio.create_task(reactor.run())
    try:
        await fake_backend.events.put("2")
        for _ in range(50):
            if fake_backend.moves:
                break
            await asyncio.sleep(0.01)
        assert fake_backend.moves == [("1", "2")]
        assert reactor.target == "2"
    finally:
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task


@pytest.mark.asyncio
async def test_latest_target_wins(reactor, sticky_store, fake_backend):
    fake_backend.gate = asyncio.Event()
    task = asyncio.create_task(reactor.run())
    try:
        await fake_backend.events.put("2")
        await asyncio.sleep(0.01)
        # the first reconciliation is stuck in a move: two more switches happen
        await fake_backend.events.put("3")
        await fake_backend.events.put("1")
        await asyncio.sleep(0.01)
        fake_backend.gate.set()
        for _ in range(50):
            if reactor.reconciliations >= 2:
                break
            await asyncio.sleep(0.01)
        assert fake_backend.moves == [("1", "2"), ("1", "1")]
    finally:
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task


def _broken_pipe_for(window_id):
    def on_move(moved_id, _workspace_id):
        if moved_id == window_id:
            raise BrokenPipeError(32, "Broken pipe")

    return on_move


@pytest.mark.asyncio
async def test_socket_errors_do_not_abort(reactor, store, fake_backend, mocker):
    await store.update(lambda sticky, staged: ({"1", "2", "3"}, set()))
    fake_backend.on_move = _broken_pipe_for("2")
    exception = mocker.spy(reactor.log, "exception")
    reactor.publish("3")
    assert await reactor.reconcile("3", reactor.generation) == 2
    assert sorted(fake_backend.moves) == [("1", "3"), ("3", "3")]
    exception.assert_called_once()
    assert reactor.state == ReactorState.IDLE


@pytest.mark.asyncio
async def test_keeps_running_after_socket_errors(reactor, sticky_store, fake_backend):
    fake_backend.on_move = _broken_pipe_for("1")
    task = asyncio.create_task(reactor.run())
    try:
        await fake_backend.events.put("2")
        for _ in range(50):
            if reactor.reconciliations >= 1:
                break
            await asyncio.sleep(0.01)
        assert not task.done()

        fake_backend.on_move = None
        await fake_backend.events.put("3")
        for _ in range(50):
            if fake_backend.moves:
                break
            await asyncio.sleep(0.01)
        assert fake_backend.moves == [("1", "3")]
        assert reactor.reconciliations == 2
    finally:
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
