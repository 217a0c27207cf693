from unittest.mock import AsyncMock, Mock

import pytest

from pysticky import ipc
from pysticky.constants import IPC_STREAM_LIMIT
from pysticky.models import GatewayOperationFailed, GatewayUnavailable


@pytest.fixture(autouse=True)
def niri_socket(monkeypatch):
    monkeypatch.setenv("NIRI_SOCKET", "/tmp/niri.test.sock")


@pytest.fixture
def mock_open_connection(mocker):
    reader = AsyncMock()
    # StreamWriter methods write and close are synchronous, drain and wait_closed are async
    writer = Mock()
    writer.drain = AsyncMock()
    writer.wait_closed = AsyncMock()

    mock_connect = mocker.patch("asyncio.open_unix_connection", return_value=(reader, writer))
    return mock_connect, reader, writer


@pytest.mark.asyncio
async def test_niri_connection_context_manager(mock_open_connection):
    mock_connect, reader, writer = mock_open_connection
    logger = Mock()

    async with ipc.niri_connection(logger) as (r, w):
        assert r == reader
        assert w == writer

    mock_connect.assert_called_once_with("/tmp/niri.test.sock", limit=IPC_STREAM_LIMIT)
    writer.close.assert_called_once()
    writer.wait_closed.assert_awaited_once()


@pytest.mark.asyncio
async def test_niri_connection_error(mocker):
    mocker.patch("asyncio.open_unix_connection", side_effect=FileNotFoundError)
    logger = Mock()

    with pytest.raises(GatewayUnavailable):
        async with ipc.niri_connection(logger):
            pass

    logger.critical.assert_called_with("niri socket not found! is it running ?")


def test_missing_socket_variable(monkeypatch):
    monkeypatch.delenv("NIRI_SOCKET")
    with pytest.raises(GatewayUnavailable):
        ipc.get_socket_path()


@pytest.mark.asyncio
async def test_request_ok(mock_open_connection):
    _, reader, writer = mock_open_connection
    reader.readline.return_value = b'{"Ok":{"Windows":[]}}\n'

    result = await ipc.niri_request("Windows", logger=Mock())

    assert result == {"Windows": []}
    writer.write.assert_called_once_with(b'"Windows"\n')


@pytest.mark.asyncio
async def test_request_action(mock_open_connection):
    _, reader, writer = mock_open_connection
    reader.readline.return_value = b'{"Ok":"Handled"}\n'

    await ipc.niri_request({"Action": {"FocusWindow": {"id": 3}}}, logger=Mock())

    writer.write.assert_called_once_with(b'{"Action": {"FocusWindow": {"id": 3}}}\n')


@pytest.mark.asyncio
async def test_request_error(mock_open_connection):
    _, reader, _ = mock_open_connection
    reader.readline.return_value = b'{"Err":"Window not found"}\n'

    with pytest.raises(GatewayOperationFailed, match="Window not found"):
        await ipc.niri_request("FocusedWindow", logger=Mock())


@pytest.mark.asyncio
async def test_request_invalid_json(mock_open_connection):
    _, reader, _ = mock_open_connection
    reader.readline.return_value = b"hello\n"

    with pytest.raises(GatewayOperationFailed):
        await ipc.niri_request("Windows", logger=Mock())


@pytest.mark.asyncio
async def test_request_no_answer(mock_open_connection):
    _, reader, _ = mock_open_connection
    reader.readline.return_value = b""

    with pytest.raises(GatewayUnavailable):
        await ipc.niri_request("Windows", logger=Mock())


@pytest.mark.asyncio
async def test_request_retried_on_reset(mock_open_connection, mocker):
    _, reader, _ = mock_open_connection
    mocker.patch("pysticky.ipc.asyncio.sleep", new_callable=AsyncMock)
    reader.readline.side_effect = [ConnectionResetError, b'{"Ok":"Handled"}\n']
    logger = Mock()

    assert await ipc.niri_request("Windows", logger=logger) == "Handled"
    logger.warning.assert_called_once()


@pytest.mark.asyncio
async def test_request_gives_up(mock_open_connection, mocker):
    _, reader, _ = mock_open_connection
    mocker.patch("pysticky.ipc.asyncio.sleep", new_callable=AsyncMock)
    reader.readline.side_effect = ConnectionResetError

    with pytest.raises(GatewayUnavailable):
        await ipc.niri_request("Windows", logger=Mock())
    assert reader.readline.await_count == ipc.IPC_MAX_RETRIES


@pytest.mark.asyncio
async def test_event_stream(mock_open_connection):
    _, reader, writer = mock_open_connection
    reader.readline.return_value = b'{"Ok":"Handled"}\n'

    assert await ipc.get_event_stream(Mock()) == (reader, writer)
    writer.write.assert_called_once_with(b'"EventStream"\n')
    writer.close.assert_not_called()


@pytest.mark.asyncio
async def test_event_stream_refused(mock_open_connection):
    _, reader, writer = mock_open_connection
    reader.readline.return_value = b'{"Err":"nope"}\n'

    with pytest.raises(GatewayUnavailable):
        await ipc.get_event_stream(Mock())
    writer.close.assert_called_once()


@pytest.mark.asyncio
async def test_request_broken_pipe(mock_open_connection):
    _, _, writer = mock_open_connection
    writer.drain.side_effect = BrokenPipeError(32, "Broken pipe")

    with pytest.raises(GatewayUnavailable, match="BrokenPipeError"):
        await ipc.niri_request({"Action": {"FocusWindow": {"id": 3}}}, logger=Mock())
    writer.close.assert_called_once()


@pytest.mark.asyncio
async def test_request_permission_denied(mocker):
    mocker.patch("asyncio.open_unix_connection", side_effect=PermissionError(13, "Permission denied"))

    with pytest.raises(GatewayUnavailable):
        await ipc.niri_request("Windows", logger=Mock())


@pytest.mark.asyncio
async def test_request_reply_over_limit(mock_open_connection):
    _, reader, _ = mock_open_connection
    reader.readline.side_effect = ValueError("Separator is found, but chunk is longer than limit")

    with pytest.raises(GatewayUnavailable):
        await ipc.niri_request("Windows", logger=Mock())
    assert reader.readline.await_count == 1


@pytest.mark.asyncio
async def test_event_stream_broken_pipe(mock_open_connection):
    mock_connect, _, writer = mock_open_connection
    writer.drain.side_effect = BrokenPipeError(32, "Broken pipe")

    with pytest.raises(GatewayUnavailable):
        await ipc.get_event_stream(Mock())
    writer.close.assert_called_once()
    assert mock_connect.call_args.kwargs["limit"] == IPC_STREAM_LIMIT
