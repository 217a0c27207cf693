import sys
from unittest.mock import AsyncMock, Mock

import pytest

from pysticky.client import run_client
from pysticky.command import main, use_param
from pysticky.models import ExitCode

from .testtools import MockReader, MockWriter


def test_use_param():
    args = ["--debug", "/tmp/log", "add", "1"]
    assert use_param("--debug", args) == "/tmp/log"
    assert args == ["add", "1"]
    assert use_param("--config", args) == ""


def test_use_param_without_value():
    with pytest.raises(ValueError):
        use_param("--config", ["list", "--config"])


@pytest.fixture
def daemon(mocker):
    "Replaces the daemon socket, answer with `daemon.reply = b'...'`"
    writer = MockWriter()
    writer.write_eof = Mock()

    def connect(*_):
        return MockReader(daemon.reply), writer

    daemon = Mock(writer=writer, reply=b"OK\n")
    daemon.connect = mocker.patch("asyncio.open_unix_connection", new_callable=AsyncMock, side_effect=connect)
    return daemon


@pytest.mark.asyncio
async def test_client_ok(daemon, capsys):
    daemon.reply = b"OK\n1 [kitty] shell is now sticky\n"
    with pytest.raises(SystemExit) as exc:
        await run_client(["add", "--appid", "kitty"])
    assert exc.value.code == ExitCode.SUCCESS
    assert daemon.writer.output == b"add --appid kitty\n"
    assert capsys.readouterr().out == "1 [kitty] shell is now sticky\n"


@pytest.mark.asyncio
async def test_client_dash_form(daemon):
    with pytest.raises(SystemExit):
        await run_client(["toggle-active"])
    assert daemon.writer.output == b"toggle_active\n"


@pytest.mark.asyncio
async def test_client_error(daemon, capsys):
    daemon.reply = b"ERROR: PreconditionViolated: Cannot stage a non-sticky window: 1 [kitty] shell\n"
    with pytest.raises(SystemExit) as exc:
        await run_client(["stage", "1"])
    assert exc.value.code == ExitCode.COMMAND_ERROR
    assert capsys.readouterr().err == "Error: PreconditionViolated: Cannot stage a non-sticky window: 1 [kitty] shell\n"


@pytest.mark.asyncio
async def test_client_help_flag(daemon):
    with pytest.raises(SystemExit):
        await run_client(["--help"])
    assert daemon.writer.output == b"help\n"


@pytest.mark.asyncio
async def test_client_without_daemon(mocker):
    mocker.patch("asyncio.open_unix_connection", side_effect=ConnectionRefusedError)
    notify = mocker.patch("pysticky.client.notify_send", new_callable=AsyncMock)
    with pytest.raises(SystemExit) as exc:
        await run_client(["list"])
    assert exc.value.code == ExitCode.CONNECTION_ERROR
    notify.assert_awaited_once()


def test_main_missing_value(monkeypatch, mocker):
    monkeypatch.setattr(sys, "argv", ["pysticky", "list", "--debug"])
    init_logger = mocker.patch("pysticky.command.init_logger")
    with pytest.raises(SystemExit) as exc:
        main()
    assert exc.value.code == ExitCode.USAGE_ERROR
    init_logger.assert_not_called()


def test_main_already_running(monkeypatch, mocker, tmp_path):
    control = tmp_path / ".pysticky.sock"
    control.touch()
    monkeypatch.setattr(sys, "argv", ["pysticky"])
    monkeypatch.setattr("pysticky.command.CONTROL", str(control))
    mocker.patch("pysticky.command.init_logger")
    run_daemon = mocker.patch("pysticky.command.run_daemon")
    with pytest.raises(SystemExit) as exc:
        main()
    assert exc.value.code == ExitCode.USAGE_ERROR
    run_daemon.assert_not_called()
    assert control.exists()


def test_main_runs_client(monkeypatch, mocker):
    monkeypatch.setattr(sys, "argv", ["pysticky", "--config", "/tmp/x.toml", "version"])
    mocker.patch("pysticky.command.init_logger")
    run_client = mocker.patch("pysticky.command.run_client", new_callable=AsyncMock)
    main()
    run_client.assert_awaited_once_with(["version"])
