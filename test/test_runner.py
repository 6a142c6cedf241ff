"""Unit tests for the client and server runners over loopback TCP."""

import threading

import pytest

import server.runner
from client.runner import run_client
from common.protocol import ExitCode
from server.listen import open_listener
from server.runner import run_server
from session.input import LineInputSource


@pytest.fixture
def listening(monkeypatch: pytest.MonkeyPatch) -> threading.Event:
    """Event set once run_server has its listening socket open."""
    event = threading.Event()

    def open_and_signal(port: int, bind_address: str = ""):
        listener = open_listener(port, bind_address)
        event.set()
        return listener

    monkeypatch.setattr(server.runner, "open_listener", open_and_signal)
    return event


@pytest.mark.unit
class TestRunners:
    """Tests for run_client and run_server."""

    def test_client_message_and_quit(
        self,
        free_port: int,
        listening: threading.Event,
        scripted_input,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        server_source, _server_readline = scripted_input
        codes: list[int] = []
        server_thread = threading.Thread(
            target=lambda: codes.append(
                run_server(
                    free_port,
                    "127.0.0.1",
                    input_source=server_source,
                    accept_timeout_s=5,
                    quit_command="QUIT",
                )
            )
        )
        server_thread.start()
        assert listening.wait(timeout=5)

        lines = iter(["hello\n", "QUIT\n"])
        client_source = LineInputSource(readline=lambda _size: next(lines, ""))
        client_code = run_client(
            free_port, "127.0.0.1", input_source=client_source, connect_timeout_s=5, quit_command="QUIT"
        )
        server_thread.join(timeout=10)

        assert not server_thread.is_alive()
        assert client_code == ExitCode.SUCCESS
        assert codes == [ExitCode.SUCCESS]

        out = capsys.readouterr().out
        assert "Socket listening on port" in out
        assert "Accepted Connection" in out
        assert "Connection Success" in out
        assert "They said: hello" in out
        assert "You quit the chat." in out
        assert "Other party quit!" in out

    def test_client_connection_failed(
        self, free_port: int, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = run_client(free_port, "127.0.0.1", connect_timeout_s=5)
        assert code == ExitCode.CONNECTION_FAILED
        assert "Connection failed" in capsys.readouterr().out

    def test_server_accept_timeout(
        self, free_port: int, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = run_server(free_port, "127.0.0.1", accept_timeout_s=0.05)
        assert code == ExitCode.CONNECTION_FAILED
        assert "Connection failed" in capsys.readouterr().out
