"""pytest configuration and fixtures for tcp-chat tests.

Provides:
- ScriptedReadline: Blocking readline fed line by line from the test
- FailingSocket: Socket stand-in raising a chosen error
- Connected socket pair and loopback fixtures
- Markers for unit vs integration tests
"""

import queue
import socket
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from common.connection import Connection, Role
from session.input import LineInputSource


class ScriptedReadline:
    """Stand-in for sys.stdin.readline that blocks until the test feeds a line.

    Feeding None simulates EOF on the operator stream.
    """

    def __init__(self) -> None:
        self._lines: queue.Queue[str | None] = queue.Queue()
        self.calls: list[int] = []

    def feed(self, line: str | None) -> None:
        self._lines.put(line)

    def __call__(self, size: int = -1, /) -> str:
        self.calls.append(size)
        line = self._lines.get()
        return "" if line is None else line


class FailingSocket:
    """Socket stand-in whose send/recv raise the given error.

    fileno() returns a real descriptor that always polls readable so the
    loop reaches recv().
    """

    def __init__(self, error: OSError) -> None:
        self._error = error
        self._a, self._b = socket.socketpair()
        self._b.sendall(b"x")

    def sendall(self, data: bytes, /) -> None:
        raise self._error

    def recv(self, bufsize: int, /) -> bytes:
        raise self._error

    def fileno(self) -> int:
        return self._a.fileno()

    def close(self) -> None:
        self._a.close()
        self._b.close()


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test (runs chat.py)")


@pytest.fixture
def socket_pair() -> Generator[tuple[socket.socket, socket.socket], None, None]:
    """Yield two connected stream sockets, closed afterwards."""
    a, b = socket.socketpair()
    try:
        yield a, b
    finally:
        a.close()
        b.close()


@pytest.fixture
def connection_pair(
    socket_pair: tuple[socket.socket, socket.socket],
) -> tuple[Connection, Connection]:
    """Yield (client, server) Connections over a socket pair."""
    a, b = socket_pair
    return (
        Connection(sock=a, role=Role.CLIENT, peer_address=("127.0.0.1", 5000)),
        Connection(sock=b, role=Role.SERVER, peer_address=("127.0.0.1", 40000)),
    )


@pytest.fixture
def scripted_readline() -> ScriptedReadline:
    return ScriptedReadline()


@pytest.fixture
def scripted_input(
    scripted_readline: ScriptedReadline,
) -> Generator[tuple[LineInputSource, ScriptedReadline], None, None]:
    """Yield a LineInputSource reading from a ScriptedReadline.

    Any read still blocked at teardown is released with EOF.
    """
    source = LineInputSource(readline=scripted_readline)
    yield source, scripted_readline
    source.cancel()
    scripted_readline.feed(None)


@pytest.fixture
def failing_socket() -> Generator[Callable[[OSError], FailingSocket], None, None]:
    """Factory for FailingSocket instances, closed afterwards."""
    created: list[FailingSocket] = []

    def make(error: OSError) -> FailingSocket:
        sock = FailingSocket(error)
        created.append(sock)
        return sock

    yield make
    for sock in created:
        sock.close()


@pytest.fixture
def free_port() -> int:
    """Return a TCP port that was free on 127.0.0.1 a moment ago."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def script_dir() -> Path:
    """Return path to the main script directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def chat_path(script_dir: Path) -> Path:
    """Return path to chat.py."""
    return script_dir / "chat.py"
