"""Protocol definitions for tcp-chat.

Contains:
- StreamSocket Protocol for type checking
- Buffer sizes, port range and poll timing
- Environment configuration
- ExitCode enum
- Logging configuration
"""

import logging
import os
from enum import IntEnum
from typing import Protocol

# TRACE logging level (below DEBUG)
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

# Message buffers hold 299 meaningful bytes plus a terminator
BUFFER_SIZE = 300
MESSAGE_CAPACITY = BUFFER_SIZE - 1

ENCODING = "utf-8"

MIN_PORT = 1
MAX_PORT = 65535

# Readability poll timeout (configurable via envvar, microseconds)
POLL_TIMEOUT_S = int(os.environ.get("CHAT_POLL_TIMEOUT_US", "500")) / 1_000_000

# Local line that ends the session; empty disables it
QUIT_COMMAND: str | None = os.environ.get("CHAT_QUIT_COMMAND", "QUIT") or None

DEFAULT_LOG_LEVEL = os.environ.get("CHAT_LOG_LEVEL", "WARNING").upper()

# Bounded wait for the input thread when a session ends
INPUT_CANCEL_TIMEOUT_S = 0.1


class StreamSocket(Protocol):
    """Protocol for the socket operations needed by the conversation loop."""

    def sendall(self, data: bytes, /) -> None: ...
    def recv(self, bufsize: int, /) -> bytes: ...
    def fileno(self) -> int: ...
    def close(self) -> None: ...


class ExitCode(IntEnum):
    """Process exit codes."""

    SUCCESS = 0  # Session ran to termination
    CONNECTION_FAILED = 1  # Connection establishment failed
    USAGE = 2  # Operator input ended before a connection
    INTERRUPTED = 130  # Ctrl-C before a session started
