"""Common modules for tcp-chat.

This package contains shared code used by both client and server:
- protocol: Buffer sizes, timing, env config, StreamSocket Protocol, ExitCode
- connection: Role, Connection dataclass, error taxonomy
- validation: Port, IPv4 and role validation with prompt loops
- io: Socket send/poll/receive helpers
- report: Reporting abstractions
"""

from common.connection import (
    ChatError,
    Connection,
    PeerResetError,
    Role,
    SetupError,
    TransportError,
)
from common.protocol import (
    BUFFER_SIZE,
    MAX_PORT,
    MESSAGE_CAPACITY,
    MIN_PORT,
    POLL_TIMEOUT_S,
    QUIT_COMMAND,
    ExitCode,
    StreamSocket,
)
from common.validation import parse_ipv4, parse_port, parse_role

__all__ = [
    # Protocol
    "BUFFER_SIZE",
    "MESSAGE_CAPACITY",
    "MIN_PORT",
    "MAX_PORT",
    "POLL_TIMEOUT_S",
    "QUIT_COMMAND",
    "ExitCode",
    "StreamSocket",
    # Connection
    "Role",
    "Connection",
    # Validation
    "parse_ipv4",
    "parse_port",
    "parse_role",
    # Exceptions
    "ChatError",
    "PeerResetError",
    "SetupError",
    "TransportError",
]
