"""Connection state and errors for tcp-chat.

Contains:
- Role: Enum for client/server role
- ChatError and subclasses: Setup and transport failures
- Connection: Established connection state
"""

import socket
from dataclasses import dataclass
from enum import Enum


class Role(Enum):
    """Role in the chat session."""

    CLIENT = "client"  # Initiator, connects out
    SERVER = "server"  # Listener, accepts in


class ChatError(Exception):
    """Base class for tcp-chat errors."""

    pass


class SetupError(ChatError):
    """Raised when socket creation, bind, listen, accept or connect fails."""

    pass


class TransportError(ChatError):
    """Raised when send, receive or poll fails on an established connection."""

    pass


class PeerResetError(TransportError):
    """Raised when the peer abruptly reset the connection."""

    pass


@dataclass
class Connection:
    """Established connection state.

    Owns exactly one live socket. `sock` is None once torn down.
    """

    sock: socket.socket | None
    role: Role
    peer_address: tuple[str, int] | None = None

    @property
    def is_open(self) -> bool:
        return self.sock is not None

    def describe_peer(self) -> str:
        if self.peer_address is None:
            return "unknown"
        host, port = self.peer_address[:2]
        return f"{host}:{port}"
