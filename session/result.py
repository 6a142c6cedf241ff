"""Session result types for tcp-chat.

Contains:
- TerminationReason: Why the conversation loop stopped
- SessionResult: Result from a conversation session
"""

from dataclasses import dataclass
from enum import Enum


class TerminationReason(Enum):
    """Why a session ended."""

    PEER_CLOSED = "peer_closed"  # Zero-byte receive, orderly close
    PEER_RESET = "peer_reset"  # Peer abruptly reset the connection
    TRANSPORT_ERROR = "transport_error"  # Any other send/recv/poll failure
    LOCAL_QUIT = "local_quit"  # Operator typed the quit command
    LOCAL_EOF = "local_eof"  # Operator input stream ended
    INTERRUPTED = "interrupted"  # Signal or explicit stop()

    @property
    def is_error(self) -> bool:
        return self in (TerminationReason.PEER_RESET, TerminationReason.TRANSPORT_ERROR)


@dataclass
class SessionResult:
    """Result from a conversation session.

    Attributes:
        reason: Why the session ended.
        error: The transport error, if the session ended on one.
        sent: Number of messages sent.
        received: Number of non-empty chunks received.
        bytes_sent: Total bytes sent.
        bytes_received: Total bytes received.
        elapsed_s: Session duration in seconds.
    """

    reason: TerminationReason
    error: Exception | None = None
    sent: int = 0
    received: int = 0
    bytes_sent: int = 0
    bytes_received: int = 0
    elapsed_s: float = 0.0

    @property
    def success(self) -> bool:
        """True if the session ended without a transport error."""
        return not self.reason.is_error
