"""Socket I/O helpers for tcp-chat.

Contains:
- send_message: Send one line of text over the connection
- poll_readable: Timed readability poll
- recv_chunk: Receive up to one buffer of bytes

OS-level failures are mapped to TransportError, with abrupt peer
termination raised as PeerResetError.
"""

import logging
import select

from common.connection import PeerResetError, TransportError
from common.protocol import ENCODING, MESSAGE_CAPACITY, TRACE, StreamSocket

logger = logging.getLogger(__name__)

PEER_RESET_ERRORS = (ConnectionResetError, ConnectionAbortedError, BrokenPipeError)


def send_message(sock: StreamSocket, text: str) -> int:
    """Send the bytes of text, without any delimiter. Returns bytes sent.

    Raises:
        PeerResetError: If the peer reset the connection.
        TransportError: On any other send failure.
    """
    data = text.encode(ENCODING)
    try:
        sock.sendall(data)
    except PEER_RESET_ERRORS as e:
        raise PeerResetError(f"Peer reset during send: {e}") from e
    except OSError as e:
        raise TransportError(f"Send failed: {e}") from e
    logger.log(TRACE, f"Sent {len(data)} bytes")
    return len(data)


def poll_readable(sock: StreamSocket, timeout_s: float) -> bool:
    """Return True if sock has data (or EOF) pending within timeout_s.

    Raises:
        PeerResetError: If the peer reset the connection.
        TransportError: If the poll itself fails.
    """
    try:
        readable, _, _ = select.select([sock], [], [], timeout_s)
    except PEER_RESET_ERRORS as e:
        raise PeerResetError(f"Peer reset during poll: {e}") from e
    except (OSError, ValueError) as e:
        raise TransportError(f"Poll failed: {e}") from e
    return bool(readable)


def recv_chunk(sock: StreamSocket, size: int = MESSAGE_CAPACITY) -> bytes:
    """Receive up to size bytes. b"" means the peer closed in an orderly way.

    The chunk has no relation to the peer's send boundaries: it may hold part
    of a message or several messages merged together.

    Raises:
        PeerResetError: If the peer reset the connection.
        TransportError: On any other receive failure.
    """
    try:
        data = sock.recv(size)
    except PEER_RESET_ERRORS as e:
        raise PeerResetError(f"Peer reset during receive: {e}") from e
    except OSError as e:
        raise TransportError(f"Receive failed: {e}") from e
    logger.log(TRACE, f"Received {len(data)} bytes")
    return data
