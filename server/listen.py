"""Server-side connection establishment for tcp-chat.

Contains:
- open_listener: Create, bind and listen on a socket
- accept_one: Accept the single inbound connection of this run
- host_server: open_listener followed by accept_one
"""

import logging
import socket

from common.connection import Connection, Role, SetupError

logger = logging.getLogger(__name__)

# Wildcard bind address
ANY_ADDRESS = ""


def open_listener(port: int, bind_address: str = ANY_ADDRESS) -> socket.socket:
    """Create a TCP socket bound to (bind_address, port) and listening.

    Raises SetupError on failure, after closing the socket.
    """
    try:
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP)
    except OSError as e:
        raise SetupError(f"Unable to create socket: {e}") from e

    try:
        listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        listener.bind((bind_address, port))
        listener.listen(socket.SOMAXCONN)
    except OSError as e:
        listener.close()
        raise SetupError(f"Unable to listen on port {port}: {e}") from e

    bound_port = listener.getsockname()[1]
    logger.info(f"Server: listening on port {bound_port}, waiting on connection from client...")
    return listener


def accept_one(listener: socket.socket, timeout_s: float | None = None) -> Connection:
    """Block until one client connects, then close the listener.

    Only one connection is served per run, so the listening socket is
    always closed, whether or not accept succeeds.

    Raises SetupError if accept fails or times out.
    """
    try:
        listener.settimeout(timeout_s)
        sock, peer_address = listener.accept()
    except OSError as e:
        raise SetupError(f"Accept failed: {e}") from e
    finally:
        listener.close()

    sock.settimeout(None)
    logger.info(f"Server: accepted connection from {peer_address[0]}:{peer_address[1]}")
    return Connection(sock=sock, role=Role.SERVER, peer_address=peer_address)


def host_server(
    port: int,
    bind_address: str = ANY_ADDRESS,
    accept_timeout_s: float | None = None,
) -> Connection:
    """Listen on port and accept exactly one connection.

    Returns Connection on success.
    Raises SetupError on failure.
    """
    listener = open_listener(port, bind_address)
    return accept_one(listener, timeout_s=accept_timeout_s)
