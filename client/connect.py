"""Client-side connection establishment for tcp-chat."""

import logging
import socket

from common.connection import Connection, Role, SetupError

logger = logging.getLogger(__name__)


def connect_to_host(port: int, address: str, timeout_s: float | None = None) -> Connection:
    """Connect to a listening peer at a numeric IPv4 address.

    timeout_s bounds the connect attempt only; the returned socket is
    blocking.

    Returns Connection on success.
    Raises SetupError on failure, after closing any socket it created.
    """
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP)
    except OSError as e:
        raise SetupError(f"Unable to create socket: {e}") from e

    logger.info(f"Client: connecting to {address}:{port}...")
    try:
        sock.settimeout(timeout_s)
        sock.connect((address, port))
        sock.settimeout(None)
    except OSError as e:
        sock.close()
        raise SetupError(f"Socket error during connect to {address}:{port}: {e}") from e

    logger.info(f"Client: connected to {address}:{port}")
    return Connection(sock=sock, role=Role.CLIENT, peer_address=(address, port))
