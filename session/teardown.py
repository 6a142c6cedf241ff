"""Session teardown for tcp-chat."""

import logging

from common.connection import Connection

logger = logging.getLogger(__name__)


def close_connection(conn: Connection | None) -> None:
    """Close the connection's socket if it is still open.

    Safe to call more than once, and with None (establishment failed).
    Python's socket module owns any platform networking subsystem state,
    so there is nothing further to release.
    """
    if conn is None or conn.sock is None:
        return

    sock, conn.sock = conn.sock, None
    try:
        sock.close()
    except OSError as e:
        logger.warning(f"Error closing socket: {e}")
    else:
        logger.info(f"Closed connection to {conn.describe_peer()}")
