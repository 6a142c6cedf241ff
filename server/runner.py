"""Server runner for tcp-chat.

Contains run_server() which listens for a single client, runs one chat
session with it and tears the connection down, returning an exit code.
"""

import logging

from common.connection import Connection, Role, SetupError
from common.protocol import QUIT_COMMAND, ExitCode
from common.report import ConnectionReport
from server.listen import ANY_ADDRESS, accept_one, open_listener
from session.input import LineInputSource
from session.loop import run_session
from session.report import SessionReport
from session.teardown import close_connection

logger = logging.getLogger(__name__)


def run_server(
    port: int,
    bind_address: str = ANY_ADDRESS,
    input_source: LineInputSource | None = None,
    accept_timeout_s: float | None = None,
    quit_command: str | None = QUIT_COMMAND,
) -> int:
    """Run server: listen, accept one client, chat. Returns exit code.

    Only one connection is served per run. There is no reconnection: once
    the session ends the server returns.
    """
    conn: Connection | None = None
    try:
        try:
            listener = open_listener(port, bind_address)
            print(
                f"\nSocket listening on port {port}.  Waiting on connection from client...",
                flush=True,
            )
            conn = accept_one(listener, timeout_s=accept_timeout_s)
        except SetupError as e:
            logger.warning(f"Hosting failed: {e}")
            ConnectionReport(connected=False, error=e).print()
            return ExitCode.CONNECTION_FAILED

        ConnectionReport(
            connected=True,
            role=Role.SERVER,
            peer=conn.describe_peer(),
            quit_command=quit_command,
        ).print()

        result = run_session(conn, input_source, quit_command=quit_command)
        SessionReport(result=result).print()
        return ExitCode.SUCCESS

    finally:
        close_connection(conn)
        logger.info("Server shutdown complete")
