"""Client runner for tcp-chat.

Contains run_client() which connects to the server, runs one chat
session and tears the connection down, returning an exit code.
"""

import logging

from client.connect import connect_to_host
from common.connection import Connection, Role, SetupError
from common.protocol import QUIT_COMMAND, ExitCode
from common.report import ConnectionReport
from session.input import LineInputSource
from session.loop import run_session
from session.report import SessionReport
from session.teardown import close_connection

logger = logging.getLogger(__name__)


def run_client(
    port: int,
    address: str,
    input_source: LineInputSource | None = None,
    connect_timeout_s: float | None = None,
    quit_command: str | None = QUIT_COMMAND,
) -> int:
    """Run client: connect + chat session. Returns exit code.

    The client:
    - Connects to the server at address:port
    - Runs the conversation loop until either side ends it
    - Always closes the connection before returning
    """
    conn: Connection | None = None
    try:
        try:
            conn = connect_to_host(port, address, timeout_s=connect_timeout_s)
        except SetupError as e:
            logger.warning(f"Connection failed: {e}")
            ConnectionReport(connected=False, error=e).print()
            return ExitCode.CONNECTION_FAILED

        ConnectionReport(
            connected=True,
            role=Role.CLIENT,
            peer=conn.describe_peer(),
            quit_command=quit_command,
        ).print()

        result = run_session(conn, input_source, quit_command=quit_command)
        SessionReport(result=result).print()
        return ExitCode.SUCCESS

    finally:
        close_connection(conn)
