"""Conversation loop for tcp-chat.

Contains:
- LoopState: States of the conversation loop
- ConversationLoop: Multiplexes operator input and socket data into one cycle
- run_session: Run a loop with SIGINT/SIGTERM wired to a clean stop
"""

import codecs
import logging
import signal
import threading
import time
from collections.abc import Callable
from enum import Enum
from types import FrameType

from common.connection import Connection, PeerResetError, TransportError
from common.io import poll_readable, recv_chunk, send_message
from common.protocol import (
    ENCODING,
    INPUT_CANCEL_TIMEOUT_S,
    MESSAGE_CAPACITY,
    POLL_TIMEOUT_S,
    QUIT_COMMAND,
    TRACE,
    StreamSocket,
)
from session.input import LineInputSource
from session.result import SessionResult, TerminationReason

logger = logging.getLogger(__name__)


class LoopState(Enum):
    """States of the conversation loop."""

    POLLING = "polling"
    SENDING = "sending"
    RECEIVING = "receiving"
    TERMINATED = "terminated"


def display_incoming(text: str) -> None:
    """Show a received chunk to the operator."""
    print(f"They said: {text}", flush=True)


class ConversationLoop:
    """Duplex send/receive cycle over one established connection.

    Each step() sends the operator's line if one is ready, then polls the
    socket for up to poll_timeout_s and displays whatever arrived. The loop
    ends on orderly peer close, transport error, the quit command, operator
    EOF, or stop().

    Received chunks follow TCP byte-stream semantics: one chunk may carry a
    fragment of a peer message or several of them concatenated. Text is
    decoded across chunks, so a character split between two chunks is shown
    intact.
    """

    def __init__(
        self,
        conn: Connection,
        input_source: LineInputSource,
        display: Callable[[str], None] = display_incoming,
        poll_timeout_s: float = POLL_TIMEOUT_S,
        quit_command: str | None = QUIT_COMMAND,
    ) -> None:
        if conn.sock is None:
            raise ValueError("Connection is not open")
        self._sock: StreamSocket = conn.sock
        self._conn = conn
        self._input = input_source
        self._display = display
        self._poll_timeout_s = poll_timeout_s
        self._quit_command = quit_command

        self._terminate = threading.Event()
        # Reentrant: a signal handler may call stop() while the loop holds it
        self._reason_lock = threading.RLock()
        self._reason: TerminationReason | None = None
        self._error: Exception | None = None
        self._state = LoopState.POLLING
        self._incoming = b""
        # Characters may straddle chunk boundaries
        self._decoder = codecs.getincrementaldecoder(ENCODING)(errors="replace")

        self._sent = 0
        self._received = 0
        self._bytes_sent = 0
        self._bytes_received = 0

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def terminated(self) -> bool:
        """The session termination flag."""
        return self._terminate.is_set()

    @property
    def reason(self) -> TerminationReason | None:
        return self._reason

    @property
    def incoming(self) -> bytes:
        """The most recently received chunk (cleared after display)."""
        return self._incoming

    def stop(self, reason: TerminationReason = TerminationReason.INTERRUPTED) -> None:
        """Request termination; the loop exits after its current step."""
        self._finish(reason)

    def _finish(self, reason: TerminationReason, error: Exception | None = None) -> None:
        # First reason wins
        with self._reason_lock:
            if self._reason is None:
                self._reason = reason
                self._error = error
        self._terminate.set()

    def _handle_transport_error(self, e: TransportError) -> None:
        if isinstance(e, PeerResetError):
            logger.warning(f"Other party disconnected: {e}")
            self._finish(TerminationReason.PEER_RESET, e)
        else:
            logger.error(f"Socket error: {e}")
            self._finish(TerminationReason.TRANSPORT_ERROR, e)

    def _is_quit(self, message: str) -> bool:
        return (
            self._quit_command is not None
            and message.strip().upper() == self._quit_command.upper()
        )

    def _send_pending(self) -> None:
        self._state = LoopState.SENDING
        message = self._input.take()

        if message is None:
            logger.info("Operator input closed, ending session")
            self._finish(TerminationReason.LOCAL_EOF)
            return

        if self._is_quit(message):
            logger.info("Quit command entered, ending session")
            self._finish(TerminationReason.LOCAL_QUIT)
            return

        if message:
            try:
                self._bytes_sent += send_message(self._sock, message)
                self._sent += 1
            except TransportError as e:
                self._handle_transport_error(e)
        else:
            logger.log(TRACE, "Skipping empty line")

        if not self.terminated:
            self._input.start()

    def _receive(self) -> None:
        self._state = LoopState.RECEIVING
        try:
            self._incoming = recv_chunk(self._sock, MESSAGE_CAPACITY)
        except TransportError as e:
            self._handle_transport_error(e)
            return

        if not self._incoming:
            logger.info("Other party closed the connection")
            tail = self._decoder.decode(b"", final=True)
            if tail:
                self._display(tail)
            self._finish(TerminationReason.PEER_CLOSED)
            return

        self._received += 1
        self._bytes_received += len(self._incoming)
        text = self._decoder.decode(self._incoming)
        if text:
            self._display(text)
        self._incoming = b""

    def step(self) -> None:
        """Run one send/poll/receive cycle."""
        if self._input.ready:
            self._send_pending()
        if self.terminated:
            return

        self._state = LoopState.POLLING
        try:
            readable = poll_readable(self._sock, self._poll_timeout_s)
        except TransportError as e:
            self._handle_transport_error(e)
            return

        if readable:
            self._receive()

    def run(self) -> SessionResult:
        """Run until the termination flag is set.

        Starts the operator input reader, cycles step(), then cancels any
        outstanding read.
        """
        logger.info(f"Starting conversation with {self._conn.describe_peer()}")
        start = time.monotonic()

        if not self._input.outstanding and not self._input.ready:
            self._input.start()

        try:
            while not self.terminated:
                self.step()
        finally:
            self._state = LoopState.TERMINATED
            self._input.cancel(INPUT_CANCEL_TIMEOUT_S)

        reason = self._reason
        assert reason is not None
        result = SessionResult(
            reason=reason,
            error=self._error,
            sent=self._sent,
            received=self._received,
            bytes_sent=self._bytes_sent,
            bytes_received=self._bytes_received,
            elapsed_s=time.monotonic() - start,
        )
        logger.info(
            f"Conversation ended ({reason.value}, {result.sent} sent, "
            f"{result.received} received)"
        )
        return result


def run_session(
    conn: Connection,
    input_source: LineInputSource | None = None,
    display: Callable[[str], None] = display_incoming,
    poll_timeout_s: float = POLL_TIMEOUT_S,
    quit_command: str | None = QUIT_COMMAND,
) -> SessionResult:
    """Run a conversation loop on conn until it terminates.

    On the main thread, SIGINT and SIGTERM stop the loop cleanly and the
    previous handlers are restored afterwards.
    """
    loop = ConversationLoop(
        conn,
        input_source if input_source is not None else LineInputSource(),
        display=display,
        poll_timeout_s=poll_timeout_s,
        quit_command=quit_command,
    )

    if threading.current_thread() is not threading.main_thread():
        return loop.run()

    def handle_signal(_sig: int, _frame: FrameType | None) -> None:
        logger.warning("Signal received during session - exiting")
        loop.stop(TerminationReason.INTERRUPTED)

    previous = {
        sig: signal.signal(sig, handle_signal) for sig in (signal.SIGINT, signal.SIGTERM)
    }
    try:
        return loop.run()
    finally:
        for sig, handler in previous.items():
            if handler is not None:
                signal.signal(sig, handler)
