"""Background operator input for tcp-chat.

Contains:
- trim_line: Strip the line delimiters from one raw input line
- split_to_capacity: Split text so its head encodes within a byte limit
- FdLineReader: Line reader over a file descriptor whose wait can be interrupted
- LineInputSource: Single-shot background line reader with a ready flag
"""

import codecs
import logging
import os
import select
import sys
import threading
from collections.abc import Callable

from common.protocol import ENCODING, MESSAGE_CAPACITY, TRACE

logger = logging.getLogger(__name__)

# How often a blocked FdLineReader checks for interruption
READ_POLL_INTERVAL_S = 0.05

_READ_CHUNK = 4096


def trim_line(raw: str) -> str:
    """Strip one trailing newline, then one trailing carriage return."""
    if raw.endswith("\n"):
        raw = raw[:-1]
    if raw.endswith("\r"):
        raw = raw[:-1]
    return raw


def split_to_capacity(text: str, capacity: int, encoding: str = ENCODING) -> tuple[str, str]:
    """Split text into a head that encodes to at most capacity bytes and the rest.

    The split falls on a character boundary. A head is never empty while
    text is not, even if its first character alone exceeds the limit.
    """
    encoded = text.encode(encoding, errors="replace")
    if len(encoded) <= capacity:
        return text, ""
    head = encoded[:capacity].decode(encoding, errors="ignore")
    if not head:
        head = text[0]
    return head, text[len(head):]


class FdLineReader:
    """Reads text lines from a file descriptor (stdin by default).

    Waits for data with select() in short slices so that interrupt() can
    end a blocked readline(), which then returns "". Once interrupted the
    reader stays at EOF. The same reader should serve every read of the
    descriptor, since it buffers ahead.

    On Windows select() does not accept non-socket descriptors, so reads
    block until data arrives and interrupt() takes effect on the next read.
    """

    def __init__(
        self,
        fd: int | None = None,
        encoding: str = ENCODING,
        poll_interval_s: float = READ_POLL_INTERVAL_S,
    ) -> None:
        self._fd = sys.stdin.fileno() if fd is None else fd
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._poll_interval_s = poll_interval_s
        self._interrupted = threading.Event()
        self._text = ""
        self._eof = False

    def interrupt(self) -> None:
        """Make any blocked or future readline() return ""."""
        self._interrupted.set()

    def _wait_readable(self) -> bool:
        if sys.platform == "win32":
            return not self._interrupted.is_set()
        while not self._interrupted.is_set():
            readable, _, _ = select.select([self._fd], [], [], self._poll_interval_s)
            if readable:
                return True
        return False

    def _fill(self) -> bool:
        if not self._wait_readable():
            return False
        chunk = os.read(self._fd, _READ_CHUNK)
        if chunk:
            self._text += self._decoder.decode(chunk)
        else:
            self._eof = True
            self._text += self._decoder.decode(b"", final=True)
        return True

    def readline(self, size: int = -1, /) -> str:
        """Return the next line including its newline, at most size characters.

        Returns "" at EOF or once interrupted.
        """
        while not self._interrupted.is_set():
            newline = self._text.find("\n")
            end = len(self._text) if newline == -1 else newline + 1
            if size >= 0:
                end = min(end, size)
            complete = newline != -1 or self._eof or (size >= 0 and len(self._text) >= size)
            if complete:
                line, self._text = self._text[:end], self._text[end:]
                return line
            if not self._fill():
                break
        return ""


class LineInputSource:
    """Reads one line of operator text at a time on a background thread.

    Each start() delivers at most `capacity` encoded bytes of one line, so a
    longer line is delivered over successive reads. Text left over from a
    read that did not fit is delivered before the next read. When the line is
    complete the ready flag is set; take() collects it.

    Only one read is outstanding at any time. cancel() discards any line
    completed afterwards and calls `interrupt` (if given) to unblock the
    read. By default lines come from an FdLineReader on stdin, whose reads
    are interruptible; the reader thread is a daemon either way.
    """

    def __init__(
        self,
        readline: Callable[[int], str] | None = None,
        capacity: int = MESSAGE_CAPACITY,
        interrupt: Callable[[], None] | None = None,
        encoding: str = ENCODING,
    ) -> None:
        if readline is None:
            reader = FdLineReader()
            readline, interrupt = reader.readline, reader.interrupt
        self._readline = readline
        self._interrupt = interrupt
        self._capacity = capacity
        self._encoding = encoding
        self._ready = threading.Event()
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._message: str | None = None
        self._pending = ""
        self._thread: threading.Thread | None = None

    @property
    def ready(self) -> bool:
        """True when a completed line (or EOF) is waiting to be taken."""
        return self._ready.is_set()

    @property
    def outstanding(self) -> bool:
        """True while a read thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start one background read.

        Raises:
            RuntimeError: If a read is still outstanding or not yet taken.
        """
        if self.outstanding or self._ready.is_set():
            raise RuntimeError("A line read is already outstanding")

        self._cancelled.clear()
        with self._lock:
            self._message = None
        self._thread = threading.Thread(
            target=self._run, name="line-input", daemon=True
        )
        self._thread.start()

    def _run(self) -> None:
        with self._lock:
            raw, self._pending = self._pending, ""
        if not raw:
            try:
                raw = self._readline(self._capacity)
            except (OSError, ValueError) as e:
                # Closed or broken operator stream reads as EOF
                logger.warning(f"Input read failed: {e}")
                raw = ""

        head, rest = split_to_capacity(raw, self._capacity, self._encoding)
        if rest:
            logger.log(TRACE, f"Line exceeds {self._capacity} bytes, holding {len(rest)} characters")

        with self._lock:
            if self._cancelled.is_set():
                logger.debug("Discarding input completed after cancellation")
                return
            self._pending = rest
            self._message = None if head == "" else trim_line(head)
            self._ready.set()

    def take(self) -> str | None:
        """Return the completed line and clear the ready flag.

        Returns None if the operator stream reached EOF.

        Raises:
            RuntimeError: If no line is ready.
        """
        if not self._ready.is_set():
            raise RuntimeError("No input line is ready")

        # The flag is only set as the thread's last act, so this returns promptly
        if self._thread is not None:
            self._thread.join()
            self._thread = None

        with self._lock:
            message, self._message = self._message, None
        self._ready.clear()
        return message

    def cancel(self, timeout_s: float = 0.0) -> bool:
        """Signal cancellation and wait up to timeout_s for the reader.

        Returns True if no read is outstanding afterwards.
        """
        with self._lock:
            self._cancelled.set()
            self._ready.clear()
        if self._interrupt is not None:
            self._interrupt()
        thread = self._thread
        if thread is not None:
            thread.join(timeout_s)
            if thread.is_alive():
                logger.debug("Input thread still blocked on read, leaving it to exit with the process")
                return False
            self._thread = None
        return True
