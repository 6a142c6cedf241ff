"""Session reporting for tcp-chat.

Contains:
- SessionReport: Report after the conversation loop terminates
"""

from dataclasses import dataclass

from common.report import Report
from session.result import SessionResult, TerminationReason

_REASON_TEXT = {
    TerminationReason.PEER_CLOSED: "Other party quit!",
    TerminationReason.PEER_RESET: "Other party disconnected!",
    TerminationReason.LOCAL_QUIT: "You quit the chat.",
    TerminationReason.LOCAL_EOF: "Input closed, leaving the chat.",
    TerminationReason.INTERRUPTED: "Interrupted, leaving the chat.",
}


@dataclass
class SessionReport(Report):
    """Report after the conversation loop terminates."""

    result: SessionResult

    def print(self) -> None:
        """Print the session report."""
        r = self.result

        if r.reason == TerminationReason.TRANSPORT_ERROR:
            print(f"Socket Error! ({r.error})")
        else:
            print(_REASON_TEXT[r.reason])

        print(
            f"Session: {'ENDED' if r.success else 'FAILED'} "
            f"({r.sent} sent, {r.received} received, "
            f"{r.bytes_sent + r.bytes_received} bytes over {r.elapsed_s:.1f}s)"
        )

    def success(self) -> bool:
        """Return True if the session ended without a transport error."""
        return self.result.success
