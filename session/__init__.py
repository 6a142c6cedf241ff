"""Session package for tcp-chat.

This package runs the chat once a connection is established:
- Background operator line input
- Send/poll/receive conversation loop
- Termination reasons and session results
- Teardown of the connection
"""

from session.input import FdLineReader, LineInputSource, split_to_capacity, trim_line
from session.loop import ConversationLoop, LoopState, display_incoming, run_session
from session.report import SessionReport
from session.result import SessionResult, TerminationReason
from session.teardown import close_connection

__all__ = [
    "ConversationLoop",
    "FdLineReader",
    "LineInputSource",
    "LoopState",
    "SessionReport",
    "SessionResult",
    "TerminationReason",
    "close_connection",
    "display_incoming",
    "run_session",
    "split_to_capacity",
    "trim_line",
]
