"""Reporting abstractions for tcp-chat.

Contains:
- Report ABC: Base class for all reports
- ConnectionReport: Report after connection establishment
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from common.connection import Role


class Report(ABC):
    """Abstract base class for operator-facing reports."""

    @abstractmethod
    def print(self) -> None:
        """Print the report to stdout."""
        pass

    @abstractmethod
    def success(self) -> bool:
        """Return True if the report indicates success."""
        pass


@dataclass
class ConnectionReport(Report):
    """Report after connection establishment.

    When connected=True, role is required.
    When connected=False, error should be set.
    """

    connected: bool
    role: Role | None = None
    peer: str | None = None
    error: Exception | None = None
    quit_command: str | None = None

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.connected and self.role is None:
            raise ValueError("role is required when connected=True")

    def print(self) -> None:
        """Print the connection report."""
        if self.connected:
            assert self.role is not None
            if self.role == Role.SERVER:
                print(f"\nAccepted Connection!! (peer={self.peer or 'unknown'})")
            else:
                print(f"\nConnection Success!! (peer={self.peer or 'unknown'})")
            hint = "Connected.  Type your message and press enter to send it."
            if self.quit_command:
                hint += f"  Type {self.quit_command} and press enter to Quit."
            print(hint)
        else:
            print(f"\nConnection failed!! :( ({self.error})")

    def success(self) -> bool:
        """Return True if the connection was established."""
        return self.connected
