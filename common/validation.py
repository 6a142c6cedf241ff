"""Operator input validation for tcp-chat.

Contains:
- parse_role, parse_port, parse_ipv4: Pure validators returning None on invalid input
- prompt_role, prompt_port, prompt_ipv4: Blocking retry loops around the validators
"""

import logging
import re
from collections.abc import Callable

from common.connection import Role
from common.protocol import MAX_PORT, MIN_PORT

logger = logging.getLogger(__name__)

# Leading integer of a token, as sscanf("%d") reads it
_LEADING_INT = re.compile(r"[+-]?\d+")

_OCTET_COUNT = 4
_OCTET_MAX = 255

ReadLine = Callable[[], str]
Write = Callable[[str], object]


def _first_token(text: str) -> str | None:
    tokens = text.split()
    return tokens[0] if tokens else None


def parse_role(text: str) -> Role | None:
    """Parse the role menu choice: '1' runs the server, '2' the client."""
    match text[:1]:
        case "1":
            return Role.SERVER
        case "2":
            return Role.CLIENT
        case _:
            return None


def parse_port(text: str) -> int | None:
    """Parse a port number from the first token of text.

    Returns the port if it is an integer in [MIN_PORT, MAX_PORT], else None.
    """
    token = _first_token(text)
    if token is None:
        return None

    match = _LEADING_INT.match(token)
    if match is None:
        return None

    port = int(match.group())
    if MIN_PORT <= port <= MAX_PORT:
        return port
    return None


def parse_ipv4(text: str) -> str | None:
    """Parse a numeric dotted-quad IPv4 address from the first token of text.

    Valid iff the token holds only digits and dots, has exactly four
    non-empty octets, and each octet is in 0..255. No hostname resolution.

    Returns the normalized address (e.g. "010.0.0.1" -> "10.0.0.1"), or None.
    """
    token = _first_token(text)
    if token is None:
        return None

    if any(not (ch.isdigit() and ch.isascii()) and ch != "." for ch in token):
        return None

    octets = token.split(".")
    if len(octets) != _OCTET_COUNT:
        return None

    values = []
    for octet in octets:
        if not octet:
            return None
        value = int(octet)
        if value > _OCTET_MAX:
            return None
        values.append(value)

    return ".".join(str(v) for v in values)


def _read_or_eof(read_line: ReadLine) -> str:
    line = read_line()
    if line == "":
        raise EOFError("operator input closed")
    return line


def prompt_role(read_line: ReadLine, write: Write) -> Role:
    """Ask for the role until a valid choice is entered.

    Raises:
        EOFError: If operator input ends.
    """
    while True:
        write("Press 1 to run chat server or 2 to run chat client and then press enter: ")
        role = parse_role(_read_or_eof(read_line))
        if role is not None:
            return role
        write("\nYou have provided invalid input... try again!\n")


def prompt_port(role: Role, read_line: ReadLine, write: Write) -> int:
    """Ask for a port number until a valid one is entered.

    Raises:
        EOFError: If operator input ends.
    """
    while True:
        if role == Role.CLIENT:
            write(
                f"\nType the port number ({MIN_PORT}-{MAX_PORT}) you want to connect to "
                "on the server and press enter: "
            )
        else:
            write(
                f"\nType the port number ({MIN_PORT}-{MAX_PORT}) you want your server "
                "to listen on and press enter: "
            )
        line = _read_or_eof(read_line)
        port = parse_port(line)
        if port is not None:
            return port
        logger.debug(f"Rejected port input {line.strip()!r}")
        write("\nInvalid Input.  try again.\n")


def prompt_ipv4(read_line: ReadLine, write: Write) -> str:
    """Ask for an IPv4 address until a valid one is entered.

    Raises:
        EOFError: If operator input ends.
    """
    while True:
        write("\nWhat's the IP address you'd like to connect to? ")
        line = _read_or_eof(read_line)
        address = parse_ipv4(line)
        if address is not None:
            return address
        logger.debug(f"Rejected address input {line.strip()!r}")
        write("\nInvalid Input IP address.  Try again.\n")
