#!/usr/bin/env python3
"""Two-peer TCP text chat."""

import argparse
import logging
import sys

from client.runner import run_client
from common.connection import Role
from common.protocol import DEFAULT_LOG_LEVEL, ExitCode
from common.validation import parse_ipv4, parse_port, prompt_ipv4, prompt_port, prompt_role
from server.runner import run_server
from session.input import FdLineReader, LineInputSource

logger = logging.getLogger(__name__)


def _write(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def _port_arg(value: str) -> int:
    port = parse_port(value)
    if port is None:
        raise argparse.ArgumentTypeError(f"invalid port: {value!r}")
    return port


def _address_arg(value: str) -> str:
    address = parse_ipv4(value)
    if address is None:
        raise argparse.ArgumentTypeError(f"invalid IPv4 address: {value!r}")
    return address


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Chat with one peer over TCP",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                 Prompt for role, port and address
  %(prog)s -r server -p 5000               Wait for a client on port 5000
  %(prog)s -r client -p 5000 -a 127.0.0.1  Connect to a server on this machine

Options not given on the command line are prompted for.
""",
    )
    parser.add_argument(
        "-r", "--role", type=str, choices=[r.value for r in Role],
        help="Run as server (listen) or client (connect)",
    )
    parser.add_argument("-p", "--port", type=_port_arg, help="TCP port (1-65535)")
    parser.add_argument(
        "-a", "--address", type=_address_arg,
        help="Server IPv4 address to connect to (client only)",
    )
    parser.add_argument(
        "-b", "--bind", type=_address_arg, default="",
        help="Local IPv4 address to listen on (server only, default: all interfaces)",
    )
    parser.add_argument(
        "--log-level", type=str.upper, default=DEFAULT_LOG_LEVEL,
        choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Log level (default: {DEFAULT_LOG_LEVEL})",
    )
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level)

    # One reader serves the prompts and the chat, as it buffers ahead
    reader = FdLineReader()
    read_line = reader.readline

    try:
        role = Role(args.role) if args.role else prompt_role(read_line, _write)
        if role == Role.SERVER:
            _write("\nYou have selected to run the chat server\n")
        else:
            _write("\nYou have selected to run the chat client.\n")

        port = args.port if args.port is not None else prompt_port(role, read_line, _write)
        _write(f"\nYou have entered port no: {port}\n")

        if role == Role.CLIENT:
            address = args.address if args.address else prompt_ipv4(read_line, _write)
            _write(f"\nYou have entered IP Address: {address}\n")
    except EOFError:
        logger.error("Input closed before a connection was set up")
        return ExitCode.USAGE

    except KeyboardInterrupt:
        _write("\n")
        logger.warning("Interrupted before a connection was set up")
        return ExitCode.INTERRUPTED

    input_source = LineInputSource(readline=reader.readline, interrupt=reader.interrupt)
    try:
        if role == Role.SERVER:
            return run_server(port, args.bind, input_source=input_source)
        return run_client(port, address, input_source=input_source)
    except KeyboardInterrupt:
        # Sessions install their own handler; this covers connect and accept
        _write("\n")
        logger.warning("Interrupted while setting up the connection")
        return ExitCode.INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
