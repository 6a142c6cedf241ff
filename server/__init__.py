"""Server package for tcp-chat.

Contains server-side connection establishment:
- listen: open_listener, accept_one, host_server

Note: run_server is not exported here to avoid importing session/ with
the package. Import directly from server.runner when needed.
"""

from server.listen import accept_one, host_server, open_listener

__all__ = [
    "accept_one",
    "host_server",
    "open_listener",
]
