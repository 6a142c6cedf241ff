"""Client package for tcp-chat.

Contains client-side connection establishment:
- connect: connect_to_host

Note: run_client is not exported here to avoid importing session/ with
the package. Import directly from client.runner when needed.
"""

from client.connect import connect_to_host

__all__ = [
    "connect_to_host",
]
