"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

Networking and concurrency plumbing. Nothing here knows HTTP semantics
beyond framing one request out of a byte stream.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  SocketServer      listen + accept loop, SIGINT/SIGTERM             │
    └───────────────────────────────┬─────────────────────────────────────┘
                                    │ Connection
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │  ThreadPool        bounded queue, min..max worker threads           │
    └───────────────────────────────┬─────────────────────────────────────┘
                                    │ worker runs the keep-alive loop
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │  Connection        buffered reads, timeouts, graceful close         │
    └─────────────────────────────────────────────────────────────────────┘

    ReadWriteLock      many readers or one writer; guards the social store
                       against the concurrent workers above

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState, RequestTooLarge
from .thread_pool import ThreadPool
from .rwlock import ReadWriteLock

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "RequestTooLarge",
    "ThreadPool",
    "ReadWriteLock",
]
