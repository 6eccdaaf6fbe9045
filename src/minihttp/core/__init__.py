"""
=============================================================================
CORE NETWORKING LAYER
=============================================================================

Sockets and threads, no HTTP:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ socket_server.py   SocketServer: bind, listen, accept loop          │
    │ connection.py      Connection: read one request, write, close       │
    │ thread_pool.py     ThreadPool: one task per accepted connection     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState, RequestTooLargeError
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "RequestTooLargeError",
    "ThreadPool",
]
