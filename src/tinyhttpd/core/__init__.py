"""
=============================================================================
CORE NETWORKING
=============================================================================

    socket_server.py   Listening socket and accept loop
    connection.py      One accepted client: read request, write response, close
    thread_pool.py     Worker threads that run connections concurrently

    SocketServer ──accept──► Connection ──submit──► ThreadPool worker

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState, RequestTooLarge
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "RequestTooLarge",
    "ThreadPool",
]
