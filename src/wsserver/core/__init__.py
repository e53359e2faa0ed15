"""Socket, connection and worker-pool plumbing."""

from .connection import Connection, ConnectionState
from .socket_server import SocketServer
from .thread_pool import ThreadPool

__all__ = ["Connection", "ConnectionState", "SocketServer", "ThreadPool"]
