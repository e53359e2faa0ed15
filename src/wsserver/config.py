"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Every tunable of the server in one dataclass.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m wsserver --port 3000                            │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── PORT=3000 python -m wsserver                              │
    │                                                                      │
    │   3. Defaults in ServerConfig                                       │
    │      └── port 4485, templates/, 4-16 workers                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The listening port is read from plain $PORT (not HTTP_PORT) so the server
runs unchanged on platforms that assign the port that way.

=============================================================================
INTERVIEW QUESTIONS ABOUT CONFIGURATION
=============================================================================

Q: "How do you validate configuration?"
A: "Validate eagerly at startup, not lazily at first use.
   Fail fast with clear error messages: a typo in $PORT should stop
   the launch, not surface as a bind error later."

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


DEFAULT_PORT = 4485


@dataclass
class ServerConfig:
    """
    Configuration for the WebSocket handshake server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout

    HTTP SETTINGS
    - max_request_size

    THREADING SETTINGS
    - min_workers, max_workers, queue_size

    CONTENT
    - templates_dir

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """
    The IP address to bind to.

    - "0.0.0.0" - All network interfaces (default)
    - "127.0.0.1" - Localhost only
    """

    port: int = DEFAULT_PORT
    """The port number to listen on. 0 lets the OS pick a free port."""

    backlog: int = 128
    """Maximum number of queued connections."""

    buffer_size: int = 1024
    """
    Bytes requested from the socket per recv() call.

    A handshake request is a few hundred bytes, so one call is usually
    enough. Larger requests take several calls.
    """

    timeout: Optional[float] = 30.0
    """
    Socket timeout in seconds.

    A client that stays silent this long gets 408 Request Timeout.
    None = blocking (infinite wait).
    """

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    max_request_size: int = 8192
    """
    Maximum size of request line plus headers in bytes.

    A request that has not ended its header section within this many
    bytes is answered with 400 Bad Request.
    """

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    """Number of worker threads started with the server."""

    max_workers: int = 16
    """Upper bound on worker threads."""

    queue_size: int = 100
    """
    Connections that may wait for a free worker.

    When the queue is full new connections get 503 Service Unavailable.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    templates_dir: str = "templates"
    """Directory the route table reads its template files from."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """
    Access log format: 'json' or 'text'.

    JSON is better for log aggregators, text for human reading.
    """

    # ─────────────────────────────────────────────────────────────────────
    # SERVER IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "wsserver/1.0"
    """Value of the Server header."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        PORT                Server port (default: 4485)
        HTTP_HOST           Server host (default: 0.0.0.0)
        HTTP_WORKERS        Max worker threads (default: 16)
        HTTP_TIMEOUT        Request timeout in seconds (default: 30)
        HTTP_TEMPLATES_DIR  Template directory (default: templates)
        HTTP_LOG_LEVEL      Logging level (default: INFO)
        HTTP_LOG_FORMAT     Access log format (default: text)

        =====================================================================

        Raises:
            ValueError: $PORT (or another numeric variable) is not a number.
        """
        port = os.getenv("PORT")
        if port is None:
            port_number = DEFAULT_PORT
        else:
            try:
                port_number = int(port)
            except ValueError:
                raise ValueError("$PORT is not an integer") from None

        max_workers = int(os.getenv("HTTP_WORKERS", "16"))

        return cls(
            host=os.getenv("HTTP_HOST", "0.0.0.0"),
            port=port_number,
            max_workers=max_workers,
            min_workers=min(cls.min_workers, max_workers),
            timeout=float(os.getenv("HTTP_TIMEOUT", "30")),
            templates_dir=os.getenv("HTTP_TEMPLATES_DIR", "templates"),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
            log_format=os.getenv("HTTP_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: Describing the first invalid setting.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.max_request_size < self.buffer_size:
            raise ValueError("max_request_size must be >= buffer_size")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.log_format not in ("text", "json"):
            raise ValueError(f"Invalid log_format: {self.log_format!r}. Must be 'text' or 'json'.")
