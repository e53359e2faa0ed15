"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together: accept a connection, read one request, answer
it, close.

    ┌──────────────┐  Connection   ┌────────────┐  task   ┌──────────────┐
    │ SocketServer │ ────────────► │ ThreadPool │ ──────► │ worker thread│
    └──────────────┘               └────────────┘         └──────┬───────┘
                                     queue full → 503            │
                                                                 ▼
                            ┌──── fill() ◄───────────────┐  _process_connection
                            │                            │
                            ▼                            │
                     parse_request(buffer) ── INCOMPLETE ┘
                            │
              ┌─────────────┼─────────────────────┐
              ▼             ▼                     ▼
          HTTPError      Request               timeout
              │             │                     │
              │      handle_request()             │
              │       ├─ is_websocket → compose_handshake → 101
              │       └─ else → RouteTable.lookup → 200 / 404
              ▼             ▼                     ▼
         4xx / 5xx      response                 408
              └─────────────┴──────────┬──────────┘
                                       ▼
                         send ► access log ► (upgrade_handler) ► close

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

A handshake connection either switches protocols or is done after one
response. There is no keep-alive loop: every response is followed by
closing the socket, and error responses say so with Connection: close.

After a 101 the optional upgrade_handler(connection, request) runs on the
worker thread and owns the socket until it returns. Without one the
connection is closed right after the handshake.

=============================================================================
"""

import logging
import socket
import time
from typing import Callable, Optional, Tuple

from .access_log import AccessLogger, RequestLog
from .config import ServerConfig
from .core import Connection, SocketServer, ThreadPool
from .http import (
    INCOMPLETE,
    HTTPError,
    HTTPResponse,
    HTTPStatus,
    Request,
    RouteTable,
    error_response,
    html_response,
    parse_request,
)
from .http.request import ParseResult
from .websocket import compose_handshake


logger = logging.getLogger(__name__)


UpgradeHandler = Callable[[Connection, Request], None]


class HTTPServer:
    """
    Minimal HTTP/1.1 server that performs the WebSocket handshake.

    =========================================================================
    USAGE
    =========================================================================

        config = ServerConfig.from_env()
        routes = RouteTable.from_templates(config.templates_dir)

        server = HTTPServer(config, routes)
        server.run()            # blocks until Ctrl+C / SIGTERM

    =========================================================================
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        routes: Optional[RouteTable] = None,
        upgrade_handler: Optional[UpgradeHandler] = None,
    ):
        """
        Args:
            config: Server configuration. Defaults if not provided.
            routes: Static content by target. Empty table if not provided.
            upgrade_handler: Called with (connection, request) after a
                             successful 101 response.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self.routes = routes if routes is not None else RouteTable()
        self.upgrade_handler = upgrade_handler

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            max_workers=self.config.max_workers,
            queue_size=self.config.queue_size,
        )
        self._access_log = AccessLogger(self.config.log_format)
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once the server is listening."""
        return self._socket_server.address

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def handle_request(self, request: Request) -> HTTPResponse:
        """
        Answer a parsed request.

        Upgrade requests go to the handshake composer, everything else is
        looked up in the route table.
        """
        if request.is_websocket:
            result = compose_handshake(request)
        else:
            content = self.routes.lookup(request.target)
            result = HTTPError.NOT_FOUND if content is None else html_response(content)

        if isinstance(result, HTTPError):
            return error_response(result)

        return result

    def _read_request(self, conn: Connection) -> Optional[ParseResult]:
        """
        Receive until the parser has a verdict.

        Returns None when the peer closed without sending a single byte.
        """
        while True:
            more_expected = conn.fill()

            if not more_expected and conn.bytes_received == 0:
                return None

            result = parse_request(conn.buffer, complete=not more_expected)
            if result is not INCOMPLETE:
                return result

    def _handle_connection(self, conn: Connection):
        """Hand an accepted connection to the thread pool (accept thread)."""
        if self._thread_pool.submit(self._process_connection, args=(conn,)):
            return

        logger.warning(f"[{conn.id}] Thread pool full, rejecting connection")
        with conn:
            conn.send(error_response(HTTPStatus.SERVICE_UNAVAILABLE).to_bytes(self.config.server_name))

    def _process_connection(self, conn: Connection):
        """Serve one connection from start to close (worker thread)."""
        start_time = time.time()
        request: Optional[Request] = None

        with conn:
            try:
                result = self._read_request(conn)
            except socket.timeout:
                logger.debug(f"[{conn.id}] Timed out waiting for request")
                result = HTTPStatus.REQUEST_TIMEOUT
            except OSError as e:
                logger.warning(f"[{conn.id}] Connection error: {e}")
                return

            if result is None:
                logger.debug(f"[{conn.id}] Closed by peer before sending a request")
                return

            if isinstance(result, Request):
                request = result
                try:
                    response = self.handle_request(request)
                except Exception as e:
                    logger.exception(f"[{conn.id}] Handler error: {e}")
                    response = error_response(HTTPStatus.INTERNAL_SERVER_ERROR)
            else:
                if isinstance(result, HTTPError):
                    logger.debug(f"[{conn.id}] Rejected request: {result.name}")
                response = error_response(result)

            sent = conn.send(response.to_bytes(self.config.server_name))
            self._log_access(conn, request, response, start_time)

            if sent and request is not None and response.status == HTTPStatus.SWITCHING_PROTOCOLS:
                self._run_upgrade_handler(conn, request)

    def _run_upgrade_handler(self, conn: Connection, request: Request):
        if self.upgrade_handler is None:
            logger.debug(f"[{conn.id}] Handshake complete, no upgrade handler; closing")
            return

        try:
            self.upgrade_handler(conn, request)
        except Exception as e:
            logger.exception(f"[{conn.id}] Upgrade handler error: {e}")

    def _log_access(
        self,
        conn: Connection,
        request: Optional[Request],
        response: HTTPResponse,
        start_time: float,
    ):
        self._access_log.log(RequestLog(
            request_id=conn.id,
            method=request.method if request else "-",
            target=request.target if request else "-",
            client_ip=conn.client_ip,
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=(time.time() - start_time) * 1000,
            upgraded=response.status == HTTPStatus.SWITCHING_PROTOCOLS,
        ))

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server (blocking).

        Args:
            host: Override config host.
            port: Override config port.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._running = True
        self._setup_logging()
        self._thread_pool.start()

        try:
            self._socket_server.start(
                self._handle_connection,
                on_listening=self._print_startup_banner,
            )
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Ask a running server to stop. run() returns once it has."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is open."""
        return self._socket_server.wait_until_ready(timeout)

    def _print_startup_banner(self):
        """Print server startup information."""
        host, port = self.address

        print()
        print("╔══════════════════════════════════════════════════════════════╗")
        print(f"║  {self.config.server_name} running")
        print(f"║  http://{host}:{port}")
        print(f"║  ws://{host}:{port}  (handshake only)")
        print(f"║  Workers: {self.config.min_workers}-{self.config.max_workers} threads")
        print("║  Press Ctrl+C to stop")
        print("╚══════════════════════════════════════════════════════════════╝")
        print()

        for target in self.routes.targets:
            print(f"  GET {target}")

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("wsserver").setLevel(level)

    def _shutdown(self):
        logger.info("Shutting down server...")
        self._running = False
        self._thread_pool.shutdown(wait=True, timeout=30.0)
        logger.info("Server stopped")
