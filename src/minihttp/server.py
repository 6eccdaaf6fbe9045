"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the layers together:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                     │
    │   SocketServer.accept()                                             │
    │        │                                                            │
    │        ▼                                                            │
    │   ThreadPool.submit(_process_connection)   queue full → 503         │
    │        │                                                            │
    │        ▼  (worker thread)                                           │
    │   Connection.read_request()                timeout → 408            │
    │        │                                   too big → 413            │
    │        ▼                                                            │
    │   RequestParser.parse()                    malformed → 400 / 505    │
    │        │                                                            │
    │        ▼                                                            │
    │   middleware ──► Router.handle() ──► handler                        │
    │        │                                   exception → 500          │
    │        ▼                                                            │
    │   Connection.send_response()               head (+ body)            │
    │        │                                                            │
    │        ▼                                                            │
    │   Connection.close()                       always, one request only │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

Everything that can go wrong with one connection is handled inside
_process_connection. The accept loop never sees it.

=============================================================================
"""

import logging
import sys
from typing import Optional, Callable, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState, ThreadPool, RequestTooLargeError
from .http import (
    HTTPRequest, RequestParser, HTTPParseError,
    HTTPResponse, HTTPStatus, Router,
    error_response, internal_error,
)
from .middleware import MiddlewarePipeline, Middleware

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class HTTPServer:
    """
    One-request-per-connection HTTP/1.1 server.

        router = Router()
        router.get("/")(root)

        server = HTTPServer(ServerConfig(port=4221), router)
        server.use(LoggingMiddleware())
        server.run()          # blocks until SIGINT/SIGTERM or shutdown()
    """

    def __init__(self, config: Optional[ServerConfig] = None, router: Optional[Router] = None):
        """
        Args:
            config: Server configuration. Validated immediately.
            router: Route table. An empty router answers 404 to everything.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            max_workers=self.config.max_workers,
            queue_size=self.config.queue_size,
        )
        self._parser = RequestParser(max_request_size=self.config.max_request_size)

        self._router = router or Router()
        self._middleware = MiddlewarePipeline()

        # middleware.wrap(router.handle), built in run()
        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None

    def use(self, middleware: Middleware) -> "HTTPServer":
        """Add middleware; first added runs outermost."""
        self._middleware.add(middleware)
        return self

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port) while running; configured values otherwise."""
        return self._socket_server.address

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Serve until shutdown() or SIGINT/SIGTERM.

        Raises:
            OSError: If the listen address cannot be bound.
        """
        self._setup_logging()
        self._handler = self._middleware.wrap(self._router.handle)
        self._thread_pool.start()

        for route in self._router.routes:
            logger.debug(f"Route: {route.method:<5} {route.path}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._thread_pool.shutdown(wait=True, timeout=self.config.timeout or 30.0)
            logger.info("Server stopped")

    def shutdown(self):
        """Ask the accept loop to stop. run() returns once it has."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        # No-op when the host application already configured logging
        logging.basicConfig(
            level=level,
            format=LOG_FORMAT,
            datefmt=LOG_DATE_FORMAT,
            stream=sys.stdout,
        )
        logging.getLogger("minihttp").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Called on the accept thread: queue the connection for a worker."""
        try:
            submitted = self._thread_pool.submit(self._process_connection, args=(conn,))
        except RuntimeError:
            # Pool already stopping
            conn.close()
            return

        if not submitted:
            logger.warning(f"[{conn.id}] Thread pool full, rejecting connection")
            self._send_error(conn, HTTPStatus.SERVICE_UNAVAILABLE, "Server overloaded")
            conn.close()

    def _process_connection(self, conn: Connection):
        """Read, parse, dispatch, write and close one connection (worker thread)."""
        with conn:
            try:
                raw_request = conn.read_request()
            except TimeoutError:
                logger.warning(f"[{conn.id}] Request read timeout")
                self._send_error(conn, HTTPStatus.REQUEST_TIMEOUT, "Request timeout")
                return
            except RequestTooLargeError as e:
                logger.warning(f"[{conn.id}] {e}")
                self._send_error(conn, HTTPStatus.PAYLOAD_TOO_LARGE)
                return

            if raw_request is None:
                logger.debug(f"[{conn.id}] Client closed without sending a request")
                return

            try:
                request = self._parser.parse(raw_request, conn.address)
            except HTTPParseError as e:
                logger.warning(f"[{conn.id}] Bad request from {conn.client_ip}: {e}")
                self._send_error(conn, HTTPStatus(e.status_code))
                return

            conn.state = ConnectionState.PROCESSING
            try:
                response = self._handler(request)
            except Exception as e:
                logger.exception(f"[{conn.id}] Handler error: {e}")
                response = internal_error()

            self._write(conn, response)

    def _write(self, conn: Connection, response: HTTPResponse):
        """
        Send a response.

        Binary and compressed bodies go out as a second write after the
        head; text responses are sent as a single buffer.
        """
        if _is_binary(response):
            conn.send_response(response.head(), response.body)
        else:
            conn.send_response(response.to_bytes())

    def _send_error(self, conn: Connection, status: HTTPStatus, message: Optional[str] = None):
        """Answer a request that never reached a handler."""
        self._write(conn, error_response(status, message))


def _is_binary(response: HTTPResponse) -> bool:
    return (
        "Content-Encoding" in response.headers
        or response.headers.get("Content-Type") == "application/octet-stream"
    )
