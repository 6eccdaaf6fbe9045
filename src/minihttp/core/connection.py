"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket. A connection carries exactly ONE
request: read it, write one response, close. There is no keep-alive.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL
=============================================================================

A single recv() returns whatever happens to be in the kernel buffer:

    Client sends:   "POST /files/a HTTP/1.1\r\nContent-Length: 5\r\n\r\nhello"

    recv() #1  →    "POST /files/a HTTP/1.1\r\nContent-Le"
    recv() #2  →    "ngth: 5\r\n\r\nhel"
    recv() #3  →    "lo"

Two read modes are supported (ServerConfig.accumulate):

    accumulate=False   ONE recv(). Assumes the whole request fits in the
                       first read, which is true for small requests from
                       well-behaved clients. Partial requests reach the
                       parser as-is and are rejected there.

    accumulate=True    Keep reading until the head terminator \r\n\r\n
                       has arrived and, if the head declares a
                       Content-Length, until that many body bytes are in.
                       Bounded by max_request_size; a head whose
                       Content-Length already overshoots it is rejected
                       before any body is read.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSING ──► CLOSED
                │                                      ▲
                └──────── (timeout / error) ───────────┘

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid

from ..http.headers import parse_headers

logger = logging.getLogger(__name__)

HEAD_TERMINATOR = b"\r\n\r\n"


class RequestTooLargeError(Exception):
    """The client sent more than max_request_size bytes."""


class ConnectionState(Enum):
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    One client connection.

    Attributes:
        socket: The accepted client socket.
        address: Client's (ip, port).
        id: Short random id used to correlate log lines.
        state: Current ConnectionState.
        created_at: Accept timestamp.

    Usage:
        with Connection(sock, addr) as conn:
            raw = conn.read_request()
            conn.send_response(head, body)
        # closed here
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 8192
    timeout: Optional[float] = 30.0
    max_request_size: int = 10 * 1024 * 1024
    accumulate: bool = True

    _buffer: bytearray = field(default_factory=bytearray, repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        # settimeout(None) restores fully blocking I/O
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read the connection's single request.

        Returns:
            The raw request bytes (possibly incomplete when accumulate is
            off, or when the client hung up mid-request), or None if the
            client closed without sending anything.

        Raises:
            TimeoutError: No data before the socket timeout.
            RequestTooLargeError: More than max_request_size bytes.
        """
        self.state = ConnectionState.READING

        try:
            if self.accumulate:
                return self._read_accumulated()
            return self._read_once()
        except socket.timeout:
            raise TimeoutError("Request read timeout")

    def _read_once(self) -> Optional[bytes]:
        data = self._recv()
        if not data:
            return None

        if len(data) > self.max_request_size:
            raise RequestTooLargeError(f"Request too large: {len(data)} bytes")

        return data

    def _read_accumulated(self) -> Optional[bytes]:
        # STEP 1: read until the head is complete
        while HEAD_TERMINATOR not in self._buffer:
            if not self._fill():
                return bytes(self._buffer) or None

        # STEP 2: read the body the head announced, if any
        header_end = self._buffer.find(HEAD_TERMINATOR)
        body_start = header_end + len(HEAD_TERMINATOR)
        content_length = self._parse_content_length(self._buffer[:header_end + 2])

        if body_start + content_length > self.max_request_size:
            raise RequestTooLargeError(
                f"Request too large: Content-Length {content_length} "
                f"exceeds {self.max_request_size} bytes"
            )

        while len(self._buffer) - body_start < content_length:
            if not self._fill():
                break  # Client hung up; the parser reports the short body

        return bytes(self._buffer)

    def _fill(self) -> bool:
        """Append one recv() to the buffer. False once the peer closed."""
        chunk = self._recv()
        if not chunk:
            return False

        self._buffer.extend(chunk)
        if len(self._buffer) > self.max_request_size:
            raise RequestTooLargeError(f"Request too large: {len(self._buffer)} bytes")
        return True

    def _recv(self) -> bytes:
        try:
            return self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            return b""

    def _parse_content_length(self, head: bytes) -> int:
        """
        Content-Length from the raw head, read with the same rules as the
        parser (parse_headers: ": " separator, last duplicate wins).

        Only used to know how many more bytes to wait for; the parser
        validates the value itself. Unparseable or negative → 0.
        """
        _, headers = parse_headers(head.decode("utf-8", errors="replace"))
        try:
            return max(int(headers.get("content-length", "0")), 0)
        except ValueError:
            return 0

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, *parts: bytes) -> bool:
        """
        Write response bytes, one sendall() per part, in order.

            conn.send_response(response.to_bytes())         # single write
            conn.send_response(response.head(), response.body)  # two-part

        Returns:
            True if everything was sent, False if the client went away.
        """
        self.state = ConnectionState.WRITING

        try:
            for part in parts:
                if part:
                    self.socket.sendall(part)
            return True
        except (ConnectionResetError, BrokenPipeError, OSError) as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection.

        shutdown(SHUT_WR) first so the client sees a clean EOF after the
        response, then drain briefly, then release the descriptor.
        Safe to call twice.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass  # Includes socket.timeout

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
