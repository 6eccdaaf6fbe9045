"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw bytes read from a connection into an HTTPRequest.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │    POST /files/note.txt HTTP/1.1\r\n     ← request line            │
    │    ─┬── ───────┬─────── ───┬────                                    │
    │     │          │           │                                        │
    │   Method      Path      Version (must be HTTP/1.1)                  │
    │                                                                     │
    │    Content-Length: 5\r\n                  ← headers                 │
    │    User-Agent: curl/8.4.0\r\n                                       │
    │    \r\n                                   ← end of head             │
    │    hello                                  ← body (POST only)        │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

The path is taken verbatim: no URL-decoding, no query-string splitting,
no normalization. Route handlers see exactly what the client sent.

=============================================================================
PARSING STEPS
=============================================================================

    1. Size check                → 413 if over max_request_size
    2. Find \r\n\r\n             → 400 if the head never ended
    3. Request line + headers    → parse_headers() (headers.py)
    4. Validate request line     → 400 if malformed, 505 if not HTTP/1.1
    5. Frame the body            → Content-Length if given, else the rest

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Optional
import re

from .headers import parse_headers


class HTTPParseError(Exception):
    """
    Raised when request bytes cannot be turned into an HTTPRequest.

    Carries the HTTP status the server should answer with.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    Attributes:
        method:         Request method ("GET", "POST", ...)
        path:           Raw request target, e.g. "/echo/abc"
        version:        Protocol version, always "HTTP/1.1" once parsed
        headers:        Header map with LOWERCASE names
        body:           Body bytes; empty unless the client sent one
        path_params:    Values captured by the router, e.g. {"value": "abc"}
        client_address: (ip, port) of the peer
        raw:            The bytes the request was parsed from
    """

    method: str
    path: str
    version: str = "HTTP/1.1"

    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    path_params: Dict[str, str] = field(default_factory=dict)

    client_address: tuple[str, int] = ("", 0)
    raw: bytes = field(default=b"", repr=False)

    @property
    def user_agent(self) -> str:
        """The User-Agent header, or "" when the client sent none."""
        return self.headers.get("user-agent", "")

    @property
    def accept_encoding(self) -> Optional[str]:
        """The raw Accept-Encoding header, or None when absent."""
        return self.headers.get("accept-encoding")

    def get_header(self, name: str, default: str = "") -> str:
        """
        Case-insensitive header lookup.

            request.get_header("User-Agent")  # same as "user-agent"
        """
        return self.headers.get(name.lower(), default)


class RequestParser:
    """
    Parses raw request bytes into HTTPRequest objects.

    REQUEST_LINE_PATTERN: ^([A-Z]+) ([^ ]+) (HTTP/\\d\\.\\d)(?: .*)?$

        ([A-Z]+)        - method
        ([^ ]+)         - path, anything up to the next space
        (HTTP/\\d\\.\\d)  - version token
        (?: .*)?        - trailing tokens on the same line are ignored

    The method is not validated here. Unknown methods parse fine and fall
    through to the router's 404, the same as an unknown path.
    """

    REQUEST_LINE_PATTERN = re.compile(r"^([A-Z]+) ([^ ]+) (HTTP/\d\.\d)(?: .*)?$")
    SUPPORTED_VERSION = "HTTP/1.1"

    def __init__(self, max_request_size: int = 10 * 1024 * 1024):
        """
        Args:
            max_request_size: Largest request accepted, in bytes.
                              Anything bigger is rejected with 413.
        """
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse raw HTTP request data.

        Args:
            data: Request bytes as read from the socket.
            client_address: Peer (ip, port), kept for logging.

        Returns:
            Parsed HTTPRequest.

        Raises:
            HTTPParseError: If the request is malformed.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {len(data)} bytes",
                status_code=413
            )

        if not data:
            raise HTTPParseError("Empty request")

        header_end = data.find(b"\r\n\r\n")
        if header_end == -1:
            raise HTTPParseError("Incomplete request: no header terminator")

        # Keep the trailing CRLF of the last header so parse_headers sees
        # the blank line that ends the head.
        head = data[:header_end + 2].decode("utf-8", errors="replace")
        body = data[header_end + 4:]

        request_line, headers = parse_headers(head)
        method, path, version = self._parse_request_line(request_line)

        if "content-length" in headers:
            body = self._frame_body(body, headers["content-length"])

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            body=body,
            client_address=client_address,
            raw=data,
        )

    def _parse_request_line(self, line: str) -> tuple[str, str, str]:
        """
        Split "METHOD PATH HTTP/1.1" into its three parts.

        Raises:
            HTTPParseError: 400 for a malformed line, 505 for any version
                            other than HTTP/1.1.
        """
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line!r}")

        method, path, version = match.groups()

        if version != self.SUPPORTED_VERSION:
            raise HTTPParseError(
                f"Unsupported HTTP version: {version}",
                status_code=505
            )

        return method, path, version

    def _frame_body(self, body: bytes, content_length: str) -> bytes:
        """Cut the body to exactly Content-Length bytes."""
        try:
            length = int(content_length)
        except ValueError:
            raise HTTPParseError(f"Invalid Content-Length: {content_length!r}")

        if length < 0:
            raise HTTPParseError(f"Invalid Content-Length: {content_length!r}")

        if len(body) < length:
            raise HTTPParseError(
                f"Incomplete body: expected {length} bytes, got {len(body)}"
            )

        return body[:length]


def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
    max_size: int = 10 * 1024 * 1024
) -> HTTPRequest:
    """
    Parse a request in one call.

    Use RequestParser directly to reuse one parser across connections.
    """
    return RequestParser(max_request_size=max_size).parse(data, client_address)
