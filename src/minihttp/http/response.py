"""
=============================================================================
HTTP RESPONSE FORMATTER
=============================================================================

Builds HTTP/1.1 responses and renders them to wire bytes.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │    HTTP/1.1 200 OK\r\n               ← status line                 │
    │    Content-Type: text/plain\r\n      ← headers, in insertion order │
    │    Content-Encoding: gzip\r\n                                       │
    │    Content-Length: 23\r\n            ← bytes actually transmitted  │
    │    \r\n                              ← end of head                 │
    │    <23 bytes of gzip data>           ← body                        │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

Two layers:

    format_head()       Pure formatter. Status line, headers, blank line.
                        Never looks at a body and never invents headers.

    HTTPResponse.head() The caller side. Fills in Content-Length from the
                        body that will really be sent (post-compression)
                        and hands the header map to format_head().

Responses are written either as one buffer (to_bytes) or as head then
body (the two-part write the connection uses for binary payloads).

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Union

from .status_codes import HTTPStatus, reason_phrase

HTTP_VERSION = "HTTP/1.1"


def format_head(
    status_code: int,
    reason: str = "",
    headers: Optional[Dict[str, str]] = None,
) -> bytes:
    """
    Render the status line and header block.

    Args:
        status_code: Numeric status (200, 404, ...).
        reason: Reason phrase; empty string if omitted.
        headers: Ordered header map, written in the order given.

    Returns:
        b"HTTP/1.1 <code> <reason>\\r\\n<name>: <value>\\r\\n...\\r\\n"
    """
    lines = [f"{HTTP_VERSION} {int(status_code)} {reason}"]

    for name, value in (headers or {}).items():
        lines.append(f"{name}: {value}")

    # Empty entry yields the blank line that closes the head
    lines.append("")

    return ("\r\n".join(lines) + "\r\n").encode("utf-8")


@dataclass
class HTTPResponse:
    """
    A response waiting to be written.

    Attributes:
        status:  Status code (HTTPStatus or plain int)
        reason:  Reason phrase; None means "standard phrase for status"
        headers: Header map; insertion order is wire order
        body:    Body bytes, possibly empty
    """

    status: int = HTTPStatus.OK
    reason: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def reason_phrase(self) -> str:
        if self.reason is None:
            return reason_phrase(self.status)
        return self.reason

    @property
    def status_line(self) -> str:
        return f"{HTTP_VERSION} {int(self.status)} {self.reason_phrase}"

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a header and return self for chaining."""
        self.headers[name] = value
        return self

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        """Set the body; strings are encoded as UTF-8."""
        if isinstance(body, str):
            self.body = body.encode("utf-8")
        else:
            self.body = body
        return self

    def head(self) -> bytes:
        """
        Render the status line and headers.

        Content-Length is added when the handler did not set it, computed
        from the body as it stands now. Compress BEFORE calling this.
        """
        headers = dict(self.headers)
        if "Content-Length" not in headers:
            headers["Content-Length"] = str(len(self.body))
        return format_head(self.status, self.reason_phrase, headers)

    def to_bytes(self) -> bytes:
        """Complete response (head + body) ready for socket.sendall()."""
        return self.head() + self.body


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

        response = (ResponseBuilder()
            .status(HTTPStatus.CREATED)
            .text("File created")
            .build())
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._reason: Optional[str] = None
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: int, reason: Optional[str] = None) -> "ResponseBuilder":
        self._status = status
        self._reason = reason
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        if isinstance(body, str):
            self._body = body.encode("utf-8")
        else:
            self._body = body
        return self

    def text(self, text: str) -> "ResponseBuilder":
        """Plain text body with Content-Type: text/plain."""
        self._headers["Content-Type"] = "text/plain"
        self._body = text.encode("utf-8")
        return self

    def octet_stream(self, content: bytes) -> "ResponseBuilder":
        """Binary body with Content-Type: application/octet-stream."""
        self._headers["Content-Type"] = "application/octet-stream"
        self._body = content
        return self

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            reason=self._reason,
            headers=dict(self._headers),
            body=self._body,
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def ok(body: Union[str, bytes] = b"") -> HTTPResponse:
    """200 OK. A str body is sent as text/plain; bytes are sent as-is."""
    builder = ResponseBuilder().status(HTTPStatus.OK)
    if isinstance(body, str):
        builder.text(body)
    elif body:
        builder.body(body)
    return builder.build()


def created(message: str = "File created") -> HTTPResponse:
    """201 Created with a short text/plain confirmation."""
    return ResponseBuilder().status(HTTPStatus.CREATED).text(message).build()


def not_found() -> HTTPResponse:
    """404 Not Found with an empty body."""
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()


def error_response(status: HTTPStatus, message: Optional[str] = None) -> HTTPResponse:
    """
    Error response whose text/plain body is `message` (or the phrase).

    Used for 400/403/409/413/500/... answers.
    """
    return (ResponseBuilder()
        .status(status)
        .text(message if message is not None else status.phrase)
        .build())


def bad_request(message: str = "Bad Request") -> HTTPResponse:
    return error_response(HTTPStatus.BAD_REQUEST, message)


def forbidden(message: str = "Forbidden") -> HTTPResponse:
    return error_response(HTTPStatus.FORBIDDEN, message)


def conflict(message: str = "Conflict") -> HTTPResponse:
    return error_response(HTTPStatus.CONFLICT, message)


def internal_error(message: str = "Internal Server Error") -> HTTPResponse:
    return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, message)
