"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything that knows what HTTP/1.1 looks like on the wire:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ headers.py       raw text → (request line, {name: value})           │
    │ request.py       raw bytes → HTTPRequest (validates request line)   │
    │ router.py        HTTPRequest → handler, first match wins            │
    │ response.py      HTTPResponse → b"HTTP/1.1 200 OK\r\n..."           │
    │ encoding.py      Accept-Encoding → "gzip" | "none", gzip the body   │
    │ status_codes.py  HTTPStatus enum with reason phrases                │
    └─────────────────────────────────────────────────────────────────────┘

Nothing in here touches sockets or the filesystem.
"""

from .headers import parse_headers
from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request
from .response import (
    HTTPResponse,
    ResponseBuilder,
    format_head,
    ok,             # 200 OK
    created,        # 201 Created
    bad_request,    # 400 Bad Request
    forbidden,      # 403 Forbidden
    not_found,      # 404 Not Found
    conflict,       # 409 Conflict
    internal_error,  # 500 Internal Server Error
    error_response,
)
from .encoding import negotiate_encoding, encode_body, compress_response
from .router import Router, Route, RouteMatch
from .status_codes import HTTPStatus

__all__ = [
    "parse_headers",
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",
    "HTTPResponse",
    "ResponseBuilder",
    "format_head",
    "ok",
    "created",
    "bad_request",
    "forbidden",
    "not_found",
    "conflict",
    "internal_error",
    "error_response",
    "negotiate_encoding",
    "encode_body",
    "compress_response",
    "Router",
    "Route",
    "RouteMatch",
    "HTTPStatus",
]
