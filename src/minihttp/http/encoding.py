"""
=============================================================================
CONTENT-ENCODING NEGOTIATION
=============================================================================

Decides whether a response body gets gzip-compressed, and applies it.

    Request:   Accept-Encoding: br, gzip, deflate
                                ──  ────
                                │    └── first entry we support → "gzip"
                                └─────── not supported, skipped

    Response:  Content-Encoding: gzip
               Content-Length: <compressed size>

RULES
-----
- The header is split on ", " and read left to right. The FIRST entry
  that the server supports wins, so the client's order is the preference
  order, not the server's.
- Supported set is exactly {"gzip"}.
- No header, or no supported entry → "none", and the body goes out as-is.
  An unsupported encoding is never an error.
- Entries are compared verbatim. "gzip;q=0.5" is NOT "gzip": quality
  values are not parsed.

=============================================================================
"""

import gzip
from typing import Optional, FrozenSet

from .request import HTTPRequest
from .response import HTTPResponse

GZIP = "gzip"
IDENTITY = "none"

SUPPORTED_ENCODINGS: FrozenSet[str] = frozenset({GZIP})


def negotiate_encoding(
    accept_encoding: Optional[str],
    supported: FrozenSet[str] = SUPPORTED_ENCODINGS,
) -> str:
    """
    Pick the content encoding for a response.

    Args:
        accept_encoding: Raw Accept-Encoding header value, or None.
        supported: Encodings the server can produce.

    Returns:
        The first client-listed encoding in `supported`, else IDENTITY.

    Example:
        >>> negotiate_encoding("invalid-1, gzip, invalid-2")
        'gzip'
        >>> negotiate_encoding("br")
        'none'
    """
    if not accept_encoding:
        return IDENTITY

    for entry in accept_encoding.split(", "):
        entry = entry.strip()
        if entry in supported:
            return entry

    return IDENTITY


def encode_body(body: bytes, encoding: str) -> bytes:
    """Encode `body` with a negotiated encoding ("gzip" or "none")."""
    if encoding == GZIP:
        return gzip.compress(body)
    if encoding == IDENTITY:
        return body
    raise ValueError(f"Unsupported content encoding: {encoding}")


def compress_response(request: HTTPRequest, response: HTTPResponse) -> HTTPResponse:
    """
    Apply the encoding the client negotiated to a built response.

    With gzip: the body is replaced by its compressed form, Content-Length
    becomes the compressed size and Content-Encoding: gzip is added.
    Otherwise the response is returned untouched.
    """
    encoding = negotiate_encoding(request.accept_encoding)
    if encoding == IDENTITY:
        return response

    response.body = encode_body(response.body, encoding)
    response.headers["Content-Encoding"] = encoding
    response.headers["Content-Length"] = str(len(response.body))
    return response
