"""
Handlers for the routes that never touch the filesystem.

    GET /              → 200, empty body (liveness probe)
    GET /echo/*value   → 200, text/plain body = value (gzip if negotiated)
    GET /user-agent    → 200, text/plain body = User-Agent header
"""

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder, ok
from ..http.encoding import compress_response


def root(request: HTTPRequest) -> HTTPResponse:
    """Answer the root probe with an empty 200."""
    return ok()


def echo(request: HTTPRequest) -> HTTPResponse:
    """
    Send the path tail back as the body.

    The value is whatever followed "/echo/" in the request target, raw.
    If the client's Accept-Encoding lists gzip, the body is compressed
    and Content-Length reports the compressed size.
    """
    value = request.path_params["value"]
    response = ResponseBuilder().text(value).build()
    return compress_response(request, response)


def user_agent(request: HTTPRequest) -> HTTPResponse:
    # A missing User-Agent echoes as an empty body, not an error.
    return ResponseBuilder().text(request.user_agent).build()
