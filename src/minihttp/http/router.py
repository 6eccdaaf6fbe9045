"""
=============================================================================
URL ROUTER
=============================================================================

Ordered route table: (method, path pattern, handler) triples evaluated
top to bottom. The FIRST route whose method and pattern both match wins;
nothing after it is consulted. No match at all is a 404.

=============================================================================
ROUTE PATTERNS
=============================================================================

    Pattern             Matches                  path_params
    ─────────────────   ──────────────────────   ──────────────────────
    /                   /                        {}
    /user-agent         /user-agent              {}
    /echo/*value        /echo/abc                {"value": "abc"}
                        /echo/a/b                {"value": "a/b"}
                        /echo/                   (no match: empty tail)
    /files/*name        /files/note.txt          {"name": "note.txt"}

A `*name` segment captures the whole remainder of the path, slashes
included, and must be the last segment. Captured text is passed on raw:
no URL-decoding, no validation. Handlers that touch the filesystem are
responsible for checking what they were given.

Paths are not normalized: "/user-agent/" is not "/user-agent".

=============================================================================
PATTERN COMPILATION
=============================================================================

    "/echo/*value"
        → split by "/"       ["", "echo", "*value"]
        → static "echo"      /echo
        → wildcard "*value"  /(?P<value>.+)
        → anchored           ^/echo/(?P<value>.+)$

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, Dict, List
import logging
import re

from .request import HTTPRequest
from .response import HTTPResponse, not_found

logger = logging.getLogger(__name__)

# A handler takes a request and returns the response to send.
Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass
class Route:
    """
    One entry of the route table.

        Route(method="GET", path="/echo/*value", handler=echo)
    """

    method: str
    path: str
    handler: Handler

    _pattern: Optional[re.Pattern] = field(default=None, repr=False)


@dataclass
class RouteMatch:
    """The route that matched and the values it captured."""

    route: Route
    params: Dict[str, str]


class Router:
    """
    First-match-wins HTTP router.

        router = Router()

        @router.get("/echo/*value")
        def echo(request):
            return ok(request.path_params["value"])

        response = router.handle(request)
    """

    def __init__(self):
        self._routes: List[Route] = []

    def add_route(self, method: str, path: str, handler: Handler) -> Route:
        """
        Append a route to the end of the table.

        Registration order is match order.
        """
        route = Route(
            method=method.upper(),
            path=path,
            handler=handler,
            _pattern=self._compile_pattern(path),
        )
        self._routes.append(route)
        logger.debug(f"Registered route {route.method} {route.path}")
        return route

    def _compile_pattern(self, path: str) -> re.Pattern:
        """
        Compile a route pattern to an anchored regex.

        Raises:
            ValueError: If a wildcard segment is not the last one.
        """
        segments = [s for s in path.split("/") if s]
        if not segments:
            return re.compile(r"^/$")

        regex_parts = ["^"]
        for i, segment in enumerate(segments):
            regex_parts.append("/")

            if segment.startswith("*"):
                if i != len(segments) - 1:
                    raise ValueError(f"Wildcard must be the last segment: {path}")
                param_name = segment[1:] or "wildcard"
                regex_parts.append(f"(?P<{param_name}>.+)")
            else:
                regex_parts.append(re.escape(segment))

        regex_parts.append("$")
        return re.compile("".join(regex_parts))

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        """
        Find the first route matching method and path.

        Returns:
            RouteMatch, or None if no route matches.
        """
        for route in self._routes:
            if route.method != method:
                continue

            match = route._pattern.match(path)
            if match:
                return RouteMatch(route=route, params=match.groupdict())

        return None

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Dispatch a request to its handler.

        The captured values are put on request.path_params before the
        handler runs. Unmatched requests get 404 Not Found.
        """
        match = self.match(request.method, request.path)
        if match is None:
            return not_found()

        request.path_params = match.params
        return match.route.handler(request)

    def route(self, method: str, path: str) -> Callable[[Handler], Handler]:
        """Decorator form of add_route()."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(method, path, handler)
            return handler
        return decorator

    def get(self, path: str) -> Callable[[Handler], Handler]:
        return self.route("GET", path)

    def post(self, path: str) -> Callable[[Handler], Handler]:
        return self.route("POST", path)

    @property
    def routes(self) -> List[Route]:
        """Registered routes, in match order."""
        return list(self._routes)
