"""
=============================================================================
APPLICATION ASSEMBLY
=============================================================================

The fixed route table, registered in order (first match wins):

    ┌────────┬────────────────┬────────────────────────────────────────────┐
    │ METHOD │ PATH           │ HANDLER                                    │
    ├────────┼────────────────┼────────────────────────────────────────────┤
    │ GET    │ /              │ root          empty 200                    │
    │ GET    │ /echo/*value   │ echo          value back, gzip if asked    │
    │ GET    │ /user-agent    │ user_agent    User-Agent header back       │
    │ GET    │ /files/*name   │ files.get     file bytes / 404             │
    │ POST   │ /files/*name   │ files.post    create file / 409            │
    └────────┴────────────────┴────────────────────────────────────────────┘

Anything else is 404 with an empty body.

=============================================================================
"""

from .config import ServerConfig
from .http import Router
from .handlers import root, echo, user_agent, FileHandler
from .middleware import LoggingMiddleware
from .server import HTTPServer


def create_router(config: ServerConfig) -> Router:
    """Build the route table for the directory in `config`."""
    files = FileHandler(config.directory)

    router = Router()
    router.get("/")(root)
    router.get("/echo/*value")(echo)
    router.get("/user-agent")(user_agent)
    router.get("/files/*name")(files.get)
    router.post("/files/*name")(files.post)
    return router


def create_app(config: ServerConfig) -> HTTPServer:
    """
    Build a ready-to-run server: routes plus access logging.

        server = create_app(ServerConfig(directory="/tmp/files"))
        server.run()
    """
    server = HTTPServer(config, create_router(config))
    server.use(LoggingMiddleware(log_format=config.log_format))
    return server
