"""
=============================================================================
MINIHTTP - Small HTTP/1.1 File and Echo Server on Raw Sockets
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                     │
    │   core/         sockets and threads: listener, connection, pool     │
    │   http/         wire format: headers, request, response, router,    │
    │                 content encoding, status codes                      │
    │   handlers/     root, echo, user-agent, /files GET + POST           │
    │   middleware/   access logging around the router                    │
    │                                                                     │
    │   config.py     ServerConfig (+ MINIHTTP_* environment variables)   │
    │   server.py     HTTPServer: one request per connection              │
    │   app.py        the route table                                     │
    │   __main__.py   `minihttp [DIRECTORY]`                              │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
QUICK START
=============================================================================

    from minihttp import ServerConfig, create_app

    server = create_app(ServerConfig(directory="/tmp/files"))
    server.run()

    $ curl -H "Accept-Encoding: gzip" localhost:4221/echo/abc --compressed
    abc

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import HTTPServer
from .app import create_app, create_router

__all__ = ["HTTPServer", "ServerConfig", "create_app", "create_router", "__version__"]
