"""
=============================================================================
TINYHTTPD - A Small HTTP/1.1 Server on Raw Sockets
=============================================================================

Serves four routes over one-request-per-connection HTTP/1.1:

    GET  /                  200 OK, empty body
    GET  /echo/<message>    echoes the message, gzip-encoded on request
    GET  /user-agent        echoes the User-Agent header
    GET  /files/<name>      reads a file under the base directory
    POST /files/<name>      writes the request body to that file

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    tinyhttpd/
    ├── __init__.py          # Package exports
    ├── __main__.py          # CLI entry point (python -m tinyhttpd)
    ├── server.py            # HTTPServer: wiring and dispatch
    ├── config.py            # ServerConfig dataclass
    ├── core/                # Sockets, connections, worker threads
    ├── http/                # Headers, parser, responses, negotiation, routing
    ├── middleware/          # Middleware pipeline and access log
    └── handlers/            # root, echo, user-agent, files

=============================================================================
QUICK START
=============================================================================

    from tinyhttpd import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(port=4221, directory="/tmp/data"))
    server.run()

    $ curl -v http://localhost:4221/echo/abc
    $ curl -v --data "hello" http://localhost:4221/files/greeting.txt

=============================================================================
"""

from .server import HTTPServer, create_app
from .config import ServerConfig

__version__ = "1.0.0"

__all__ = [
    "HTTPServer",
    "ServerConfig",
    "create_app",
    "__version__",
]
