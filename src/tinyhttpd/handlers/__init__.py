"""
Route handlers.

Each handler takes an HTTPRequest and returns an HTTPResponse:

    root        GET /
    echo        GET /echo/<message>
    user_agent  GET /user-agent
    FilesHandler.handle   GET|POST /files/<name>

register_default_routes() mounts them on a Router under their route keys.
"""

from typing import Optional

from ..http.router import Router
from .basic import root, echo, user_agent
from .files import FilesHandler


def register_default_routes(router: Router, directory: Optional[str] = None) -> Router:
    """
    Mount the built-in handlers.

    The files route is mounted only when a base directory is given.
    """
    router.add("", root)
    router.add("echo", echo)
    router.add("user-agent", user_agent)
    if directory is not None:
        router.add("files", FilesHandler(directory).handle)
    return router


__all__ = [
    "root",
    "echo",
    "user_agent",
    "FilesHandler",
    "register_default_routes",
]
