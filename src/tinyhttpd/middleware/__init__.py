"""
Middleware applied around the route table.

    from tinyhttpd.middleware import LoggingMiddleware
    server.use(LoggingMiddleware())
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware, RequestLog

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
    "RequestLog",
]
