"""
=============================================================================
ACCESS LOG MIDDLEWARE
=============================================================================

One line per request on the "tinyhttpd.access" logger, in a shape close
to the Apache common log format:

    127.0.0.1 - - [18/Oct/2026:10:15:02 +0000] "GET /echo/abc" 200 3 0.41ms

Because the logger is namespaced it can be routed or silenced on its own:

    logging.getLogger("tinyhttpd.access").setLevel(logging.WARNING)

The middleware only observes: it never adds headers or alters the body.

=============================================================================
"""

import json
import logging
import time
from dataclasses import asdict, dataclass

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger("tinyhttpd.access")


@dataclass
class RequestLog:
    """One access-log entry."""

    method: str
    target: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_text(self) -> str:
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.target}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )

    def to_json(self) -> str:
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return json.dumps(entry)


class LoggingMiddleware(Middleware):
    """
    Request logging middleware.

    Place it first in the pipeline so it times the whole chain:

        pipeline.add(LoggingMiddleware())
        pipeline.add(LoggingMiddleware(log_format="json"))
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        """
        Args:
            log_format: "text" (common-log style) or "json".
            log_level: Level access lines are emitted at.
        """
        if log_format not in ("text", "json"):
            raise ValueError(f"Unknown log format: {log_format}")
        self.log_format = log_format
        self.log_level = log_level

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        start = time.perf_counter()
        try:
            response = next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.error(
                f"Request failed: {request.method} {request.target or request.path} "
                f"- {type(e).__name__}: {e} ({duration_ms:.2f}ms)"
            )
            raise

        entry = RequestLog(
            method=request.method,
            target=request.target or request.path,
            client_ip=request.client_address[0],
            user_agent=request.user_agent or "-",
            status_code=int(response.status),
            content_length=len(response.body_bytes()),
            duration_ms=(time.perf_counter() - start) * 1000,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, entry.to_json())
        else:
            logger.log(self.log_level, entry.to_text())
        return response
