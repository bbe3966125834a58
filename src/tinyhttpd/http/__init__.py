"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything between raw bytes and handler logic:

    headers.py       Case-insensitive ordered header map
    request.py       Bytes → HTTPRequest
    response.py      HTTPResponse → bytes, builder and helpers
    negotiation.py   Accept-Encoding selection and gzip encoding
    router.py        Route key → handler table
    status_codes.py  HTTPStatus enum

=============================================================================
HTTP MESSAGE FORMAT (RFC 7230)
=============================================================================

    REQUEST:                          RESPONSE:
    GET /echo/abc HTTP/1.1\r\n        HTTP/1.1 200 OK\r\n
    Accept-Encoding: gzip\r\n         Content-Type: text/plain\r\n
    \r\n                              Content-Length: 3\r\n
                                      \r\n
                                      abc

=============================================================================
"""

from .headers import Headers
from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request, parse_content_length
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok,                  # 200 OK
    created,             # 201 Created
    bad_request,         # 400 Bad Request
    forbidden,           # 403 Forbidden
    not_found,           # 404 Not Found
    method_not_allowed,  # 405 Method Not Allowed
    error_response,      # any status, empty body
    internal_error,      # 500 Internal Server Error
)
from .negotiation import ContentNegotiator
from .router import Router, Handler
from .status_codes import HTTPStatus

__all__ = [
    "Headers",
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",
    "parse_content_length",
    "HTTPResponse",
    "ResponseBuilder",
    "ok",
    "created",
    "bad_request",
    "forbidden",
    "not_found",
    "method_not_allowed",
    "error_response",
    "internal_error",
    "ContentNegotiator",
    "Router",
    "Handler",
    "HTTPStatus",
]
