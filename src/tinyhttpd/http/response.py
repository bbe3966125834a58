"""
=============================================================================
HTTP RESPONSE BUILDING AND SERIALIZATION
=============================================================================

Handlers return HTTPResponse objects; the dispatcher serializes them with
to_bytes() and writes the result to the socket.

=============================================================================
WIRE FORMAT
=============================================================================

    HTTP/1.1 200 OK\r\n                  ← Status line
    Content-Type: text/plain\r\n         ← Headers, in insertion order
    Content-Length: 3\r\n
    \r\n                                 ← Blank line
    abc                                  ← Body, no trailing terminator

to_bytes() adds NOTHING on its own: no Content-Length, no Date, no Server.
Whoever builds the response sets the headers it needs. The builder helpers
below (text(), octet_stream()) set Content-Length from the encoded body so
handlers rarely have to.

=============================================================================
TEXT VS BYTES BODIES
=============================================================================

A body may be a str or bytes. Only the encoded length matters on the wire:

    "héllo"   → 5 characters, 6 UTF-8 bytes → Content-Length: 6
    b"\\x1f\\x8b..." (gzip) → measured as is

body_bytes() is the single place the conversion happens.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import List, Union

from .headers import Headers
from .status_codes import HTTPStatus


Body = Union[str, bytes]


@dataclass
class HTTPResponse:
    """
    A response to be written to the client.

    Use ResponseBuilder or the helper functions at the bottom of this
    module rather than filling fields by hand.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Headers = field(default_factory=Headers)
    body: Body = b""
    version: str = "HTTP/1.1"

    def __post_init__(self):
        if not isinstance(self.headers, Headers):
            self.headers = Headers(self.headers)

    @property
    def status_line(self) -> str:
        """e.g. "HTTP/1.1 200 OK"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def body_bytes(self) -> bytes:
        """Body as bytes; text is encoded as UTF-8."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        self.headers[name] = value
        return self

    def set_body(self, body: Body, content_length: bool = True) -> "HTTPResponse":
        """
        Replace the body, optionally updating Content-Length to match.

        Returns:
            Self for method chaining.
        """
        self.body = body
        if content_length:
            self.headers["Content-Length"] = str(len(self.body_bytes()))
        return self

    def to_bytes(self) -> bytes:
        """
        Serialize to wire bytes.

        Status line, one "Name: value" line per header in insertion order,
        a blank line, then the body. No headers are added here.
        """
        lines = [self.status_line]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")
        head = "\r\n".join(lines) + "\r\n\r\n"
        return head.encode("utf-8") + self.body_bytes()


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .text("abc")
            .build())

    Each method returns self except build().
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers = Headers()
        self._body: Body = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    def text(self, text: str, content_type: str = "text/plain") -> "ResponseBuilder":
        """
        Plain text body.

        Content-Type is set before Content-Length so the headers always
        go out in that order. Content-Length is always present, even for
        an empty string.
        """
        self.content_type(content_type)
        self._body = text
        self._headers["Content-Length"] = str(len(text.encode("utf-8")))
        return self

    def octet_stream(self, content: bytes) -> "ResponseBuilder":
        """Raw file contents as application/octet-stream."""
        self.content_type("application/octet-stream")
        self._body = content
        self._headers["Content-Length"] = str(len(content))
        return self

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=self._headers,
            body=self._body,
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# One-liners for the responses the handlers produce. Error responses carry
# no body and no headers unless noted.
#
# =============================================================================

def ok(body: str = "", content_type: str = "text/plain") -> HTTPResponse:
    """200 OK with a text body and matching Content-Length."""
    return ResponseBuilder().status(HTTPStatus.OK).text(body, content_type).build()


def created() -> HTTPResponse:
    """201 Created, empty body."""
    return ResponseBuilder().status(HTTPStatus.CREATED).build()


def bad_request() -> HTTPResponse:
    """400 Bad Request, empty body."""
    return ResponseBuilder().status(HTTPStatus.BAD_REQUEST).build()


def forbidden() -> HTTPResponse:
    """403 Forbidden, empty body."""
    return ResponseBuilder().status(HTTPStatus.FORBIDDEN).build()


def not_found() -> HTTPResponse:
    """404 Not Found, empty body."""
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()


def method_not_allowed(allowed_methods: List[str]) -> HTTPResponse:
    """405 Method Not Allowed with an Allow header (RFC 7231 section 6.5.5)."""
    return (ResponseBuilder()
        .status(HTTPStatus.METHOD_NOT_ALLOWED)
        .header("Allow", ", ".join(allowed_methods))
        .build())


def error_response(status: HTTPStatus) -> HTTPResponse:
    """Any status with an empty body."""
    return ResponseBuilder().status(HTTPStatus(status)).build()


def internal_error() -> HTTPResponse:
    """500 Internal Server Error, empty body."""
    return error_response(HTTPStatus.INTERNAL_SERVER_ERROR)
