"""
=============================================================================
ROOT, ECHO AND USER-AGENT HANDLERS
=============================================================================

    GET /                  → 200, Content-Type: text/plain, empty body
    GET /echo/<message>    → 200, body = <message> (gzip if negotiated)
    GET /user-agent        → 200, body = User-Agent header value

None of these look at the request method.

=============================================================================
"""

from ..http.negotiation import ContentNegotiator
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder, ok
from ..http.status_codes import HTTPStatus


_negotiator = ContentNegotiator()


def root(request: HTTPRequest) -> HTTPResponse:
    """200 OK with Content-Type: text/plain and no body."""
    return (ResponseBuilder()
        .status(HTTPStatus.OK)
        .content_type("text/plain")
        .build())


def echo(request: HTTPRequest) -> HTTPResponse:
    """
    Echo the second path segment back as text.

    The segment is used exactly as it appears in the request-target: no
    URL decoding. "/echo" and "/echo/" both echo the empty string.

    When the client's Accept-Encoding lists gzip, the body is compressed
    and Content-Length measures the compressed bytes.
    """
    segments = request.segments
    message = segments[1] if len(segments) > 1 else ""

    response = ok(message)

    encoding = _negotiator.select(request.accept_encoding)
    if encoding:
        _negotiator.encode(response, encoding)
    return response


def user_agent(request: HTTPRequest) -> HTTPResponse:
    """The User-Agent header value as text (empty if absent)."""
    return ok(request.user_agent)
