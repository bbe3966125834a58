"""
=============================================================================
HTTP REQUEST PARSING
=============================================================================

This module turns the raw bytes read from a client socket into an
HTTPRequest object.

=============================================================================
ANATOMY OF A REQUEST
=============================================================================

    POST /files/notes.txt HTTP/1.1\r\n        ← Request line
    Host: localhost:4221\r\n                  ← Header
    User-Agent: curl/8.4.0\r\n                ← Header
    Content-Length: 11\r\n                    ← Header
    \r\n                                      ← Blank line (end of head)
    hello\r\nworld                            ← Body (kept byte for byte)

The parser splits the buffer at the FIRST \r\n\r\n. Everything before is
the head (decoded as text), everything after is the body (left as bytes).
Splitting the whole buffer into lines and re-joining the body afterwards
would risk losing the \r\n sequences inside a multi-line body, so the body
is never line-split.

=============================================================================
ROUTE KEY
=============================================================================

Dispatching uses only the first path segment:

    /                     → ""
    /echo/abc             → "echo"
    /user-agent           → "user-agent"
    /files/a/b.txt?x=1    → "files"

The query string is stripped before the path is stored on the request.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .headers import Headers
from .status_codes import HTTPStatus


HEAD_TERMINATOR = b"\r\n\r\n"
LINE_TERMINATOR = "\r\n"


def parse_content_length(value: Optional[str]) -> int:
    """Content-Length value as an int; 0 when missing, invalid or negative."""
    if not value:
        return 0
    try:
        return max(int(value.strip()), 0)
    except ValueError:
        return 0


class HTTPParseError(Exception):
    """
    Raised when request bytes cannot be turned into an HTTPRequest.

    Carries the status code the dispatcher should answer with. A request
    line that cannot be split into method, target and version is answered
    with 500; an oversized request with 413.
    """

    def __init__(self, message: str, status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed HTTP request.

    Instances are frozen: built once per connection by RequestParser,
    read by the handler, discarded when the connection closes.

    Attributes:
        method:         Request verb, compared as opaque text ("GET", "POST").
        path:           Request path without the query string.
        version:        Protocol version from the request line.
        headers:        Header map, case-insensitive lookups.
        body:           Raw body bytes, or None when the head had no blank line.
        target:         Request-target exactly as sent (query included).
        query:          Raw query string (text after the first "?").
        client_address: (ip, port) of the peer.
        raw:            The buffer the request was parsed from.
    """

    method: str
    path: str
    version: str = "HTTP/1.1"
    headers: Headers = field(default_factory=Headers)
    body: Optional[bytes] = None
    target: str = ""
    query: str = ""
    client_address: Tuple[str, int] = ("", 0)
    raw: bytes = field(default=b"", repr=False)

    # =========================================================================
    # DERIVED VALUES
    # =========================================================================

    @property
    def segments(self) -> List[str]:
        """
        Path split on "/" with the leading slash removed.

            "/"             → [""]
            "/echo/abc"     → ["echo", "abc"]
            "/files/a/b"    → ["files", "a", "b"]
        """
        path = self.path[1:] if self.path.startswith("/") else self.path
        return path.split("/")

    @property
    def route_key(self) -> str:
        """First path segment, used to pick a handler."""
        return self.segments[0]

    @property
    def user_agent(self) -> str:
        """User-Agent header value, empty when absent."""
        return self.headers.get("user-agent", "")

    @property
    def accept_encoding(self) -> str:
        """Accept-Encoding header value, empty when absent."""
        return self.headers.get("accept-encoding", "")

    @property
    def content_length(self) -> int:
        """Content-Length header as an integer, 0 if missing or invalid."""
        return parse_content_length(self.headers.get("content-length"))


class RequestParser:
    """
    Parses raw request bytes into HTTPRequest objects.

    The parser is deliberately lenient about headers (lines without
    ": " are skipped, duplicates keep the last value) and strict about
    the request line (exactly three space-separated tokens).

    Usage:
        parser = RequestParser(max_request_size=1024 * 1024)
        request = parser.parse(data, ("127.0.0.1", 50123))
    """

    def __init__(self, max_request_size: int = 10 * 1024 * 1024):
        """
        Args:
            max_request_size: Largest buffer accepted, in bytes. Larger
                              buffers fail with 413 Payload Too Large.
        """
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: Tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Parse one complete request buffer.

        Args:
            data: Raw request bytes (head and body).
            client_address: Peer (ip, port) for logging.

        Returns:
            Parsed HTTPRequest.

        Raises:
            HTTPParseError: If the buffer is too large or the request line
                            is malformed.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {len(data)} bytes",
                status_code=HTTPStatus.PAYLOAD_TOO_LARGE,
            )

        # ─────────────────────────────────────────────────────────────────
        # SPLIT HEAD AND BODY AT THE FIRST BLANK LINE
        # ─────────────────────────────────────────────────────────────────
        head_end = data.find(HEAD_TERMINATOR)
        if head_end == -1:
            head_bytes = data
            body: Optional[bytes] = None
        else:
            head_bytes = data[:head_end]
            body = data[head_end + len(HEAD_TERMINATOR):]

        head = head_bytes.decode("utf-8", errors="replace")
        lines = head.split(LINE_TERMINATOR)

        method, target, version = self._parse_request_line(lines[0])
        path, _, query = target.partition("?")
        headers = self._parse_headers(lines[1:])

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            body=body,
            target=target,
            query=query,
            client_address=client_address,
            raw=data,
        )

    def _parse_request_line(self, line: str) -> Tuple[str, str, str]:
        """
        Split "METHOD SP TARGET SP VERSION" into its three tokens.

        Splitting is on single spaces, so "GET  / HTTP/1.1" (two spaces)
        yields four tokens and is rejected.
        """
        tokens = line.split(" ")
        if len(tokens) != 3 or not all(tokens):
            raise HTTPParseError(f"Malformed request line: {line!r}")
        method, target, version = tokens
        return method, target, version

    def _parse_headers(self, lines: List[str]) -> Headers:
        headers = Headers()
        for line in lines:
            if not line:
                break  # blank line: end of head
            name, sep, value = line.partition(": ")
            if not sep:
                continue  # not a "Name: value" line
            headers[name.lower()] = value
        return headers


def parse_request(
    data: bytes,
    client_address: Tuple[str, int] = ("", 0),
    max_size: int = 10 * 1024 * 1024,
) -> HTTPRequest:
    """Parse a request buffer with a one-off RequestParser."""
    return RequestParser(max_request_size=max_size).parse(data, client_address)
