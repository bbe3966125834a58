"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The subset of RFC 7231 status codes this server can produce.

Every response line carries a numeric code and a reason phrase:

    HTTP/1.1 404 Not Found
             ─── ─────────
              │      │
              │      └── Reason phrase (for humans)
              └───────── Status code (for machines)

Codes are grouped by their first digit:

    2xx  Success        - the route did what was asked
    4xx  Client error   - the request was wrong (bad path, bad method)
    5xx  Server error   - something failed on our side

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes produced by the server.

    IntEnum members compare equal to plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    # 2xx SUCCESS
    OK = 200                        # GET succeeded
    CREATED = 201                   # POST to files/ wrote the file

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400               # files route without a file name
    FORBIDDEN = 403                 # path escapes the base directory
    NOT_FOUND = 404                 # unknown route or missing file
    METHOD_NOT_ALLOWED = 405        # files route with a verb other than GET/POST
    REQUEST_TIMEOUT = 408           # client connected but never finished sending
    PAYLOAD_TOO_LARGE = 413         # request exceeds max_request_size

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500     # malformed request or handler failure
    SERVICE_UNAVAILABLE = 503       # worker pool queue is full

    @property
    def phrase(self) -> str:
        """Reason phrase used in the status line."""
        return _STATUS_PHRASES.get(self, "Unknown")


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
}
