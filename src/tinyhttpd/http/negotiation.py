"""
=============================================================================
CONTENT NEGOTIATION (Accept-Encoding)
=============================================================================

Clients advertise the compression schemes they understand:

    Accept-Encoding: invalid-encoding-1, gzip, deflate;q=0.5

The server walks that list IN THE CLIENT'S ORDER and picks the first
scheme it supports. Quality values (";q=...") are stripped and otherwise
ignored: list order is the preference order.

    Client list                    Supported {"gzip"}    Result
    ─────────────────────────────  ───────────────────   ──────
    "gzip"                                               gzip
    "invalid-1, gzip, invalid-2"                         gzip
    "deflate, br"                                        None
    ""                                                   None

=============================================================================
SUPPORTED ENCODINGS
=============================================================================

Only gzip is applied. "deflate" and "br" are valid scheme names but are
not in the supported set, so a client listing only them receives an
uncompressed body.

=============================================================================
"""

import gzip
import logging
from typing import Iterable, List, Optional

from .response import HTTPResponse


logger = logging.getLogger(__name__)


SUPPORTED_ENCODINGS = ("gzip",)


def parse_accept_encoding(header_value: str) -> List[str]:
    """
    Split an Accept-Encoding value into lowercased scheme names.

        "GZIP ;q=1.0,  br" → ["gzip", "br"]
    """
    schemes = []
    for token in header_value.split(","):
        scheme = token.split(";", 1)[0].strip().lower()
        if scheme:
            schemes.append(scheme)
    return schemes


class ContentNegotiator:
    """
    Selects and applies a response content-encoding.

    Usage:
        negotiator = ContentNegotiator()
        encoding = negotiator.select(request.accept_encoding)
        if encoding:
            negotiator.encode(response, encoding)
    """

    def __init__(self, supported: Iterable[str] = SUPPORTED_ENCODINGS, level: int = 9):
        """
        Args:
            supported: Encodings this server will apply. Only "gzip" has an
                       encoder; anything else raises ValueError.
            level: gzip compression level (1 fastest, 9 smallest).
        """
        self.supported = tuple(s.lower() for s in supported)
        unknown = [s for s in self.supported if s != "gzip"]
        if unknown:
            raise ValueError(f"No encoder for: {', '.join(unknown)}")
        self.level = level

    def select(self, accept_encoding: str) -> Optional[str]:
        """
        First scheme from the client's list that this server supports.

        Returns:
            The scheme name, or None when there is no overlap.
        """
        for scheme in parse_accept_encoding(accept_encoding):
            if scheme in self.supported:
                return scheme
        return None

    def encode(self, response: HTTPResponse, encoding: str) -> HTTPResponse:
        """
        Compress the response body in place.

        Sets Content-Encoding and a Content-Length measuring the
        compressed bytes.
        """
        if encoding != "gzip":
            raise ValueError(f"Unsupported encoding: {encoding}")

        original = response.body_bytes()
        compressed = gzip.compress(original, compresslevel=self.level)
        response.headers["Content-Encoding"] = "gzip"
        response.set_body(compressed)
        logger.debug(f"gzip: {len(original)} -> {len(compressed)} bytes")
        return response

