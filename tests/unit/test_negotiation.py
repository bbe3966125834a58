"""
Unit tests for Accept-Encoding negotiation and gzip encoding.
"""

import gzip

import pytest

from tinyhttpd.http.negotiation import (
    ContentNegotiator,
    parse_accept_encoding,
)
from tinyhttpd.http.response import ok


class TestParseAcceptEncoding:

    def test_splits_and_trims(self):
        assert parse_accept_encoding("invalid-1, gzip, invalid-2") == ["invalid-1", "gzip", "invalid-2"]

    def test_drops_quality_and_lowercases(self):
        assert parse_accept_encoding("GZIP;q=1.0,  br ;q=0.5") == ["gzip", "br"]

    def test_empty(self):
        assert parse_accept_encoding("") == []
        assert parse_accept_encoding(" , ") == []


class TestContentNegotiator:
    """Tests for ContentNegotiator."""

    @pytest.mark.parametrize("header,expected", [
        ("gzip", "gzip"),
        ("invalid-1, gzip, invalid-2", "gzip"),
        ("br, deflate, gzip", "gzip"),
        ("deflate", None),
        ("br", None),
        ("invalid-encoding", None),
        ("", None),
    ])
    def test_select(self, header, expected):
        assert ContentNegotiator().select(header) == expected

    def test_supports_gzip_only(self):
        assert ContentNegotiator().supported == ("gzip",)

    def test_only_gzip_has_an_encoder(self):
        with pytest.raises(ValueError):
            ContentNegotiator(supported=("gzip", "br"))

    def test_encode_gzip(self):
        response = ContentNegotiator().encode(ok("abc"), "gzip")
        body = response.body_bytes()

        assert gzip.decompress(body) == b"abc"
        assert response.headers["Content-Encoding"] == "gzip"
        assert response.headers["Content-Length"] == str(len(body))
        assert list(response.headers) == ["Content-Type", "Content-Length", "Content-Encoding"]

    def test_encode_unknown_encoding(self):
        with pytest.raises(ValueError):
            ContentNegotiator().encode(ok("abc"), "br")
