"""
Unit tests for the built-in route handlers.
"""

import gzip
import os

import pytest

from tinyhttpd.handlers import FilesHandler, echo, register_default_routes, root, user_agent
from tinyhttpd.http.headers import Headers
from tinyhttpd.http.request import HTTPRequest, parse_request
from tinyhttpd.http.router import Router
from tinyhttpd.http.status_codes import HTTPStatus


def make_request(method: str, path: str, headers=None, body=None) -> HTTPRequest:
    return HTTPRequest(method=method, path=path, target=path, headers=Headers(headers or {}), body=body)


class TestRoot:

    def test_root(self):
        response = root(make_request("GET", "/"))

        assert response.status == HTTPStatus.OK
        assert response.headers["Content-Type"] == "text/plain"
        assert response.body_bytes() == b""


class TestEcho:
    """Tests for the echo handler."""

    def test_echo(self):
        response = echo(make_request("GET", "/echo/abc"))

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\nContent-Length: 3\r\n\r\nabc"
        )

    @pytest.mark.parametrize("path", ["/echo", "/echo/"])
    def test_echo_without_message(self, path):
        response = echo(make_request("GET", path))

        assert response.status == HTTPStatus.OK
        assert response.headers["Content-Length"] == "0"
        assert response.body_bytes() == b""

    def test_echo_uses_second_segment_only(self):
        assert echo(make_request("GET", "/echo/a/b")).body == "a"

    def test_echo_is_not_url_decoded(self):
        assert echo(make_request("GET", "/echo/a%20b")).body == "a%20b"

    def test_echo_gzip(self):
        response = echo(make_request("GET", "/echo/abc", {"accept-encoding": "gzip"}))
        body = response.body_bytes()

        assert response.headers["Content-Encoding"] == "gzip"
        assert response.headers["Content-Length"] == str(len(body))
        assert gzip.decompress(body) == b"abc"

    def test_echo_gzip_in_list(self):
        request = make_request("GET", "/echo/abc", {"accept-encoding": "invalid-1, gzip, invalid-2"})
        assert echo(request).headers["Content-Encoding"] == "gzip"

    @pytest.mark.parametrize("value", ["invalid-encoding", "deflate", "br"])
    def test_echo_unsupported_encoding(self, value):
        response = echo(make_request("GET", "/echo/abc", {"accept-encoding": value}))

        assert "Content-Encoding" not in response.headers
        assert response.body_bytes() == b"abc"


class TestUserAgent:

    def test_user_agent(self):
        request = parse_request(b"GET /user-agent HTTP/1.1\r\nUser-Agent: foobar/1.2.3\r\n\r\n")
        response = user_agent(request)

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\nContent-Length: 12\r\n\r\nfoobar/1.2.3"
        )

    def test_missing_user_agent(self):
        response = user_agent(make_request("GET", "/user-agent"))

        assert response.status == HTTPStatus.OK
        assert response.body == ""


class TestFilesHandler:
    """Tests for FilesHandler."""

    def test_requires_existing_directory(self, tmp_path):
        with pytest.raises(ValueError):
            FilesHandler(str(tmp_path / "missing"))

    def test_get_existing_file(self, tmp_path):
        (tmp_path / "foo").write_bytes(b"Hello, World!")
        response = FilesHandler(str(tmp_path)).handle(make_request("GET", "/files/foo"))

        assert response.status == HTTPStatus.OK
        assert list(response.headers.items()) == [
            ("Content-Type", "application/octet-stream"),
            ("Content-Length", "13"),
        ]
        assert response.body == b"Hello, World!"

    def test_get_binary_file(self, tmp_path):
        payload = bytes(range(256))
        (tmp_path / "blob").write_bytes(payload)

        response = FilesHandler(str(tmp_path)).handle(make_request("GET", "/files/blob"))
        assert response.body_bytes() == payload

    def test_get_nested_file(self, tmp_path):
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "a.txt").write_bytes(b"nested")

        response = FilesHandler(str(tmp_path)).handle(make_request("GET", "/files/sub/a.txt"))
        assert response.body == b"nested"

    def test_get_missing_file(self, tmp_path):
        response = FilesHandler(str(tmp_path)).handle(make_request("GET", "/files/nope"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body_bytes() == b""

    def test_get_directory_is_not_found(self, tmp_path):
        (tmp_path / "sub").mkdir()
        response = FilesHandler(str(tmp_path)).handle(make_request("GET", "/files/sub"))

        assert response.status == HTTPStatus.NOT_FOUND

    @pytest.mark.parametrize("path", ["/files", "/files/"])
    def test_missing_name(self, tmp_path, path):
        response = FilesHandler(str(tmp_path)).handle(make_request("GET", path))
        assert response.status == HTTPStatus.BAD_REQUEST

    def test_post_creates_file(self, tmp_path):
        response = FilesHandler(str(tmp_path)).handle(
            make_request("POST", "/files/new.txt", body=b"12345")
        )

        assert response.to_bytes() == b"HTTP/1.1 201 Created\r\n\r\n"
        assert (tmp_path / "new.txt").read_bytes() == b"12345"

    def test_post_overwrites(self, tmp_path):
        (tmp_path / "a").write_bytes(b"old contents")
        FilesHandler(str(tmp_path)).handle(make_request("POST", "/files/a", body=b"new"))

        assert (tmp_path / "a").read_bytes() == b"new"

    def test_post_without_body_writes_empty_file(self, tmp_path):
        response = FilesHandler(str(tmp_path)).handle(make_request("POST", "/files/empty", body=None))

        assert response.status == HTTPStatus.CREATED
        assert (tmp_path / "empty").read_bytes() == b""

    def test_post_short_body_is_written_and_logged(self, tmp_path, caplog):
        request = make_request(
            "POST", "/files/partial", headers={"Content-Length": "10"}, body=b"abc"
        )

        with caplog.at_level("WARNING", logger="tinyhttpd.handlers.files"):
            response = FilesHandler(str(tmp_path)).handle(request)

        assert response.status == HTTPStatus.CREATED
        assert (tmp_path / "partial").read_bytes() == b"abc"
        assert "3 of 10 bytes" in caplog.text

    def test_post_into_missing_subdirectory_raises(self, tmp_path):
        with pytest.raises(OSError):
            FilesHandler(str(tmp_path)).handle(
                make_request("POST", "/files/nodir/a.txt", body=b"x")
            )

    @pytest.mark.parametrize("method", ["PUT", "DELETE", "HEAD"])
    def test_method_not_allowed(self, tmp_path, method):
        response = FilesHandler(str(tmp_path)).handle(make_request(method, "/files/a"))

        assert response.status == HTTPStatus.METHOD_NOT_ALLOWED
        assert response.headers["Allow"] == "GET, POST"

    @pytest.mark.parametrize("path", [
        "/files/../secret",
        "/files/sub/../../secret",
        "/files/..",
    ])
    def test_traversal_forbidden(self, tmp_path, path):
        base = tmp_path / "base"
        base.mkdir()
        (tmp_path / "secret").write_bytes(b"top secret")

        response = FilesHandler(str(base)).handle(make_request("GET", path))

        assert response.status == HTTPStatus.FORBIDDEN
        assert response.body_bytes() == b""

    def test_traversal_post_writes_nothing(self, tmp_path):
        base = tmp_path / "base"
        base.mkdir()

        response = FilesHandler(str(base)).handle(
            make_request("POST", "/files/../escaped", body=b"x")
        )

        assert response.status == HTTPStatus.FORBIDDEN
        assert not (tmp_path / "escaped").exists()

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_symlink_escape_forbidden(self, tmp_path):
        base = tmp_path / "base"
        base.mkdir()
        (tmp_path / "secret").write_bytes(b"top secret")
        os.symlink(tmp_path / "secret", base / "link")

        response = FilesHandler(str(base)).handle(make_request("GET", "/files/link"))
        assert response.status == HTTPStatus.FORBIDDEN


class TestRegisterDefaultRoutes:

    def test_without_directory(self):
        router = register_default_routes(Router())
        assert [key for key, _ in router] == ["", "echo", "user-agent"]

    def test_with_directory(self, tmp_path):
        router = register_default_routes(Router(), str(tmp_path))
        assert "files" in router
