"""
Unit tests for the route table.
"""

import pytest

from tinyhttpd.http.request import HTTPRequest
from tinyhttpd.http.response import ok
from tinyhttpd.http.router import Router
from tinyhttpd.http.status_codes import HTTPStatus


def dummy_handler(request):
    return ok("dummy")


def make_request(path: str, method: str = "GET") -> HTTPRequest:
    return HTTPRequest(method=method, path=path, target=path)


class TestRouter:
    """Tests for Router class."""

    def test_add_and_resolve(self):
        router = Router()
        router.add("echo", dummy_handler)

        assert router.resolve("echo") is dummy_handler
        assert router.resolve("missing") is None
        assert "echo" in router
        assert len(router) == 1

    def test_decorator(self):
        router = Router()

        @router.route("hello")
        def hello(request):
            return ok("Hello!")

        response = router.handle(make_request("/hello"))
        assert response.status == HTTPStatus.OK
        assert response.body == "Hello!"

    def test_root_key(self):
        router = Router()
        router.add("", dummy_handler)

        assert router.handle(make_request("/")).body == "dummy"

    def test_dispatch_uses_first_segment_only(self):
        router = Router()
        router.add("echo", dummy_handler)

        assert router.handle(make_request("/echo/a/b")).status == HTTPStatus.OK
        assert router.handle(make_request("/echoes")).status == HTTPStatus.NOT_FOUND

    def test_key_match_is_exact(self):
        router = Router()
        router.add("user-agent", dummy_handler)

        assert router.handle(make_request("/User-Agent")).status == HTTPStatus.NOT_FOUND

    def test_handle_not_found(self):
        response = Router().handle(make_request("/bogus"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body_bytes() == b""

    def test_duplicate_key_rejected(self):
        router = Router()
        router.add("echo", dummy_handler)

        with pytest.raises(ValueError):
            router.add("echo", dummy_handler)

    def test_key_with_slash_rejected(self):
        with pytest.raises(ValueError):
            Router().add("files/x", dummy_handler)

    def test_handler_exception_propagates(self):
        router = Router()

        @router.route("boom")
        def boom(request):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            router.handle(make_request("/boom"))

    def test_iteration_in_registration_order(self):
        router = Router()
        router.add("", dummy_handler)
        router.add("echo", dummy_handler)

        assert [key for key, _ in router] == ["", "echo"]
