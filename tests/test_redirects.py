"""Tests for redirect decisions."""

import io

import pytest
from urllib3 import HTTPHeaderDict

from requestkit import (
    AlreadyConsumedError,
    RequestOptions,
    SchemeError,
    build_request,
    resolve_redirect,
)


def _post(url="http://example.org/start", **options):
    options.setdefault("data", "payload")
    return build_request("POST", url, RequestOptions(**options))


def _location(url, *extra):
    return HTTPHeaderDict([("Location", url), *extra])


class TestTerminal:
    """Responses that end the chain."""

    def test_not_a_redirect(self):
        assert resolve_redirect(_post(), 200, _location("/next")).is_terminal

    def test_missing_location(self):
        assert resolve_redirect(_post(), 302, HTTPHeaderDict()).is_terminal

    def test_redirects_disabled(self):
        request = _post(allow_redirects=False)
        assert resolve_redirect(request, 302, _location("/next")).is_terminal

    def test_not_modified_is_terminal(self):
        assert resolve_redirect(_post(), 304, _location("/next")).is_terminal


class TestMethodRewrite:
    """Method and body handling per status code."""

    @pytest.mark.parametrize("status_code", [301, 302])
    def test_post_becomes_get(self, status_code):
        decision = resolve_redirect(_post(), status_code, _location("/next"))
        follow = decision.request
        assert follow.method == "GET"
        assert follow.body is None
        assert "Content-Length" not in follow.headers

    @pytest.mark.parametrize("status_code", [301, 302])
    def test_put_is_preserved(self, status_code):
        request = build_request("PUT", "http://example.org/", RequestOptions(data="x"))
        follow = resolve_redirect(request, status_code, _location("/next")).request
        assert follow.method == "PUT"
        assert follow.content == b"x"

    @pytest.mark.parametrize("method", ["POST", "PUT", "DELETE"])
    def test_303_becomes_get(self, method):
        request = build_request(method, "http://example.org/", RequestOptions(data="x"))
        follow = resolve_redirect(request, 303, _location("/next")).request
        assert follow.method == "GET"
        assert follow.body is None

    @pytest.mark.parametrize("status_code", [307, 308])
    def test_method_and_body_preserved(self, status_code):
        request = _post(json={"a": 1}, data=None)
        follow = resolve_redirect(request, status_code, _location("/next")).request
        assert follow.method == "POST"
        assert follow.content == b'{"a":1}'
        assert follow.headers["Content-Type"] == "application/json"

    def test_stream_body_is_rewound(self):
        stream = io.BytesIO(b"streamed")
        request = _post(data=stream)
        stream.read()
        follow = resolve_redirect(request, 307, _location("/next")).request
        assert follow.body.stream.read() == b"streamed"

    def test_unrewindable_stream_body(self):
        request = _post(data=iter([b"a", b"b"]))
        with pytest.raises(AlreadyConsumedError):
            resolve_redirect(request, 307, _location("/next"))


class TestLocation:
    """Location resolution and header rewriting."""

    def test_relative_location(self):
        follow = resolve_redirect(_post("http://example.org/a/b"), 302, _location("c?x=1")).request
        assert follow.url == "http://example.org/a/c?x=1"

    def test_absolute_location(self):
        follow = resolve_redirect(_post(), 302, _location("https://other.example/")).request
        assert follow.url == "https://other.example/"

    def test_fragment_is_kept(self):
        request = build_request("GET", "http://example.org/page#section")
        follow = resolve_redirect(request, 302, _location("/other")).request
        assert follow.url == "http://example.org/other#section"

    def test_non_http_location(self):
        with pytest.raises(SchemeError):
            resolve_redirect(_post(), 302, _location("ftp://example.org/file"))

    def test_authorization_dropped_across_hosts(self):
        request = _post(auth=("user", "pass"))
        follow = resolve_redirect(request, 307, _location("http://elsewhere.example/")).request
        assert "Authorization" not in follow.headers

    def test_authorization_kept_on_same_host(self):
        request = _post(auth=("user", "pass"))
        follow = resolve_redirect(request, 307, _location("/same")).request
        assert follow.headers["Authorization"] == request.headers["Authorization"]

    def test_set_cookie_carried_to_next_request(self):
        request = _post(cookies={"old": "1"})
        headers = _location("/next", ("Set-Cookie", "new=2; Path=/"), ("Set-Cookie", "old=; Max-Age=0"))
        follow = resolve_redirect(request, 302, headers).request
        assert follow.cookies == {"new": "2"}
        assert follow.headers["Cookie"] == "new=2"
