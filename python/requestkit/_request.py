# Request model and construction from options and client defaults

from urllib.parse import urlsplit

from urllib3 import HTTPHeaderDict

from ._auth import _extract_auth_from_url
from ._config import DEFAULT_HEADERS, METHODS, USE_CLIENT_DEFAULT, RequestOptions
from ._encoders import encode_body
from ._exceptions import SchemeError
from ._utils import merge_url_query, parse_cookie_header, render_cookie_header, strip_userinfo

_BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


class Request:
    """A fully resolved outgoing request.

    Instances are not mutated after construction; the redirect engine builds
    the next hop with ``copy_with``.
    """

    def __init__(
        self,
        method,
        url,
        headers=None,
        cookies=None,
        body=None,
        allow_redirects=True,
        timeout=None,
        trust_context=None,
        stream=False,
    ):
        self._method = method.upper()
        self._url = url
        self._headers = HTTPHeaderDict(headers or {})
        self._cookies = dict(cookies or {})
        self._body = body
        self._allow_redirects = allow_redirects
        self._timeout = timeout
        self._trust_context = trust_context
        self._stream = stream

    @property
    def method(self):
        return self._method

    @property
    def url(self):
        return self._url

    @property
    def headers(self):
        """A copy of the headers; edits do not reach the request."""
        return HTTPHeaderDict(self._headers)

    @property
    def cookies(self):
        return dict(self._cookies)

    @property
    def body(self):
        return self._body

    @property
    def content(self):
        """The encoded body as bytes, or None for stream and empty bodies."""
        if self._body is None:
            return None
        return self._body.content

    @property
    def allow_redirects(self):
        return self._allow_redirects

    @property
    def timeout(self):
        return self._timeout

    @property
    def trust_context(self):
        return self._trust_context

    @property
    def stream(self):
        return self._stream

    @property
    def host(self):
        return urlsplit(self._url).netloc.lower()

    def copy_with(self, **changes):
        fields = {
            "method": self._method,
            "url": self._url,
            "headers": self._headers,
            "cookies": self._cookies,
            "body": self._body,
            "allow_redirects": self._allow_redirects,
            "timeout": self._timeout,
            "trust_context": self._trust_context,
            "stream": self._stream,
        }
        fields.update(changes)
        return Request(**fields)

    def __repr__(self):
        return f"<Request({self._method!r}, {self._url!r})>"


def check_url(url):
    """Validate that ``url`` is an absolute http(s) URL and return it as str."""
    url = str(url)
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
    except ValueError as e:
        raise SchemeError(f"Invalid URL {url!r}: {e}") from e
    if parts.scheme.lower() not in ("http", "https"):
        raise SchemeError(f"Unsupported URL scheme {parts.scheme!r} in {url!r}.")
    if not hostname:
        raise SchemeError(f"No host supplied in URL {url!r}.")
    return url


def build_request(
    method,
    url,
    options=None,
    *,
    default_headers=None,
    default_cookies=None,
    default_auth=None,
    default_timeout=None,
    default_trust_context=None,
):
    """Resolve a method, URL and RequestOptions into a Request.

    Headers are layered as library defaults, then client defaults, then the
    per-request headers, last write wins. ``Cookie`` headers at any layer
    merge with the cookie mappings instead of replacing them. Body encoding
    errors surface here, before any I/O.
    """
    if options is None:
        options = RequestOptions()
    method = method.upper()
    if method not in METHODS:
        raise ValueError(f"Unsupported HTTP method {method!r}.")
    url = check_url(url)

    # Explicit auth wins over URL userinfo, which wins over the client default
    auth = options.auth
    url_auth = _extract_auth_from_url(url)
    if url_auth is not None:
        url = strip_userinfo(url)
        if auth is None:
            auth = url_auth
    if auth is None:
        auth = default_auth
    url = merge_url_query(url, options.params)

    headers = HTTPHeaderDict()
    cookies = dict(default_cookies or {})
    for layer in (DEFAULT_HEADERS, default_headers, options.headers):
        if not layer:
            continue
        for name, value in layer.items():
            if name.lower() == "cookie":
                cookies.update(parse_cookie_header(value))
            else:
                headers[name] = str(value)
    if options.cookies:
        cookies.update({name: str(value) for name, value in options.cookies.items()})
    if cookies:
        headers["Cookie"] = render_cookie_header(cookies)

    body = encode_body(data=options.data, json=options.json, files=options.files)
    if body is not None:
        for name, value in body.headers().items():
            if name == "Content-Type" and name in headers:
                continue
            headers[name] = value
    elif method in _BODY_METHODS:
        headers["Content-Length"] = "0"

    if auth is not None:
        auth.apply(headers)

    allow_redirects = options.allow_redirects
    if allow_redirects is None:
        allow_redirects = method != "HEAD"
    timeout = options.timeout
    if timeout is USE_CLIENT_DEFAULT:
        timeout = default_timeout
    trust_context = options.trust_context
    if trust_context is USE_CLIENT_DEFAULT:
        trust_context = default_trust_context

    return Request(
        method,
        url,
        headers=headers,
        cookies=cookies,
        body=body,
        allow_redirects=allow_redirects,
        timeout=timeout,
        trust_context=trust_context,
        stream=options.stream,
    )
