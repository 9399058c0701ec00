# Redirect decisions: whether a response ends the chain, and the next request if not

import enum
from urllib.parse import urljoin, urlsplit, urlunsplit

from ._config import _logger
from ._exceptions import AlreadyConsumedError, SchemeError
from ._request import check_url
from ._utils import merge_set_cookies, render_cookie_header

REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})

_BODY_HEADERS = ("Content-Type", "Content-Length", "Transfer-Encoding")


class RedirectKind(enum.Enum):
    TERMINAL = "terminal"
    FOLLOW = "follow"


class RedirectDecision:
    """Outcome of examining one response: stop here, or follow with ``request``."""

    def __init__(self, kind, request=None):
        self.kind = kind
        self.request = request

    @property
    def is_terminal(self):
        return self.kind is RedirectKind.TERMINAL

    def __repr__(self):
        if self.is_terminal:
            return "<RedirectDecision TERMINAL>"
        return f"<RedirectDecision FOLLOW {self.request.method} {self.request.url}>"


TERMINAL = RedirectDecision(RedirectKind.TERMINAL)


def redirect_method(method, status_code):
    if status_code == 303:
        return "GET"
    if status_code in (301, 302) and method == "POST":
        return "GET"
    return method


def resolve_redirect(request, status_code, headers):
    """Decide how the exchange continues after a response to ``request``.

    Raises SchemeError for a Location outside http(s) and AlreadyConsumedError
    when a 307/308 would replay a stream body that cannot be rewound.
    """
    if not request.allow_redirects or status_code not in REDIRECT_STATUSES:
        return TERMINAL
    location = headers.get("Location")
    if not location:
        return TERMINAL

    url = _resolve_location(request.url, location)
    try:
        url = check_url(url)
    except SchemeError as e:
        raise SchemeError(f"Cannot follow redirect to {location!r}: {e}", request=request) from e

    method = redirect_method(request.method, status_code)
    new_headers = request.headers
    new_headers.pop("Host", None)
    if urlsplit(url).netloc.lower() != request.host:
        new_headers.pop("Authorization", None)

    body = request.body
    if method != request.method or status_code == 303:
        body = None
        for name in _BODY_HEADERS:
            new_headers.pop(name, None)
    elif body is not None and not body.rewind():
        raise AlreadyConsumedError(
            "The request body stream was consumed and cannot be replayed for the redirect.",
            request=request,
        )

    cookies = merge_set_cookies(request.cookies, headers.getlist("Set-Cookie"))
    new_headers.pop("Cookie", None)
    if cookies:
        new_headers["Cookie"] = render_cookie_header(cookies)

    _logger.debug("Redirect %s %s -> %s %s", status_code, request.url, method, url)
    return RedirectDecision(
        RedirectKind.FOLLOW,
        request.copy_with(method=method, url=url, headers=new_headers, cookies=cookies, body=body),
    )


def _resolve_location(base_url, location):
    # Keep the original fragment when the Location has none
    url = urljoin(base_url, location)
    parts = urlsplit(url)
    if not parts.fragment:
        fragment = urlsplit(base_url).fragment
        if fragment:
            url = urlunsplit(parts._replace(fragment=fragment))
    return url
