import datetime
import time

from urllib3 import HTTPHeaderDict

from ._auth import _normalize_auth
from ._config import DEFAULT_MAX_REDIRECTS, RequestOptions, _logger
from ._exceptions import TooManyRedirectsError
from ._redirects import resolve_redirect
from ._request import build_request
from ._response import Response
from ._streams import wrap_stream
from ._transports import HTTPTransport
from ._utils import merge_set_cookies


class Client:
    """Synchronous HTTP client.

    Holds defaults (headers, cookies, auth, timeout, trust context) that are
    merged under each request's own options, and a transport that performs
    single exchanges. Redirects are followed here, one hop per exchange.
    """

    def __init__(
        self,
        *,
        headers=None,
        cookies=None,
        auth=None,
        timeout=None,
        max_redirects=DEFAULT_MAX_REDIRECTS,
        trust_context=None,
        transport=None,
    ):
        # Validate defaults the same way per-request options are validated
        RequestOptions(headers=headers, cookies=cookies, timeout=timeout, trust_context=trust_context)
        if max_redirects < 0:
            raise ValueError("'max_redirects' must be a non-negative integer.")
        self._headers = HTTPHeaderDict(headers or {})
        self._cookies = dict(cookies or {})
        self._auth = _normalize_auth(auth)
        self._timeout = timeout
        self._max_redirects = max_redirects
        self._trust_context = trust_context
        self._transport = transport if transport is not None else HTTPTransport()
        self._is_closed = False

    def __enter__(self):
        if self._is_closed:
            raise RuntimeError("Cannot open a client that has been closed")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Close the client and its transport."""
        if not self._is_closed:
            self._transport.close()
            self._is_closed = True

    @property
    def is_closed(self):
        """Return True if the client has been closed."""
        return self._is_closed

    @property
    def headers(self):
        return self._headers

    @property
    def cookies(self):
        return self._cookies

    @property
    def timeout(self):
        return self._timeout

    @property
    def max_redirects(self):
        return self._max_redirects

    @property
    def transport(self):
        return self._transport

    def _check_closed(self):
        """Raise RuntimeError if the client is closed."""
        if self._is_closed:
            raise RuntimeError("Cannot send request on a closed client")

    def build_request(self, method, url, **kwargs):
        """Build a Request from keyword options and this client's defaults."""
        options = RequestOptions(**kwargs)
        return build_request(
            method,
            url,
            options,
            default_headers=self._headers,
            default_cookies=self._cookies,
            default_auth=self._auth,
            default_timeout=self._timeout,
            default_trust_context=self._trust_context,
        )

    def send(self, request):
        """Send a Request, following redirects if it allows them.

        Unless the request is in streaming mode, the final body is read before
        returning and the connection released.
        """
        self._check_closed()
        response = self._send_handling_redirects(request)
        if not request.stream:
            try:
                response.read()
            except BaseException:
                response.close()
                raise
        return response

    def _send_single_request(self, request):
        started = time.perf_counter()
        result = self._transport.handle_request(request)
        response = Response(
            result.status_code,
            headers=result.headers,
            raw=wrap_stream(result.stream, result.headers.get("Content-Encoding")),
            request=request,
            reason_phrase=result.reason_phrase,
            http_version=result.http_version,
            elapsed=datetime.timedelta(seconds=time.perf_counter() - started),
        )
        _logger.info(
            f'HTTP Request: {request.method} {request.url} "{response.http_version} {response.status_code} {response.reason_phrase}"'
        )
        return response

    def _send_handling_redirects(self, request):
        history = []
        cookies = {}
        while True:
            response = self._send_single_request(request)
            merge_set_cookies(cookies, response.headers.getlist("Set-Cookie"))
            response.cookies = dict(cookies)
            response.history = list(history)
            try:
                decision = resolve_redirect(request, response.status_code, response.headers)
            except BaseException:
                response.close()
                raise
            if decision.is_terminal:
                return response

            try:
                if len(history) >= self._max_redirects:
                    raise TooManyRedirectsError(
                        f"Exceeded maximum allowed redirects ({self._max_redirects}).",
                        request=request,
                    )
                # Drain so the connection can be reused for the next hop
                response.read()
            finally:
                response.close()
            history.append(response)
            request = decision.request

    def request(self, method, url, **kwargs):
        """Send an HTTP request.

        Keyword arguments are the fields of RequestOptions: ``params``,
        ``headers``, ``cookies``, ``auth``, ``data``, ``json``, ``files``,
        ``timeout``, ``allow_redirects``, ``stream`` and ``trust_context``.
        """
        self._check_closed()
        return self.send(self.build_request(method, url, **kwargs))

    def get(self, url, **kwargs):
        """HTTP GET."""
        return self.request("GET", url, **kwargs)

    def post(self, url, **kwargs):
        """HTTP POST."""
        return self.request("POST", url, **kwargs)

    def put(self, url, **kwargs):
        """HTTP PUT."""
        return self.request("PUT", url, **kwargs)

    def patch(self, url, **kwargs):
        """HTTP PATCH."""
        return self.request("PATCH", url, **kwargs)

    def delete(self, url, **kwargs):
        """HTTP DELETE."""
        return self.request("DELETE", url, **kwargs)

    def head(self, url, **kwargs):
        """HTTP HEAD. Redirects are not followed unless ``allow_redirects=True``."""
        return self.request("HEAD", url, **kwargs)

    def options(self, url, **kwargs):
        """HTTP OPTIONS."""
        return self.request("OPTIONS", url, **kwargs)

    def __repr__(self):
        return f"<Client transport={self._transport!r}>"
