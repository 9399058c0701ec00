# Transport base classes and implementations

import http.client
import io

import urllib3
from urllib3.util import parse_url

from ._exceptions import _TRANSPORT_EXCEPTIONS, _convert_exception

_HTTP_VERSIONS = {10: "HTTP/1.0", 11: "HTTP/1.1", 20: "HTTP/2"}


class TransportResponse:
    """Status line, headers and an unread body source, as a transport returns them.

    ``stream`` is any object with ``read(n)`` and ``close()``. Passing
    ``content`` instead wraps the bytes in a stream.
    """

    def __init__(
        self,
        status_code,
        headers=None,
        stream=None,
        content=None,
        reason_phrase=None,
        http_version="HTTP/1.1",
    ):
        self.status_code = status_code
        self.headers = urllib3.HTTPHeaderDict(headers or {})
        if stream is None:
            if isinstance(content, str):
                content = content.encode("utf-8")
            stream = io.BytesIO(content or b"")
        self.stream = stream
        if reason_phrase is None:
            reason_phrase = http.client.responses.get(status_code, "")
        self.reason_phrase = reason_phrase
        self.http_version = http_version

    def __repr__(self):
        return f"<TransportResponse [{self.status_code}]>"


class BaseTransport:
    """Base class for HTTP transport implementations.

    Subclass and implement handle_request to create custom transports.
    """

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return None

    def close(self):
        pass

    def handle_request(self, request):
        raise NotImplementedError("Subclasses must implement handle_request()")


class _ResponseBody:
    """Reads a urllib3 response without decoding, converting its errors."""

    def __init__(self, response, request):
        self._response = response
        self._request = request
        self._exhausted = False
        self._closed = False

    def read(self, amt=None):
        if self._closed:
            return b""
        try:
            data = self._response.read(amt, decode_content=False)
        except _TRANSPORT_EXCEPTIONS as e:
            raise _convert_exception(e, self._request) from e
        if not data:
            self._exhausted = True
        return data

    def close(self):
        if self._closed:
            return
        self._closed = True
        if not self._exhausted:
            self._response.close()
        self._response.release_conn()


class HTTPTransport(BaseTransport):
    """Transport that performs real exchanges through a urllib3 PoolManager.

    Redirects, retries and content decoding are disabled in urllib3; the
    client layer owns all three. A request's ``trust_context`` selects the
    pool's SSL context.
    """

    def __init__(self, pool_manager=None, **pool_kwargs):
        self._pool_manager = pool_manager or urllib3.PoolManager(**pool_kwargs)

    def handle_request(self, request):
        pool_kwargs = None
        if request.trust_context is not None:
            pool_kwargs = {"ssl_context": request.trust_context}
        body = request.body
        if body is None:
            payload, chunked = None, False
        elif body.is_stream:
            payload, chunked = body.stream, body.chunked
        else:
            payload, chunked = body.content, False

        try:
            pool = self._pool_manager.connection_from_url(request.url, pool_kwargs=pool_kwargs)
            response = pool.urlopen(
                request.method,
                parse_url(request.url).request_uri,
                body=payload,
                headers=urllib3.HTTPHeaderDict(request.headers),
                redirect=False,
                retries=False,
                assert_same_host=False,
                preload_content=False,
                decode_content=False,
                timeout=urllib3.Timeout(connect=request.timeout, read=request.timeout),
                chunked=chunked,
            )
        except _TRANSPORT_EXCEPTIONS as e:
            raise _convert_exception(e, request) from e

        return TransportResponse(
            response.status,
            headers=response.headers,
            stream=_ResponseBody(response, request),
            reason_phrase=response.reason,
            http_version=_HTTP_VERSIONS.get(response.version, "HTTP/1.1"),
        )

    def close(self):
        self._pool_manager.clear()

    def __repr__(self):
        return "<HTTPTransport>"


class MockTransport(BaseTransport):
    """Mock transport for testing - calls a handler function to generate responses.

    The handler receives the outgoing Request and returns a TransportResponse.
    """

    def __init__(self, handler=None):
        self._handler = handler

    @property
    def handler(self):
        """Public access to the handler function."""
        return self._handler

    def handle_request(self, request):
        if self._handler is None:
            return TransportResponse(200)
        result = self._handler(request)
        if not isinstance(result, TransportResponse):
            raise TypeError(
                f"MockTransport handler must return a TransportResponse. Got {type(result).__name__}."
            )
        return result

    def __repr__(self):
        return "<MockTransport>"
