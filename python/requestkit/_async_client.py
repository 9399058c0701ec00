import asyncio
import concurrent.futures
import functools
import threading

from ._client import Client
from ._config import _logger


def _dispatch(on_response, on_error, future):
    """Deliver a finished future to exactly one of the two callbacks."""
    if future.cancelled():
        return
    error = future.exception()
    if error is not None:
        if on_error is not None:
            on_error(error)
    elif on_response is not None:
        on_response(future.result())


class AsyncClient:
    """Runs each request on its own thread and reports back through callbacks.

    Every call returns a ``concurrent.futures.Future`` holding the Response
    or the exception. ``on_response`` or ``on_error`` (whichever applies)
    is invoked once, on the worker thread, when the call finishes; a missing
    callback means the outcome is only available from the future. The
    ``a``-prefixed methods await the same future from asyncio code.

    Client options (``headers``, ``cookies``, ``auth``, ``timeout``,
    ``max_redirects``, ``trust_context``, ``transport``) are passed through to
    the underlying Client, or an existing one is given as ``client``.
    """

    def __init__(self, *, client=None, **client_kwargs):
        if client is not None and client_kwargs:
            raise TypeError("Pass either 'client' or client options, not both.")
        self._client = client if client is not None else Client(**client_kwargs)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        self._client.close()

    @property
    def client(self):
        return self._client

    def request(self, method, url, *, on_response=None, on_error=None, **kwargs):
        """Start a request on a new thread and return its Future immediately.

        Option validation and body encoding happen on the worker thread, so
        every failure, including SchemeError and EncodingError, reaches
        ``on_error`` rather than being raised here.
        """
        future = concurrent.futures.Future()
        future.add_done_callback(functools.partial(_dispatch, on_response, on_error))

        def run():
            if not future.set_running_or_notify_cancel():
                return
            try:
                response = self._client.request(method, url, **kwargs)
            except Exception as e:
                future.set_exception(e)
            else:
                future.set_result(response)

        thread = threading.Thread(target=run, name=f"requestkit-{method.lower()}", daemon=True)
        _logger.debug(f"Dispatching {method} {url} on {thread.name}")
        thread.start()
        return future

    def get(self, url, **kwargs):
        return self.request("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)

    def put(self, url, **kwargs):
        return self.request("PUT", url, **kwargs)

    def patch(self, url, **kwargs):
        return self.request("PATCH", url, **kwargs)

    def delete(self, url, **kwargs):
        return self.request("DELETE", url, **kwargs)

    def head(self, url, **kwargs):
        return self.request("HEAD", url, **kwargs)

    def options(self, url, **kwargs):
        return self.request("OPTIONS", url, **kwargs)

    async def arequest(self, method, url, **kwargs):
        """Await a request from asyncio code without blocking the event loop."""
        return await asyncio.wrap_future(self.request(method, url, **kwargs))

    async def aget(self, url, **kwargs):
        return await self.arequest("GET", url, **kwargs)

    async def apost(self, url, **kwargs):
        return await self.arequest("POST", url, **kwargs)

    async def aput(self, url, **kwargs):
        return await self.arequest("PUT", url, **kwargs)

    async def apatch(self, url, **kwargs):
        return await self.arequest("PATCH", url, **kwargs)

    async def adelete(self, url, **kwargs):
        return await self.arequest("DELETE", url, **kwargs)

    async def ahead(self, url, **kwargs):
        return await self.arequest("HEAD", url, **kwargs)

    async def aoptions(self, url, **kwargs):
        return await self.arequest("OPTIONS", url, **kwargs)

    def __repr__(self):
        return f"<AsyncClient client={self._client!r}>"
