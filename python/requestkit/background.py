"""
Fire-and-forget variants of the top-level API.

Each function starts the request on a new thread and returns a
``concurrent.futures.Future`` at once. ``on_response`` receives the Response,
``on_error`` receives the exception; exactly one of them runs::

    import requestkit.background

    requestkit.background.get(
        "https://example.org/",
        on_response=lambda r: print(r.status_code),
        on_error=lambda e: print("failed:", e),
    )
"""

from ._async_client import AsyncClient


def request(method, url, *, on_response=None, on_error=None, **kwargs):
    client = AsyncClient()
    future = client.request(method, url, on_response=on_response, on_error=on_error, **kwargs)
    future.add_done_callback(lambda _: client.close())
    return future


def get(url, *, on_response=None, on_error=None, **kwargs):
    return request("GET", url, on_response=on_response, on_error=on_error, **kwargs)


def post(url, *, on_response=None, on_error=None, **kwargs):
    return request("POST", url, on_response=on_response, on_error=on_error, **kwargs)


def put(url, *, on_response=None, on_error=None, **kwargs):
    return request("PUT", url, on_response=on_response, on_error=on_error, **kwargs)


def patch(url, *, on_response=None, on_error=None, **kwargs):
    return request("PATCH", url, on_response=on_response, on_error=on_error, **kwargs)


def delete(url, *, on_response=None, on_error=None, **kwargs):
    return request("DELETE", url, on_response=on_response, on_error=on_error, **kwargs)


def head(url, *, on_response=None, on_error=None, **kwargs):
    return request("HEAD", url, on_response=on_response, on_error=on_error, **kwargs)


def options(url, *, on_response=None, on_error=None, **kwargs):
    return request("OPTIONS", url, on_response=on_response, on_error=on_error, **kwargs)
