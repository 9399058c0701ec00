# Top-level API functions, each running one request on a short-lived Client

from ._client import Client


def request(method, url, **kwargs):
    """Send an HTTP request.

    Keyword arguments are the per-request options accepted by
    ``Client.request``. In streaming mode the returned response keeps its
    connection until it is read or closed.
    """
    with Client() as client:
        return client.request(method, url, **kwargs)


def get(url, **kwargs):
    """Send a GET request."""
    return request("GET", url, **kwargs)


def post(url, **kwargs):
    """Send a POST request."""
    return request("POST", url, **kwargs)


def put(url, **kwargs):
    """Send a PUT request."""
    return request("PUT", url, **kwargs)


def patch(url, **kwargs):
    """Send a PATCH request."""
    return request("PATCH", url, **kwargs)


def delete(url, **kwargs):
    """Send a DELETE request."""
    return request("DELETE", url, **kwargs)


def head(url, **kwargs):
    """Send a HEAD request."""
    return request("HEAD", url, **kwargs)


def options(url, **kwargs):
    """Send an OPTIONS request."""
    return request("OPTIONS", url, **kwargs)
