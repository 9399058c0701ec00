# Exception classes with request attribute support

import socket

from urllib3 import exceptions as _urllib3_exceptions


class RequestError(Exception):
    """Base class for request errors."""
    def __init__(self, message="", *, request=None):
        super().__init__(message)
        self._request = request

    @property
    def request(self):
        if self._request is None:
            raise RuntimeError(
                "The request instance has not been set on this exception."
            )
        return self._request


class SchemeError(RequestError):
    """Unsupported or malformed URL. Raised before any I/O."""
    pass


class EncodingError(RequestError, ValueError):
    """Conflicting or unrepresentable request body input."""
    pass


class TransportError(RequestError):
    """Base class for connection-level failures."""
    pass


class ConnectError(TransportError):
    """Error connecting to host."""
    pass


class TimeoutError(TransportError):
    """The exchange exceeded the configured timeout."""
    pass


class TooManyRedirectsError(RequestError):
    """The redirect ceiling was exceeded."""
    pass


class ParseError(RequestError, ValueError):
    """The response body could not be parsed as JSON."""
    pass


class DecodingError(RequestError):
    """The response body could not be decompressed."""
    pass


class AlreadyConsumedError(RequestError):
    """A body stream was read after it had already been drained."""
    pass


class HTTPStatusError(RequestError):
    """Raised by Response.raise_for_status() for 4xx and 5xx responses."""

    def __init__(self, message, *, request=None, response=None):
        super().__init__(message, request=request)
        self.response = response


def _convert_exception(exc, request=None):
    """Convert a urllib3 exception to the matching requestkit exception."""
    msg = str(exc)
    # NewConnectionError subclasses ConnectTimeoutError, check it first
    if isinstance(exc, _urllib3_exceptions.NewConnectionError):
        return ConnectError(msg, request=request)
    elif isinstance(exc, _urllib3_exceptions.ConnectTimeoutError):
        return TimeoutError(msg, request=request)
    elif isinstance(exc, _urllib3_exceptions.ReadTimeoutError):
        return TimeoutError(msg, request=request)
    elif isinstance(exc, _urllib3_exceptions.TimeoutError):
        return TimeoutError(msg, request=request)
    elif isinstance(exc, _urllib3_exceptions.LocationValueError):
        return SchemeError(msg, request=request)
    elif isinstance(exc, _urllib3_exceptions.DecodeError):
        return DecodingError(msg, request=request)
    elif isinstance(exc, _urllib3_exceptions.HTTPError):
        return TransportError(msg, request=request)
    elif isinstance(exc, socket.timeout):
        return TimeoutError(msg, request=request)
    elif isinstance(exc, OSError):
        return TransportError(msg, request=request)
    else:
        return exc


# Tuple of the exception types the transport converts
_TRANSPORT_EXCEPTIONS = (
    _urllib3_exceptions.HTTPError,
    OSError,
)
