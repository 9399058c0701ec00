"""
requestkit - HTTP client with redirect handling, lazy body decoding and
callback-based background requests.
"""

from urllib3 import HTTPHeaderDict as Headers

from ._api import delete, get, head, options, patch, post, put, request
from ._async_client import AsyncClient
from ._auth import Auth, BasicAuth, BearerAuth
from ._client import Client
from ._config import (
    DEFAULT_HEADERS,
    DEFAULT_MAX_REDIRECTS,
    USE_CLIENT_DEFAULT,
    RequestOptions,
    __version__,
    create_ssl_context,
)
from ._encoders import EncodedBody, encode_body
from ._exceptions import (
    AlreadyConsumedError,
    ConnectError,
    DecodingError,
    EncodingError,
    HTTPStatusError,
    ParseError,
    RequestError,
    SchemeError,
    TimeoutError,
    TooManyRedirectsError,
    TransportError,
)
from ._files import FileLike, file_like
from ._redirects import RedirectDecision, RedirectKind, resolve_redirect
from ._request import Request, build_request
from ._response import Response
from ._streams import DeflateStream, GzipStream, IdentityStream, RawStream
from ._transports import BaseTransport, HTTPTransport, MockTransport, TransportResponse

__all__ = [
    "AlreadyConsumedError",
    "AsyncClient",
    "Auth",
    "BaseTransport",
    "BasicAuth",
    "BearerAuth",
    "Client",
    "ConnectError",
    "DEFAULT_HEADERS",
    "DEFAULT_MAX_REDIRECTS",
    "DecodingError",
    "DeflateStream",
    "EncodedBody",
    "EncodingError",
    "FileLike",
    "GzipStream",
    "HTTPStatusError",
    "HTTPTransport",
    "Headers",
    "IdentityStream",
    "MockTransport",
    "ParseError",
    "RawStream",
    "RedirectDecision",
    "RedirectKind",
    "Request",
    "RequestError",
    "RequestOptions",
    "Response",
    "SchemeError",
    "TimeoutError",
    "TooManyRedirectsError",
    "TransportError",
    "TransportResponse",
    "USE_CLIENT_DEFAULT",
    "build_request",
    "create_ssl_context",
    "delete",
    "encode_body",
    "file_like",
    "get",
    "head",
    "options",
    "patch",
    "post",
    "put",
    "request",
    "resolve_redirect",
]
