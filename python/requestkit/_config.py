# Configuration structures, defaults, and the package logger

import io
import logging as _logging
import numbers
import ssl
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from ._auth import _normalize_auth
from ._exceptions import EncodingError
from ._files import FileLike, file_like

__version__ = "0.1.0"

_logger = _logging.getLogger("requestkit")

DEFAULT_MAX_REDIRECTS = 20
DEFAULT_CHUNK_SIZE = io.DEFAULT_BUFFER_SIZE
DEFAULT_USER_AGENT = f"requestkit/{__version__}"
DEFAULT_HEADERS = {
    "User-Agent": DEFAULT_USER_AGENT,
    "Accept": "*/*",
    "Accept-Encoding": "gzip, deflate",
}

METHODS = frozenset({"GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"})


class _Unset:
    """Sentinel to indicate an option was not specified."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "<USE_CLIENT_DEFAULT>"

    def __bool__(self):
        return False


USE_CLIENT_DEFAULT = _Unset()


@dataclass
class RequestOptions:
    """Per-request options, validated when constructed.

    ``timeout`` and ``trust_context`` default to ``USE_CLIENT_DEFAULT`` so a
    client's defaults apply unless the caller passes a value (``None`` for
    ``timeout`` means wait forever).
    """

    params: Any = None
    headers: Optional[Mapping] = None
    cookies: Optional[Mapping] = None
    auth: Any = None
    data: Any = None
    json: Any = None
    files: Any = None
    timeout: Any = USE_CLIENT_DEFAULT
    allow_redirects: Optional[bool] = None
    stream: bool = False
    trust_context: Any = USE_CLIENT_DEFAULT

    def __post_init__(self):
        if self.json is not None and self.data is not None:
            raise EncodingError("Cannot send both 'data' and 'json' in one request.")
        if self.json is not None and self.files:
            raise EncodingError("Cannot send both 'files' and 'json' in one request.")
        self.files = _normalize_files(self.files)
        self.auth = _normalize_auth(self.auth)
        if self.headers is not None and not isinstance(self.headers, Mapping):
            raise TypeError(
                f"Invalid 'headers' argument. Expected a mapping. Got {type(self.headers).__name__}."
            )
        if self.cookies is not None and not isinstance(self.cookies, Mapping):
            raise TypeError(
                f"Invalid 'cookies' argument. Expected a mapping. Got {type(self.cookies).__name__}."
            )
        if self.timeout is not USE_CLIENT_DEFAULT and self.timeout is not None:
            if isinstance(self.timeout, bool) or not isinstance(self.timeout, numbers.Real):
                raise TypeError(
                    f"Invalid 'timeout' argument. Expected seconds as a number. Got {type(self.timeout).__name__}."
                )
            if self.timeout < 0:
                raise ValueError("'timeout' must be a non-negative number of seconds.")
        if (
            self.trust_context is not USE_CLIENT_DEFAULT
            and self.trust_context is not None
            and not isinstance(self.trust_context, ssl.SSLContext)
        ):
            raise TypeError(
                f"Invalid 'trust_context' argument. Expected ssl.SSLContext. Got {type(self.trust_context).__name__}."
            )


def _normalize_files(files):
    """Convert the ``files`` option to a list of FileLike."""
    if not files:
        return []
    if isinstance(files, FileLike):
        return [files]
    if isinstance(files, Mapping):
        return [
            value if isinstance(value, FileLike) else file_like(value, name=name)
            for name, value in files.items()
        ]
    result = []
    for item in files:
        if not isinstance(item, FileLike):
            raise EncodingError(
                f"Invalid 'files' entry. Expected FileLike. Got {type(item).__name__}."
            )
        result.append(item)
    return result


def create_ssl_context(
    cert=None,
    verify=True,
    trust_env=True,
):
    """
    Create an SSL context for use as a request's trust context.

    Args:
        cert: Optional SSL certificate to use for client authentication.
              Can be:
              - A path to a certificate file (str or Path)
              - A tuple of (cert_file, key_file)
              - A tuple of (cert_file, key_file, password)
        verify: SSL verification mode. Can be:
                - True: Verify server certificates (default)
                - False: Disable verification (not recommended)
                - str or Path: Path to a CA bundle file or directory
        trust_env: Whether to honour SSL_CERT_FILE, SSL_CERT_DIR and SSLKEYLOGFILE.

    Returns:
        An ssl.SSLContext instance configured with the specified options.
    """
    import os
    from pathlib import Path

    context = ssl.create_default_context()

    if verify is False:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    elif verify is not True:
        verify_path = Path(verify)
        if verify_path.is_dir():
            context.load_verify_locations(capath=str(verify_path))
        elif verify_path.is_file():
            context.load_verify_locations(cafile=str(verify_path))
        else:
            raise IOError(
                f"Could not find a suitable TLS CA certificate bundle, invalid path: {verify}"
            )

    if cert is not None:
        if isinstance(cert, (str, Path)):
            context.load_cert_chain(certfile=str(cert))
        elif isinstance(cert, tuple):
            if len(cert) == 2:
                certfile, keyfile = cert
                context.load_cert_chain(certfile=str(certfile), keyfile=str(keyfile))
            elif len(cert) == 3:
                certfile, keyfile, password = cert
                context.load_cert_chain(
                    certfile=str(certfile), keyfile=str(keyfile), password=password
                )
            else:
                raise ValueError("'cert' tuple must hold (cert_file, key_file[, password]).")

    if trust_env:
        ssl_cert_file = os.environ.get("SSL_CERT_FILE")
        ssl_cert_dir = os.environ.get("SSL_CERT_DIR")
        if ssl_cert_file:
            context.load_verify_locations(cafile=ssl_cert_file)
        if ssl_cert_dir:
            context.load_verify_locations(capath=ssl_cert_dir)
        sslkeylogfile = os.environ.get("SSLKEYLOGFILE")
        if sslkeylogfile:
            context.keylog_filename = sslkeylogfile

    return context
