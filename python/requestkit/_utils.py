"""
Internal helpers for header parameters, cookies and URLs.
"""

import datetime
import typing
from collections.abc import Mapping
from email.utils import parsedate_to_datetime
from urllib.parse import urlencode, urlsplit, urlunsplit


def parse_header_params(value: typing.Optional[str]) -> typing.Tuple[str, typing.Dict[str, str]]:
    """
    Split a header such as ``text/html; charset="utf-8"`` into its main
    value and a dict of lower-cased parameter names to unquoted values.
    """
    if not value:
        return "", {}
    parts = value.split(";")
    main = parts[0].strip().lower()
    params: typing.Dict[str, str] = {}
    for part in parts[1:]:
        if "=" not in part:
            continue
        key, _, param_value = part.partition("=")
        param_value = param_value.strip()
        if len(param_value) >= 2 and param_value[0] == param_value[-1] == '"':
            param_value = param_value[1:-1]
        params[key.strip().lower()] = param_value
    return main, params


def get_charset(content_type: typing.Optional[str]) -> typing.Optional[str]:
    """Return the charset parameter of a Content-Type header, or None."""
    _, params = parse_header_params(content_type)
    return params.get("charset") or None


def parse_set_cookie(cookie_str: str) -> typing.Optional[typing.Tuple[str, str, bool]]:
    """
    Parse one Set-Cookie header value into ``(name, value, is_expired)``.

    Attributes other than Expires and Max-Age are ignored. Returns None for
    values without a ``name=value`` pair.
    """
    parts = cookie_str.split(";")
    name_value = parts[0].strip()
    if "=" not in name_value:
        return None
    name, value = name_value.split("=", 1)
    name = name.strip()
    value = value.strip()
    if not name:
        return None

    is_expired = False
    for part in parts[1:]:
        part = part.strip()
        lowered = part.lower()
        if lowered.startswith("max-age="):
            try:
                is_expired = int(part[8:].strip()) <= 0
            except ValueError:
                pass
            # Max-Age takes precedence over Expires
            break
        if lowered.startswith("expires="):
            expires_str = part[8:].strip()
            try:
                expires_dt = parsedate_to_datetime(expires_str)
            except (TypeError, ValueError):
                continue
            if expires_dt.tzinfo is None:
                expires_dt = expires_dt.replace(tzinfo=datetime.timezone.utc)
            is_expired = expires_dt < datetime.datetime.now(datetime.timezone.utc)
    return name, value, is_expired


def merge_set_cookies(cookies: typing.Dict[str, str], set_cookie_headers: typing.Iterable[str]) -> typing.Dict[str, str]:
    """Apply Set-Cookie header values to ``cookies`` in place and return it."""
    for cookie_str in set_cookie_headers:
        parsed = parse_set_cookie(cookie_str)
        if parsed is None:
            continue
        name, value, is_expired = parsed
        if is_expired:
            cookies.pop(name, None)
        else:
            cookies[name] = value
    return cookies


def parse_cookie_header(value: typing.Optional[str]) -> typing.Dict[str, str]:
    """Parse a request ``Cookie`` header into an ordered dict."""
    cookies: typing.Dict[str, str] = {}
    if not value:
        return cookies
    for pair in value.split(";"):
        name, sep, cookie_value = pair.strip().partition("=")
        if sep and name:
            cookies[name] = cookie_value
    return cookies


def render_cookie_header(cookies: typing.Mapping[str, str]) -> str:
    return "; ".join(f"{name}={value}" for name, value in cookies.items())


def _query_pairs(params: typing.Any) -> typing.List[typing.Tuple[str, str]]:
    if isinstance(params, Mapping):
        items = params.items()
    else:
        items = params
    pairs = []
    for key, value in items:
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((str(key), _to_str(v)) for v in value)
        else:
            pairs.append((str(key), _to_str(value)))
    return pairs


def _to_str(value: typing.Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def encode_query(params: typing.Any) -> str:
    """URL-encode a mapping or sequence of pairs; list values repeat the key."""
    if not params:
        return ""
    if isinstance(params, (str, bytes)):
        return params.decode("ascii") if isinstance(params, bytes) else params
    return urlencode(_query_pairs(params))


def merge_url_query(url: str, params: typing.Any) -> str:
    """Append encoded ``params`` to the query string already in ``url``."""
    query = encode_query(params)
    if not query:
        return url
    parts = urlsplit(url)
    merged = f"{parts.query}&{query}" if parts.query else query
    return urlunsplit((parts.scheme, parts.netloc, parts.path, merged, parts.fragment))


def strip_userinfo(url: str) -> str:
    """Remove ``user:password@`` from a URL's authority."""
    parts = urlsplit(url)
    if "@" not in parts.netloc:
        return url
    netloc = parts.netloc.rsplit("@", 1)[1]
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))
