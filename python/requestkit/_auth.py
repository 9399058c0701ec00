# Authorization strategies: credentials in, header name/value pair out

import base64
from urllib.parse import unquote, urlsplit


class Auth:
    """Base class for authorization strategies.

    Subclasses implement the ``header`` property, returning the
    ``(name, value)`` pair to add to the outgoing request.
    """

    @property
    def header(self):
        raise NotImplementedError("Subclasses must implement header")

    def apply(self, headers):
        """Set this strategy's header on a mutable header mapping."""
        name, value = self.header
        headers[name] = value
        return headers


class BasicAuth(Auth):
    """HTTP Basic Authentication."""

    def __init__(self, username="", password=""):
        self.username = username
        self.password = password

    @property
    def header(self):
        credentials = f"{self.username}:{self.password}"
        encoded = base64.b64encode(credentials.encode()).decode("ascii")
        return "Authorization", f"Basic {encoded}"

    def __eq__(self, other):
        if not isinstance(other, BasicAuth):
            return NotImplemented
        return (self.username, self.password) == (other.username, other.password)

    def __hash__(self):
        return hash((self.username, self.password))

    def __repr__(self):
        return f"BasicAuth(username={self.username!r}, password=***)"


class BearerAuth(Auth):
    """Bearer token authentication."""

    def __init__(self, token):
        self.token = token

    @property
    def header(self):
        return "Authorization", f"Bearer {self.token}"

    def __repr__(self):
        return "BearerAuth(token=***)"


def _normalize_auth(auth):
    """Convert tuple auth to BasicAuth and pass Auth instances through."""
    if auth is None:
        return None
    if isinstance(auth, tuple) and len(auth) == 2:
        return BasicAuth(auth[0], auth[1])
    if isinstance(auth, Auth):
        return auth
    raise TypeError(
        f"Invalid 'auth' argument. Expected (username, password) tuple or Auth instance. Got {type(auth).__name__}."
    )


def _extract_auth_from_url(url):
    """BasicAuth for the percent-decoded ``user:password@`` part of a URL, or None."""
    parts = urlsplit(url)
    if not parts.username:
        return None
    return BasicAuth(unquote(parts.username), unquote(parts.password or ""))
