# Response: status, headers and a lazily decoded body

import codecs
import json as _json

from urllib3 import HTTPHeaderDict

from ._config import DEFAULT_CHUNK_SIZE
from ._exceptions import AlreadyConsumedError, HTTPStatusError, ParseError
from ._redirects import REDIRECT_STATUSES
from ._streams import IdentityStream
from ._utils import get_charset

_SNIPPET_LENGTH = 80


class Response:
    """The result of an exchange.

    The body stays in ``raw`` until first use. ``content`` buffers it once;
    the ``iter_*`` methods drain it incrementally instead. Only one of the
    two may consume the raw stream, after which it is closed.
    """

    def __init__(
        self,
        status_code,
        *,
        headers=None,
        raw=None,
        content=None,
        request=None,
        url=None,
        reason_phrase="",
        http_version="HTTP/1.1",
        cookies=None,
        history=None,
        elapsed=None,
    ):
        self.status_code = status_code
        self.headers = HTTPHeaderDict(headers or {})
        self.reason_phrase = reason_phrase
        self.http_version = http_version
        self.request = request
        if url is None and request is not None:
            url = request.url
        self.url = url
        self.cookies = dict(cookies or {})
        self.history = list(history or [])
        self.elapsed = elapsed
        self._explicit_encoding = None
        self._consumed = False
        if content is not None:
            if isinstance(content, str):
                content = content.encode("utf-8")
            self._content = bytes(content)
            raw = IdentityStream(self._content)
        else:
            self._content = None
        self.raw = raw if raw is not None else IdentityStream(b"")

    def __repr__(self):
        return f"<Response [{self.status_code}]>"

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def content(self):
        """The whole decoded body. Reads the raw stream on first access."""
        if self._content is None:
            self._claim_raw()
            try:
                self._content = self.raw.read()
            finally:
                self.raw.close()
        return self._content

    def read(self):
        """Read and return the response body."""
        return self.content

    def _claim_raw(self):
        if self._consumed or self.raw.closed:
            raise AlreadyConsumedError(
                "The response body has already been consumed.", request=self.request
            )
        self._consumed = True

    @property
    def is_consumed(self):
        return self._consumed

    @property
    def is_closed(self):
        return self.raw.closed

    @property
    def encoding(self):
        """Encoding used for ``text``: explicit, else the Content-Type charset, else UTF-8."""
        if self._explicit_encoding is not None:
            return self._explicit_encoding
        charset = get_charset(self.headers.get("Content-Type"))
        if charset is not None:
            try:
                codecs.lookup(charset)
                return charset
            except LookupError:
                pass
        return "utf-8"

    @encoding.setter
    def encoding(self, value):
        # Can change at any time; text is decoded again from the cached bytes
        if value is not None:
            codecs.lookup(value)
        self._explicit_encoding = value

    @property
    def text(self):
        content = self.content
        if not content:
            return ""
        return content.decode(self.encoding, errors="replace")

    def json(self, **kwargs):
        """Parse the body as any JSON value."""
        text = self.text
        try:
            return _json.loads(text, **kwargs)
        except ValueError as e:
            raise ParseError(
                f"Response body is not valid JSON ({e}): {text[:_SNIPPET_LENGTH]!r}",
                request=self.request,
            ) from e

    @property
    def json_object(self):
        value = self.json()
        if not isinstance(value, dict):
            raise ParseError(
                f"Expected a JSON object, got {type(value).__name__}: {self.text[:_SNIPPET_LENGTH]!r}",
                request=self.request,
            )
        return value

    @property
    def json_array(self):
        value = self.json()
        if not isinstance(value, list):
            raise ParseError(
                f"Expected a JSON array, got {type(value).__name__}: {self.text[:_SNIPPET_LENGTH]!r}",
                request=self.request,
            )
        return value

    def iter_bytes(self, chunk_size=DEFAULT_CHUNK_SIZE):
        """Iterate over the body in ``chunk_size`` pieces; only the last may be shorter."""
        if chunk_size is None or chunk_size < 1:
            raise ValueError("chunk_size must be a positive integer.")
        if self._content is not None:
            for i in range(0, len(self._content), chunk_size):
                yield self._content[i : i + chunk_size]
            return
        self._claim_raw()
        buffer = bytearray()
        try:
            while True:
                chunk = self.raw.read(chunk_size)
                if not chunk:
                    break
                buffer += chunk
                while len(buffer) >= chunk_size:
                    yield bytes(buffer[:chunk_size])
                    del buffer[:chunk_size]
            if buffer:
                yield bytes(buffer)
        finally:
            self.raw.close()

    def iter_text(self, chunk_size=DEFAULT_CHUNK_SIZE):
        """Iterate over the body as text chunks."""
        decoder = codecs.getincrementaldecoder(self.encoding)(errors="replace")
        for chunk in self.iter_bytes(chunk_size):
            text = decoder.decode(chunk)
            if text:
                yield text
        text = decoder.decode(b"", final=True)
        if text:
            yield text

    def iter_lines(self, chunk_size=DEFAULT_CHUNK_SIZE):
        """Iterate over ``\\n``-delimited byte records, without the line terminator."""
        pending = b""
        for chunk in self.iter_bytes(chunk_size):
            lines = (pending + chunk).split(b"\n")
            pending = lines.pop()
            for line in lines:
                yield _strip_cr(line)
        if pending:
            yield _strip_cr(pending)

    def close(self):
        """Release the body stream and its connection."""
        if self._content is None:
            self._consumed = True
        self.raw.close()

    @property
    def is_success(self):
        return 200 <= self.status_code < 300

    @property
    def is_redirect(self):
        return self.status_code in REDIRECT_STATUSES and "Location" in self.headers

    @property
    def is_client_error(self):
        return 400 <= self.status_code < 500

    @property
    def is_server_error(self):
        return 500 <= self.status_code < 600

    def raise_for_status(self):
        """Raise HTTPStatusError for 4xx and 5xx responses.

        Returns self for chaining on success.
        """
        if self.is_client_error:
            kind = "Client error"
        elif self.is_server_error:
            kind = "Server error"
        else:
            return self
        message = f"{kind} '{self.status_code} {self.reason_phrase}' for url '{self.url}'"
        raise HTTPStatusError(message, request=self.request, response=self)


def _strip_cr(line):
    if line.endswith(b"\r"):
        return line[:-1]
    return line
