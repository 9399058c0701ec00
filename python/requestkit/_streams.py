# Raw response body streams, one per Content-Encoding

import io
import zlib

from ._config import DEFAULT_CHUNK_SIZE
from ._exceptions import DecodingError


class RawStream(io.RawIOBase):
    """Readable raw stream over a response body source.

    ``source`` is anything with ``read(n)`` returning bytes (``b""`` at end of
    body), or plain bytes. Subclasses override ``_decode`` and ``_flush`` to
    undo a content coding. Reads are short: ``read(n)`` returns as soon as any
    decoded data is ready.
    """

    def __init__(self, source, chunk_size=DEFAULT_CHUNK_SIZE):
        super().__init__()
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(bytes(source))
        self._source = source
        self._chunk_size = chunk_size
        self._buffer = bytearray()
        self._eof = False

    def readable(self):
        return True

    def readinto(self, b):
        if self.closed:
            raise ValueError("I/O operation on closed stream.")
        view = memoryview(b).cast("B")
        while not self._buffer and not self._eof:
            chunk = self._source.read(self._chunk_size)
            if chunk:
                self._buffer += self._decode(chunk)
            else:
                self._buffer += self._flush()
                self._eof = True
        n = min(len(view), len(self._buffer))
        view[:n] = self._buffer[:n]
        del self._buffer[:n]
        return n

    @property
    def exhausted(self):
        return self._eof and not self._buffer

    def available(self):
        """Bytes readable without blocking; 0 once closed or exhausted.

        Counts only decoded bytes already buffered, so an unread stream reports 0.
        """
        if self.closed or self.exhausted:
            return 0
        return len(self._buffer)

    def close(self):
        if self.closed:
            return
        try:
            close = getattr(self._source, "close", None)
            if close is not None:
                close()
        finally:
            super().close()

    def _decode(self, chunk):
        return chunk

    def _flush(self):
        return b""

    def __repr__(self):
        return f"<{type(self).__name__}>"


class IdentityStream(RawStream):
    """Body without a content coding, passed through as is."""


class GzipStream(RawStream):
    """Body with ``Content-Encoding: gzip``. Concatenated members are supported."""

    def __init__(self, source, chunk_size=DEFAULT_CHUNK_SIZE):
        super().__init__(source, chunk_size)
        self._decompressor = zlib.decompressobj(16 + zlib.MAX_WBITS)
        self._fed = False

    def _decode(self, chunk):
        output = bytearray()
        try:
            while chunk:
                self._fed = True
                output += self._decompressor.decompress(chunk)
                if not self._decompressor.eof:
                    break
                chunk = self._decompressor.unused_data
                self._decompressor = zlib.decompressobj(16 + zlib.MAX_WBITS)
                self._fed = False
        except zlib.error as e:
            raise DecodingError(f"Invalid gzip response body: {e}") from e
        return bytes(output)

    def _flush(self):
        if self._fed and not self._decompressor.eof:
            raise DecodingError("Truncated gzip response body")
        try:
            return self._decompressor.flush()
        except zlib.error as e:
            raise DecodingError(f"Invalid gzip response body: {e}") from e


class DeflateStream(RawStream):
    """Body with ``Content-Encoding: deflate``.

    Servers send either zlib-wrapped or raw deflate data; the zlib header is
    tried first and raw deflate is used if the first chunk does not parse.
    """

    def __init__(self, source, chunk_size=DEFAULT_CHUNK_SIZE):
        super().__init__(source, chunk_size)
        self._decompressor = zlib.decompressobj()
        self._first_chunk = True

    def _decode(self, chunk):
        if self._first_chunk:
            self._first_chunk = False
            try:
                return self._decompressor.decompress(chunk)
            except zlib.error:
                self._decompressor = zlib.decompressobj(-zlib.MAX_WBITS)
        try:
            return self._decompressor.decompress(chunk)
        except zlib.error as e:
            raise DecodingError(f"Invalid deflate response body: {e}") from e

    def _flush(self):
        if not self._first_chunk and not self._decompressor.eof:
            raise DecodingError("Truncated deflate response body")
        try:
            return self._decompressor.flush()
        except zlib.error as e:
            raise DecodingError(f"Invalid deflate response body: {e}") from e


_DECODERS = {
    "gzip": GzipStream,
    "x-gzip": GzipStream,
    "deflate": DeflateStream,
}


def wrap_stream(source, content_encoding=None, chunk_size=DEFAULT_CHUNK_SIZE):
    """Pick the raw stream class for a Content-Encoding header value.

    Codings are undone in reverse order of application. Unknown codings leave
    the body untouched.
    """
    codings = [
        coding.strip().lower()
        for coding in (content_encoding or "").split(",")
        if coding.strip() and coding.strip().lower() != "identity"
    ]
    if not codings or any(coding not in _DECODERS for coding in codings):
        return IdentityStream(source, chunk_size)
    stream = source
    for coding in reversed(codings):
        stream = _DECODERS[coding](stream, chunk_size)
    return stream
