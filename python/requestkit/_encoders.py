# Request body encoders: raw, streamed, URL-encoded form, multipart and JSON bodies

import io
import json as _json
import mimetypes
import os
import stat
from collections.abc import Iterable, Mapping
from urllib.parse import parse_qsl

from urllib3.fields import RequestField
from urllib3.filepost import choose_boundary, encode_multipart_formdata

from ._exceptions import EncodingError
from ._utils import _query_pairs, encode_query


class EncodedBody:
    """A request body ready for the transport, plus its framing decision.

    Exactly one of ``content`` (bytes) and ``stream`` (a readable object or an
    iterator of byte chunks) is set. ``content_length`` is None when the
    length cannot be known up front, in which case the body is sent chunked.
    """

    def __init__(self, content=None, stream=None, content_type=None, content_length=None):
        self.content = content
        self.stream = stream
        self.content_type = content_type
        if content is not None:
            content_length = len(content)
        self.content_length = content_length
        self._stream_position = _tell(stream) if stream is not None else None

    @property
    def chunked(self):
        return self.content_length is None

    @property
    def is_stream(self):
        return self.stream is not None

    def headers(self):
        """Content-Type and Content-Length / Transfer-Encoding for this body."""
        headers = {}
        if self.content_type is not None:
            headers["Content-Type"] = self.content_type
        if self.content_length is not None:
            headers["Content-Length"] = str(self.content_length)
        else:
            headers["Transfer-Encoding"] = "chunked"
        return headers

    def rewind(self):
        """Seek a stream body back to where it started. Returns False if it cannot."""
        if self.stream is None:
            return True
        if self._stream_position is None:
            return False
        try:
            self.stream.seek(self._stream_position)
        except (AttributeError, OSError, ValueError):
            return False
        return True

    def __repr__(self):
        if self.stream is not None:
            return f"<EncodedBody [stream, {self.content_type}]>"
        return f"<EncodedBody [{self.content_length} bytes, {self.content_type}]>"


def encode_body(data=None, json=None, files=None):
    """Select the single encoding path for a request's declared payload.

    Returns None when the request carries no body.
    """
    if json is not None:
        if data is not None:
            raise EncodingError("Cannot send both 'data' and 'json' in one request.")
        if files:
            raise EncodingError("Cannot send both 'files' and 'json' in one request.")
        return encode_json(json)
    if files:
        return encode_multipart(data, files)
    if data is None:
        return None
    if isinstance(data, (Mapping, list, tuple)):
        return encode_urlencoded(data)
    if isinstance(data, str):
        data = data.encode("utf-8")
    if isinstance(data, (bytes, bytearray, memoryview)):
        return EncodedBody(content=bytes(data))
    if hasattr(data, "read"):
        return EncodedBody(stream=data, content_length=_stream_length(data))
    if isinstance(data, Iterable):
        return EncodedBody(stream=iter(data))
    raise EncodingError(f"Unsupported request body type: {type(data).__name__}.")


def encode_urlencoded(data):
    try:
        body = encode_query(data)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Cannot URL-encode form data: {e}") from e
    return EncodedBody(
        content=body.encode("ascii"),
        content_type="application/x-www-form-urlencoded",
    )


def encode_multipart(data, files):
    if data is None:
        pairs = []
    elif isinstance(data, (Mapping, list, tuple)):
        pairs = _query_pairs(data)
    elif isinstance(data, (str, bytes)):
        text = data.decode("utf-8") if isinstance(data, bytes) else data
        pairs = parse_qsl(text, keep_blank_values=True)
    else:
        raise EncodingError(
            f"Form fields sent alongside files must be a mapping or string. Got {type(data).__name__}."
        )

    fields = list(pairs)
    for file in files:
        field = RequestField(name=file.field_name, data=file.contents, filename=file.filename)
        field.make_multipart(content_type=file.content_type or _guess_content_type(file.filename))
        fields.append(field)

    body, content_type = encode_multipart_formdata(fields, boundary=choose_boundary())
    return EncodedBody(content=body, content_type=content_type)


def encode_json(value):
    try:
        text = _json.dumps(
            value,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
            default=_json_default,
        )
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Value cannot be represented as JSON: {e}") from e
    return EncodedBody(content=text.encode("utf-8"), content_type="application/json")


def _json_default(obj):
    # Generic mappings and iterables serialize like dicts and lists
    if isinstance(obj, Mapping):
        return dict(obj)
    if isinstance(obj, Iterable) and not isinstance(obj, (str, bytes, bytearray)):
        return list(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _guess_content_type(filename):
    return mimetypes.guess_type(filename)[0] or "application/octet-stream"


def _tell(stream):
    try:
        return stream.tell()
    except (AttributeError, OSError, ValueError):
        return None


def _stream_length(stream):
    """Remaining length of a readable stream, or None when it is not knowable."""
    if isinstance(stream, io.TextIOBase):
        return None
    total = None
    if hasattr(stream, "getbuffer"):
        total = stream.getbuffer().nbytes
    elif hasattr(stream, "fileno"):
        try:
            st = os.fstat(stream.fileno())
        except (AttributeError, OSError, io.UnsupportedOperation):
            st = None
        if st is not None and stat.S_ISREG(st.st_mode):
            total = st.st_size
    elif hasattr(stream, "__len__"):
        total = len(stream)
    if total is None:
        return None
    position = _tell(stream) or 0
    return max(total - position, 0)
