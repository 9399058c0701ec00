"""
File-like parts for multipart uploads.
"""

import os
import typing
from pathlib import Path


class FileLike:
    """
    A named byte source destined for one part of a multipart body.

    The source can be bytes, text (encoded as UTF-8) or a readable binary
    stream. Stream sources are read on first access to ``contents`` and
    cached, so the stream is drained exactly once.
    """

    def __init__(
        self,
        field_name: str,
        contents: typing.Any = b"",
        *,
        filename: typing.Optional[str] = None,
        content_type: typing.Optional[str] = None,
    ) -> None:
        if not field_name:
            raise ValueError("FileLike requires a non-empty field name.")
        self.field_name = field_name
        self.filename = filename or field_name
        self.content_type = content_type
        self._stream = None
        self._contents: typing.Optional[bytes] = None
        if isinstance(contents, str):
            self._contents = contents.encode("utf-8")
        elif isinstance(contents, (bytes, bytearray, memoryview)):
            self._contents = bytes(contents)
        elif hasattr(contents, "read"):
            self._stream = contents
        else:
            raise TypeError(
                f"FileLike contents must be bytes, str or a readable stream. Got {type(contents).__name__}."
            )

    @classmethod
    def from_path(
        cls,
        path: typing.Union[str, "os.PathLike[str]"],
        name: typing.Optional[str] = None,
        content_type: typing.Optional[str] = None,
    ) -> "FileLike":
        """Read a file eagerly; the field name defaults to the file's name."""
        path = Path(path)
        return cls(name or path.name, path.read_bytes(), content_type=content_type)

    @property
    def contents(self) -> bytes:
        if self._contents is None:
            data = self._stream.read()
            if isinstance(data, str):
                data = data.encode("utf-8")
            self._contents = bytes(data)
            self._stream = None
        return self._contents

    def __len__(self) -> int:
        return len(self.contents)

    def __repr__(self) -> str:
        if self._contents is None:
            return f"<FileLike {self.field_name!r} [stream]>"
        return f"<FileLike {self.field_name!r} [{len(self._contents)} bytes]>"


def file_like(
    source: typing.Any,
    name: typing.Optional[str] = None,
    content_type: typing.Optional[str] = None,
) -> FileLike:
    """
    Wrap ``source`` in a FileLike without making the caller pick a constructor.

    Path objects are read from disk. Strings and bytes are the part's contents
    and need an explicit ``name``; streams fall back to their ``name``
    attribute when they have one.
    """
    if isinstance(source, FileLike):
        return source
    if isinstance(source, os.PathLike):
        return FileLike.from_path(source, name=name, content_type=content_type)
    if name is None and hasattr(source, "read"):
        stream_name = getattr(source, "name", None)
        if isinstance(stream_name, str):
            name = os.path.basename(stream_name)
    if not name:
        raise ValueError(f"A field name is required to wrap {type(source).__name__} as a FileLike.")
    return FileLike(name, source, content_type=content_type)
