"""Image input classification.

An image can be handed over as a filesystem path, a remote URL, raw bytes or
an already open binary stream. Each engine attaches it to an outbound form
either as a ``url`` field or as a ``file`` part, never both.
"""

import asyncio
import logging
import os
import re
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, AsyncIterator, Union

from errors import InvalidInputKindError

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(r"^https?:")
ACCEPTED_KINDS = ("path", "url", "bytes", "binary stream")
DEFAULT_FILENAME = "image"


class ImageKind(Enum):
    PATH = "path"
    URL = "url"
    CONTENT = "content"
    STREAM = "stream"


@dataclass(frozen=True)
class ImageSource:
    """Tagged image input. Build it with one of the ``from_*`` constructors or ``coerce``."""
    kind: ImageKind
    value: Any

    @classmethod
    def from_path(cls, path: Union[str, os.PathLike]) -> "ImageSource":
        return cls(ImageKind.PATH, os.fspath(path))

    @classmethod
    def from_url(cls, url: str) -> "ImageSource":
        return cls(ImageKind.URL, url)

    @classmethod
    def from_content(cls, content: Union[bytes, bytearray, memoryview]) -> "ImageSource":
        return cls(ImageKind.CONTENT, bytes(content))

    @classmethod
    def from_stream(cls, stream) -> "ImageSource":
        return cls(ImageKind.STREAM, stream)

    @classmethod
    def coerce(cls, value) -> "ImageSource":
        """
        Classify a raw caller value.

        Strings starting with ``http:`` or ``https:`` are URLs, any other string
        is a path. Bytes-like values are file content and objects with a
        ``read`` method are streams.

        Raises:
            InvalidInputKindError: for anything else
        """
        if isinstance(value, ImageSource):
            return value
        if isinstance(value, str):
            if URL_PATTERN.match(value):
                return cls.from_url(value)
            return cls.from_path(value)
        if isinstance(value, os.PathLike):
            return cls.from_path(value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls.from_content(value)
        if callable(getattr(value, "read", None)):
            return cls.from_stream(value)
        raise InvalidInputKindError(value, ACCEPTED_KINDS)

    @property
    def filename(self) -> str:
        if self.kind is ImageKind.PATH:
            return Path(self.value).name or DEFAULT_FILENAME
        if self.kind is ImageKind.STREAM:
            name = getattr(self.value, "name", None)
            if isinstance(name, str) and name:
                return Path(name).name
        return DEFAULT_FILENAME

    @asynccontextmanager
    async def attach(self, form) -> AsyncIterator[None]:
        """
        Add the image to ``form`` for the duration of the block.

        A path is opened in a worker thread and closed when the block exits,
        whether the request succeeded or not.
        """
        if self.kind is ImageKind.URL:
            form.add_field("url", self.value)
            yield
        elif self.kind is ImageKind.PATH:
            logger.debug(f"Opening image file {self.value}")
            handle = await asyncio.to_thread(open, self.value, "rb")
            try:
                form.add_field("file", handle, filename=self.filename)
                yield
            finally:
                handle.close()
        elif self.kind in (ImageKind.CONTENT, ImageKind.STREAM):
            form.add_field("file", self.value, filename=self.filename)
            yield
        else:
            raise InvalidInputKindError(self.value, ACCEPTED_KINDS)
