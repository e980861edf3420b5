"""Uploaded file handling."""

import inspect
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any, Optional, Tuple


@dataclass
class UploadedFile:
    """An uploaded file held in memory.

    Attributes:
        content: File content
        filename: Original file name, used for the stored key's extension
        content_type: MIME type reported by the client
    """

    content: bytes
    filename: Optional[str] = None
    content_type: Optional[str] = None


async def read_upload(upload: Any) -> Tuple[bytes, Optional[str]]:
    """Return ``(content, filename)`` for a supported upload object.

    Accepts raw bytes, ``UploadedFile``, ``(filename, content)`` tuples and
    file objects with a ``read()`` method (sync or async) such as FastAPI's
    ``UploadFile``.
    """
    if isinstance(upload, (bytes, bytearray)):
        return bytes(upload), None
    if isinstance(upload, UploadedFile):
        return upload.content, upload.filename
    if isinstance(upload, tuple):
        filename, content = upload[0], upload[1]
        return bytes(content), filename
    if hasattr(upload, "read"):
        content = upload.read()
        if inspect.isawaitable(content):
            content = await content
        return bytes(content), getattr(upload, "filename", None)
    raise TypeError(f"Unsupported upload type: {type(upload).__name__}")


def file_extension(filename: Optional[str]) -> str:
    """Lowercase extension of ``filename`` including the dot, or ``""``."""
    if not filename:
        return ""
    return PurePosixPath(filename).suffix.lower()
