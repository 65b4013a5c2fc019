"""
multipart/form-data encoding for the image edit and variation endpoints.

Body layout (CRLF line endings):

    --<boundary>
    Content-Disposition: form-data; name="image"; filename="image.png"
    Content-Type: image/png

    <png bytes>
    --<boundary>
    Content-Disposition: form-data; name="prompt"

    <value>
    --<boundary>--
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

CRLF = b"\r\n"


@dataclass(frozen=True)
class FilePart:
    """A binary part with a filename."""

    name: str
    filename: str
    data: bytes
    content_type: str = "image/png"


def new_boundary() -> str:
    """Random boundary token; never reused across requests."""
    return uuid.uuid4().hex


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def encode_multipart(
    fields: list[tuple[str, str]],
    files: list[FilePart],
    boundary: str | None = None,
) -> tuple[bytes, str]:
    """
    Build a multipart/form-data body.

    File parts are written first, then text fields, each in the order given.

    Args:
        fields: (name, value) text fields.
        files: Binary parts.
        boundary: Boundary token; a fresh one is generated when omitted.

    Returns:
        (body, content_type) where content_type carries the boundary.
    """
    boundary = boundary or new_boundary()
    delimiter = f"--{boundary}".encode("ascii")
    chunks: list[bytes] = []

    for part in files:
        chunks += [
            delimiter,
            CRLF,
            (
                f'Content-Disposition: form-data; name="{_quote(part.name)}"; '
                f'filename="{_quote(part.filename)}"'
            ).encode("utf-8"),
            CRLF,
            f"Content-Type: {part.content_type}".encode("ascii"),
            CRLF,
            CRLF,
            part.data,
            CRLF,
        ]

    for name, value in fields:
        chunks += [
            delimiter,
            CRLF,
            f'Content-Disposition: form-data; name="{_quote(name)}"'.encode("utf-8"),
            CRLF,
            CRLF,
            value.encode("utf-8"),
            CRLF,
        ]

    chunks += [delimiter, b"--", CRLF]
    return b"".join(chunks), f"multipart/form-data; boundary={boundary}"
