# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-memory multipart/form-data writer."""

from __future__ import annotations

import io
import secrets
from typing import IO

from ..errors import UploadError
from .payloads import BodyKind, Payload

COPY_CHUNK_SIZE = 64 * 1024
FILE_PART_CONTENT_TYPE = "application/octet-stream"


def _escape_quotes(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


class MultipartWriter:
    """
    Accumulates form fields and file parts into a single buffer.

    File content is copied into the buffer as soon as a part is written, so the
    whole body is materialised before the request is sent. close() appends the
    closing delimiter; writing after close raises UploadError.
    """

    kind = BodyKind.MULTIPART

    def __init__(self, boundary: str | None = None):
        if boundary is None:
            boundary = f"----FormBoundary{secrets.token_hex(8)}"
        self.boundary = boundary
        self._buffer = io.BytesIO()
        self._closed = False
        self.part_count = 0

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_open(self) -> None:
        if self._closed:
            raise UploadError("multipart writer is closed")

    def _write_part_header(self, disposition: str, content_type: str | None = None) -> None:
        header = f"--{self.boundary}\r\nContent-Disposition: {disposition}\r\n"
        if content_type:
            header += f"Content-Type: {content_type}\r\n"
        self._buffer.write(header.encode("utf-8") + b"\r\n")

    def write_field(self, name: str, value: str) -> None:
        self._ensure_open()
        self._write_part_header(f'form-data; name="{_escape_quotes(str(name))}"')
        self._buffer.write(str(value).encode("utf-8"))
        self._buffer.write(b"\r\n")
        self.part_count += 1

    def write_file(self, field_name: str, file_name: str, reader: IO[bytes] | IO[str]) -> int:
        """Copy `reader` to EOF into a new file part; returns the number of bytes copied."""
        self._ensure_open()
        start = self._buffer.tell()
        self._write_part_header(
            f'form-data; name="{_escape_quotes(str(field_name))}"; filename="{_escape_quotes(str(file_name))}"',
            FILE_PART_CONTENT_TYPE,
        )
        copied = 0
        try:
            while True:
                chunk = reader.read(COPY_CHUNK_SIZE)
                if not chunk:
                    break
                if isinstance(chunk, str):
                    chunk = chunk.encode("utf-8")
                self._buffer.write(chunk)
                copied += len(chunk)
        except (OSError, ValueError) as exc:
            self._buffer.seek(start)
            self._buffer.truncate()
            raise UploadError(f"failed to copy {file_name!r} into multipart body: {exc}") from exc
        self._buffer.write(b"\r\n")
        self.part_count += 1
        return copied

    def close(self) -> None:
        if self._closed:
            return
        self._buffer.write(f"--{self.boundary}--\r\n".encode("utf-8"))
        self._closed = True

    def getvalue(self) -> bytes:
        """Return the encoded body, including the closing delimiter even before close()."""
        value = self._buffer.getvalue()
        if not self._closed:
            value += f"--{self.boundary}--\r\n".encode("utf-8")
        return value

    def to_payload(self) -> Payload:
        return Payload(kind=BodyKind.MULTIPART, content_type=self.content_type, content=self.getvalue())


__all__ = ["FILE_PART_CONTENT_TYPE", "MultipartWriter"]
