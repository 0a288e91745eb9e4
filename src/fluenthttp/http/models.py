# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Response wrapper and multipart parameter models."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from typing import IO, Any

import httpx

from .headers import header_value, normalize_headers

Headers = dict[str, str]


@dataclass(frozen=True)
class MultipartParam:
    """One file part read from a caller-owned stream; the stream is never closed by the builder."""

    field_name: str
    file_name: str
    file_body: IO[bytes] | IO[str]


@dataclass
class Response:
    """Completed HTTP exchange with the body already read into memory."""

    status_code: int
    headers: Headers = field(default_factory=dict)
    content: bytes = b""
    text: str = ""
    url: str | None = None
    reason_phrase: str = ""
    http_version: str = ""
    elapsed: float | None = None
    raw: httpx.Response | None = field(default=None, repr=False, compare=False)
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def header(self, name: str, default: str = "") -> str:
        return header_value(self.headers, name, default)

    def json(self) -> Any:
        return json.loads(self.content or self.text or "null")

    def raise_for_status(self) -> Response:
        """Raise httpx.HTTPStatusError for 4xx/5xx responses that came from a real exchange."""
        if self.raw is not None:
            self.raw.raise_for_status()
        return self

    def copy(self) -> Response:
        """Shallow copy with its own header and meta mappings; `raw` is shared."""
        return replace(self, headers=dict(self.headers), meta=dict(self.meta))

    @classmethod
    def from_httpx(cls, resp: httpx.Response, content: bytes, *, elapsed: float | None = None) -> Response:
        encoding = resp.charset_encoding or "utf-8"
        try:
            text = content.decode(encoding, errors="replace")
        except LookupError:
            text = content.decode("utf-8", errors="replace")

        return cls(
            status_code=resp.status_code,
            headers=normalize_headers(resp.headers),
            content=content,
            text=text,
            url=str(resp.url),
            reason_phrase=resp.reason_phrase,
            http_version=resp.http_version,
            elapsed=elapsed,
            raw=resp,
            meta={"body_bytes_read": len(content)},
        )


__all__ = ["Headers", "MultipartParam", "Response"]
