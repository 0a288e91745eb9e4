# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request body encoders (JSON/form/raw/text) and query-string encoding."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any
from urllib.parse import urlencode

from ..errors import BodyEncodingError

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
RAW_CONTENT_TYPE = "application/octet-stream"
TEXT_CONTENT_TYPE = "text/plain"


class BodyKind(str, Enum):
    """Which encoder produced the active request body."""

    NONE = "none"
    JSON = "json"
    FORM = "form"
    RAW = "raw"
    TEXT = "text"
    MULTIPART = "multipart"


@dataclass(frozen=True)
class Payload:
    """An encoded request body with the content type required to transmit it."""

    kind: BodyKind
    content_type: str
    content: bytes

    def to_payload(self) -> Payload:
        return self


EMPTY_PAYLOAD = Payload(kind=BodyKind.NONE, content_type="", content=b"")


def encode_values(values: Mapping[str, Any]) -> str:
    """
    Form-encode a mapping: keys sorted, `quote_plus` escaping, `&`-joined.

    Sequence values (other than strings) repeat their key once per item.
    """
    items = sorted(((str(key), value) for key, value in (values or {}).items()), key=lambda item: item[0])
    return urlencode(items, doseq=True)


def json_payload(data: Mapping[str, Any]) -> Payload:
    """Canonical JSON: sorted keys, compact separators, UTF-8, no NaN/Infinity."""
    try:
        encoded = json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise BodyEncodingError(f"failed to encode JSON body: {exc}") from exc
    return Payload(kind=BodyKind.JSON, content_type=JSON_CONTENT_TYPE, content=encoded.encode("utf-8"))


def form_payload(values: Mapping[str, Any]) -> Payload:
    return Payload(kind=BodyKind.FORM, content_type=FORM_CONTENT_TYPE, content=encode_values(values).encode("ascii"))


def raw_payload(data: bytes | bytearray | memoryview) -> Payload:
    return Payload(kind=BodyKind.RAW, content_type=RAW_CONTENT_TYPE, content=bytes(data))


def text_payload(text: str) -> Payload:
    return Payload(kind=BodyKind.TEXT, content_type=TEXT_CONTENT_TYPE, content=str(text).encode("utf-8"))


__all__ = [
    "EMPTY_PAYLOAD",
    "FORM_CONTENT_TYPE",
    "JSON_CONTENT_TYPE",
    "RAW_CONTENT_TYPE",
    "TEXT_CONTENT_TYPE",
    "BodyKind",
    "Payload",
    "encode_values",
    "form_payload",
    "json_payload",
    "raw_payload",
    "text_payload",
]
