# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Wire-level models and helpers used by the request builder."""

from .client import CookieStore, create_default_client, to_httpx_timeout
from .headers import header_value, normalize_headers
from .models import Headers, MultipartParam, Response
from .multipart import MultipartWriter
from .payloads import (
    EMPTY_PAYLOAD,
    BodyKind,
    Payload,
    encode_values,
    form_payload,
    json_payload,
    raw_payload,
    text_payload,
)

__all__ = [
    "EMPTY_PAYLOAD",
    "BodyKind",
    "CookieStore",
    "Headers",
    "MultipartParam",
    "MultipartWriter",
    "Payload",
    "Response",
    "create_default_client",
    "encode_values",
    "form_payload",
    "header_value",
    "json_payload",
    "normalize_headers",
    "raw_payload",
    "text_payload",
    "to_httpx_timeout",
]
