# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header normalization utilities.

HTTP header field names are case-insensitive (RFC 9110). Response headers are
stored as plain lowercase-keyed dicts, so lookups lowercase the name first.
"""

from __future__ import annotations

from collections.abc import Mapping


def normalize_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    """Return a lowercase-keyed copy of a header mapping (httpx.Headers or dict)."""
    if not headers:
        return {}
    return {str(key).lower(): "" if value is None else str(value) for key, value in headers.items() if key}


def header_value(headers: Mapping[str, str] | None, name: str, default: str = "") -> str:
    """Return a header value from a lowercase-keyed mapping, ignoring the case of `name`."""
    if not headers or not name:
        return default
    value = headers.get(name.lower())
    return default if value is None else str(value).strip()


__all__ = ["header_value", "normalize_headers"]
