# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Construction options for RequestBuilder.

An option is any callable taking the builder and mutating it before the first
chained call. The helpers below cover the client, transport, cookie jar,
timeout and settings.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import httpx

from .config import ClientSettings
from .http.client import CookieStore

if TYPE_CHECKING:
    from .builder import RequestBuilder

Option = Callable[["RequestBuilder"], None]


def with_transport(transport: httpx.BaseTransport) -> Option:
    """Use `transport` for the client the builder creates. The builder never closes it."""

    def apply(builder: RequestBuilder) -> None:
        builder.transport = transport

    return apply


def with_client(client: httpx.Client) -> Option:
    """Dispatch through an existing client; transport, timeout and cookie options are then ignored."""

    def apply(builder: RequestBuilder) -> None:
        builder.client = client

    return apply


def with_cookie_jar(cookies: CookieStore) -> Option:
    def apply(builder: RequestBuilder) -> None:
        builder.cookies = cookies

    return apply


def with_client_timeout(seconds: float) -> Option:
    """Per-phase timeout in seconds (connect, read, write and pool each get this limit); zero means unbounded."""

    def apply(builder: RequestBuilder) -> None:
        builder.timeout = seconds

    return apply


def with_settings(settings: ClientSettings) -> Option:
    def apply(builder: RequestBuilder) -> None:
        builder.settings = settings

    return apply


__all__ = ["Option", "with_client", "with_client_timeout", "with_cookie_jar", "with_settings", "with_transport"]
