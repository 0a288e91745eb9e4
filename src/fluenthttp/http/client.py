# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Factory for the httpx client a builder uses when none is supplied."""

from __future__ import annotations

from http.cookiejar import CookieJar

import httpx

from ..config import ClientSettings, load_client_settings

CookieStore = CookieJar | httpx.Cookies


def to_httpx_timeout(seconds: float | None) -> float | None:
    """Zero or negative means unbounded, which httpx spells as None."""
    if seconds is None or seconds <= 0:
        return None
    return float(seconds)


def create_default_client(
    settings: ClientSettings | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
    timeout: float | None = None,
    cookies: CookieStore | None = None,
) -> httpx.Client:
    """
    Build an httpx.Client from settings plus per-builder overrides.

    A supplied transport replaces the default connection pool (and with it the
    TLS verification setting). A CookieJar is shared with the client, so cookies
    set by responses are visible to the caller afterwards.
    """
    settings = settings or load_client_settings()
    effective_timeout = settings.timeout if timeout is None else timeout

    kwargs: dict[str, object] = {
        "follow_redirects": settings.allow_redirects,
        "max_redirects": settings.max_redirects,
        "timeout": httpx.Timeout(to_httpx_timeout(effective_timeout)),
        "headers": {"User-Agent": settings.user_agent},
        "trust_env": settings.trust_env,
    }
    if transport is not None:
        kwargs["transport"] = transport
    else:
        kwargs["verify"] = settings.verify_ssl
    if cookies is not None:
        kwargs["cookies"] = cookies.jar if isinstance(cookies, httpx.Cookies) else cookies

    return httpx.Client(**kwargs)  # type: ignore[arg-type]


__all__ = ["CookieStore", "create_default_client", "to_httpx_timeout"]
