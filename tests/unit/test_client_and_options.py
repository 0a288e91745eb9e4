# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

from http.cookiejar import CookieJar

import httpx

from fluenthttp import (
    ClientSettings,
    new_request,
    with_client,
    with_client_timeout,
    with_cookie_jar,
    with_settings,
    with_transport,
)
from fluenthttp.http.client import create_default_client, to_httpx_timeout


def test_to_httpx_timeout_treats_zero_as_unbounded():
    assert to_httpx_timeout(0) is None
    assert to_httpx_timeout(-1) is None
    assert to_httpx_timeout(None) is None
    assert to_httpx_timeout(2) == 2.0


def test_create_default_client_applies_settings():
    settings = ClientSettings(timeout=0, user_agent="Agent/2", allow_redirects=False, max_redirects=4, trust_env=False)
    client = create_default_client(settings, transport=httpx.MockTransport(lambda request: httpx.Response(204)))
    try:
        assert client.timeout == httpx.Timeout(None)
        assert client.headers["user-agent"] == "Agent/2"
        assert client.follow_redirects is False
        assert client.max_redirects == 4
    finally:
        client.close()


def test_create_default_client_timeout_override():
    client = create_default_client(ClientSettings(timeout=30, trust_env=False), timeout=2.5)
    try:
        assert client.timeout == httpx.Timeout(2.5)
    finally:
        client.close()


def test_options_are_applied_in_order(settings):
    transport = httpx.MockTransport(lambda request: httpx.Response(200))
    builder = new_request(with_settings(settings), with_transport(transport), with_client_timeout(5))
    assert builder.settings is settings
    assert builder.transport is transport
    assert builder.timeout == 5


def test_plain_callables_work_as_options():
    def tag(builder):
        builder.headers({"X-Tag": "custom"})

    assert new_request(tag).header_map == {"X-Tag": "custom"}


def test_lazily_created_client_uses_timeout_option(transport):
    builder = new_request(with_transport(transport), with_client_timeout(5))
    assert builder.client is None

    builder.get("https://example.test/")

    assert builder.client is not None
    assert builder.client.timeout == httpx.Timeout(5.0)
    assert builder.client.is_closed is False


def test_supplied_client_is_used_and_left_open(transport):
    client = httpx.Client(transport=transport, headers={"X-Client": "shared"})
    try:
        new_request(with_client(client)).get("https://example.test/")
        new_request(with_client(client)).get("https://example.test/again")
        assert client.is_closed is False
        assert [r.headers["x-client"] for r in transport.requests] == ["shared", "shared"]
    finally:
        client.close()


def test_builder_owned_client_is_closed_after_exchange(monkeypatch):
    created = []

    def fake_factory(settings, *, transport=None, timeout=None, cookies=None):
        client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
        created.append(client)
        return client

    monkeypatch.setattr("fluenthttp.builder.create_default_client", fake_factory)
    new_request().get("https://example.test/")

    assert len(created) == 1
    assert created[0].is_closed is True


def test_cookie_jar_is_shared_across_builders(make_transport):
    jar = CookieJar()

    def handler(request):
        if request.url.path == "/login":
            return httpx.Response(200, headers={"Set-Cookie": "session=abc; Path=/"})
        return httpx.Response(200, text=request.headers.get("cookie", ""))

    transport = make_transport(handler)
    new_request(with_transport(transport), with_cookie_jar(jar)).post("https://example.test/login")
    assert any(cookie.name == "session" for cookie in jar)

    response = new_request(with_transport(transport), with_cookie_jar(jar)).get("https://example.test/profile")
    assert response.text == "session=abc"


def test_httpx_cookies_are_accepted(transport):
    cookies = httpx.Cookies()
    cookies.set("pref", "dark", domain="example.test")
    new_request(with_transport(transport), with_cookie_jar(cookies)).get("https://example.test/")
    assert transport.last.headers["cookie"] == "pref=dark"
