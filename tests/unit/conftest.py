# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

from collections.abc import Callable

import httpx
import pytest

from fluenthttp import ClientSettings


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it handled."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response] | None = None):
        self.requests: list[httpx.Request] = []

        def _handle(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            if handler is not None:
                return handler(request)
            return httpx.Response(200, text="ok")

        super().__init__(_handle)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    for name in (
        "FLUENTHTTP_TIMEOUT",
        "FLUENTHTTP_USER_AGENT",
        "FLUENTHTTP_REDIRECTS",
        "FLUENTHTTP_MAX_REDIRECTS",
        "FLUENTHTTP_VERIFY_SSL",
        "FLUENTHTTP_TRUST_ENV",
        "FLUENTHTTP_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def make_transport():
    return RecordingTransport


@pytest.fixture
def settings():
    return ClientSettings(user_agent="fluenthttp-tests/1.0", trust_env=False)
