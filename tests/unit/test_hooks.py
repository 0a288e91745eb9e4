# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging

import httpx
import pytest

from fluenthttp import ErrorCategory, HookError, TransportError, new_request, with_transport


def test_before_hooks_run_in_order_before_network_call(make_transport):
    calls = []

    def handler(request):
        calls.append("network")
        return httpx.Response(200)

    (
        new_request(with_transport(make_transport(handler)))
        .on_before_request(lambda _b: calls.append("before-1"))
        .on_before_request(lambda _b: calls.append("before-2"))
        .on_after_response(lambda _r: calls.append("after"))
        .get("https://example.test/")
    )

    assert calls == ["before-1", "before-2", "network", "after"]


def test_before_hook_can_reconfigure_builder(transport):
    def sign(builder):
        builder.headers({**builder.header_map, "X-Signature": "sig"})

    new_request(with_transport(transport)).headers({"X-Base": "1"}).on_before_request(sign).get("https://example.test/")

    assert transport.last.headers["x-base"] == "1"
    assert transport.last.headers["x-signature"] == "sig"


def test_after_hooks_receive_a_copy(make_transport):
    transport = make_transport(lambda request: httpx.Response(200, headers={"X-A": "1"}, text="body"))
    seen = []

    def mutate(response):
        seen.append(response)
        response.status_code = 599
        response.headers["x-a"] = "changed"

    def observe(response):
        seen.append(response)

    result = (
        new_request(with_transport(transport))
        .on_after_response(mutate)
        .on_after_response(observe)
        .get("https://example.test/")
    )

    assert seen[0] is not None
    assert seen[0] is seen[1]
    assert seen[1].status_code == 599
    assert seen[0] is not result
    assert result.status_code == 200
    assert result.header("x-a") == "1"
    assert seen[0].raw is result.raw


def test_connection_failure_runs_each_error_hook_once_in_order(make_transport):
    def refuse(request):
        raise httpx.ConnectError("[Errno -2] Name or service not known", request=request)

    calls = []
    builder = (
        new_request(with_transport(make_transport(refuse)))
        .on_error(lambda b, exc: calls.append(("first", b, exc)))
        .on_error(lambda b, exc: calls.append(("second", b, exc)))
    )

    with pytest.raises(TransportError) as excinfo:
        builder.get("https://no-such-host.example.test/")

    assert [name for name, _, _ in calls] == ["first", "second"]
    assert all(b is builder for _, b, _ in calls)
    assert all(exc is excinfo.value for _, _, exc in calls)
    assert excinfo.value.category == ErrorCategory.DNS_ERROR
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


def test_error_hook_failure_is_logged_and_skipped(make_transport, caplog):
    def refuse(request):
        raise httpx.ConnectError("[Errno 111] Connection refused", request=request)

    calls = []

    def broken(_b, _exc):
        raise RuntimeError("hook bug")

    builder = (
        new_request(with_transport(make_transport(refuse)))
        .on_error(broken)
        .on_error(lambda _b, exc: calls.append(exc))
    )

    with caplog.at_level(logging.ERROR, logger="fluenthttp.builder"):
        with pytest.raises(TransportError) as excinfo:
            builder.post("https://example.test/")

    assert calls == [excinfo.value]
    assert excinfo.value.category == ErrorCategory.CONNECTION_ERROR
    assert "Error hook" in caplog.text


def test_failing_before_hook_aborts_dispatch(transport):
    errors = []

    def reject(_builder):
        raise ValueError("missing token")

    builder = (
        new_request(with_transport(transport))
        .on_before_request(reject)
        .on_before_request(lambda _b: errors.append("never"))
        .on_error(lambda _b, exc: errors.append(exc))
    )

    with pytest.raises(HookError) as excinfo:
        builder.get("https://example.test/")

    assert excinfo.value.stage == "before-request"
    assert isinstance(excinfo.value.__cause__, ValueError)
    assert errors == [excinfo.value]
    assert transport.requests == []


def test_failing_after_hook_raises_hook_error(transport):
    errors = []

    def explode(_response):
        raise KeyError("status")

    builder = new_request(with_transport(transport)).on_after_response(explode).on_error(lambda _b, exc: errors.append(exc))

    with pytest.raises(HookError) as excinfo:
        builder.get("https://example.test/")

    assert excinfo.value.stage == "after-response"
    assert errors == [excinfo.value]
    assert len(transport.requests) == 1


def test_no_error_hooks_on_success(transport):
    errors = []
    new_request(with_transport(transport)).on_error(lambda _b, exc: errors.append(exc)).get("https://example.test/")
    assert errors == []


def test_os_error_from_transport_runs_error_hooks(make_transport):
    def broken_socket(request):
        raise ConnectionResetError("peer reset")

    errors = []
    builder = new_request(with_transport(make_transport(broken_socket))).on_error(lambda _b, exc: errors.append(exc))

    with pytest.raises(TransportError) as excinfo:
        builder.get("https://example.test/")

    assert errors == [excinfo.value]
    assert excinfo.value.category == ErrorCategory.CONNECTION_ERROR
    assert isinstance(excinfo.value.__cause__, ConnectionResetError)
