# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Fluent request builder.

A RequestBuilder collects body encoding, query string, headers, basic auth,
multipart parts, lifecycle hooks and a cancellation context through chained
calls, then a single terminal verb call (get/post/...) sends one request through
an httpx client and returns a Response.

Builders are single-use: the terminal call finalises the multipart body and
marks the builder consumed, and a second terminal call raises
BuilderConsumedError.

Hook contract:
- before-request hooks receive the builder and may still reconfigure it;
- after-response hooks receive one shared copy of the Response, so changes they
  make never reach the Response returned to the caller;
- a before-request or after-response hook that raises aborts the call with
  HookError (error hooks run first);
- error hooks receive the builder and the exception about to be raised; an
  error hook that raises is logged and skipped.
"""

from __future__ import annotations

import base64
import logging
import os
import re
import time
from collections.abc import Callable, Iterable, Mapping
from typing import Any

import httpx

from .config import ClientSettings, load_client_settings
from .context import CancelContext, background
from .errors import (
    BuilderConsumedError,
    DeadlineExceededError,
    FluentHttpError,
    HookError,
    RequestBuildError,
    RequestCancelledError,
    TransportError,
    UploadError,
    categorize_exception,
)
from .http.client import CookieStore, create_default_client
from .http.models import MultipartParam, Response
from .http.multipart import MultipartWriter
from .http.payloads import (
    EMPTY_PAYLOAD,
    Payload,
    encode_values,
    form_payload,
    json_payload,
    raw_payload,
    text_payload,
)
from .options import Option

logger = logging.getLogger(__name__)

BeforeRequestHook = Callable[["RequestBuilder"], None]
AfterResponseHook = Callable[[Response], None]
ErrorHook = Callable[["RequestBuilder", Exception], None]

_METHOD_TOKEN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


def _hook_name(hook: object) -> str:
    return getattr(hook, "__qualname__", None) or repr(hook)


def _basic_auth_header(username: str, password: str) -> str:
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


class RequestBuilder:
    """Chainable configuration for one HTTP request."""

    def __init__(self, *options: Option):
        self.settings: ClientSettings = load_client_settings()
        self.client: httpx.Client | None = None
        self.transport: httpx.BaseTransport | None = None
        self.cookies: CookieStore | None = None
        self.timeout: float | None = None

        self._body: Payload | MultipartWriter = EMPTY_PAYLOAD
        self._query = ""
        self._headers: dict[str, str] = {}
        self._basic_user = ""
        self._basic_password = ""
        self._before_request_hooks: list[BeforeRequestHook] = []
        self._after_response_hooks: list[AfterResponseHook] = []
        self._error_hooks: list[ErrorHook] = []
        self._ctx: CancelContext | None = None
        self._consumed = False

        for option in options:
            option(self)

    @property
    def payload(self) -> Payload:
        """The active body as it would be sent right now."""
        return self._body.to_payload()

    @property
    def query_string(self) -> str:
        return self._query

    @property
    def header_map(self) -> dict[str, str]:
        return dict(self._headers)

    @property
    def consumed(self) -> bool:
        return self._consumed

    def json(self, data: Mapping[str, Any]) -> RequestBuilder:
        """Send `data` as canonical JSON. Raises BodyEncodingError when it cannot be encoded."""
        self._body = json_payload(data)
        return self

    def form_data(self, values: Mapping[str, Any]) -> RequestBuilder:
        self._body = form_payload(values)
        return self

    def body(self, data: bytes | bytearray | memoryview) -> RequestBuilder:
        self._body = raw_payload(data)
        return self

    def text(self, value: str) -> RequestBuilder:
        self._body = text_payload(value)
        return self

    def query(self, values: Mapping[str, Any]) -> RequestBuilder:
        """Set the query string appended to the URL at dispatch. Leaves the content type alone."""
        self._query = encode_values(values)
        return self

    def headers(self, values: Mapping[str, str]) -> RequestBuilder:
        """Replace the header mapping; applied last, so it overrides Content-Type and auth."""
        self._headers = {str(key): str(value) for key, value in (values or {}).items()}
        return self

    def basic_auth(self, username: str, password: str) -> RequestBuilder:
        """Only applied when both username and password are non-empty."""
        self._basic_user = username or ""
        self._basic_password = password or ""
        return self

    def _write_multipart(self, write: Callable[[MultipartWriter], object]) -> None:
        """Run `write` against the active multipart body, or a new one adopted only if it succeeds."""
        writer = self._body if isinstance(self._body, MultipartWriter) else MultipartWriter()
        write(writer)
        self._body = writer

    def multipart_form_data(self, values: Mapping[str, str]) -> RequestBuilder:
        def write_fields(writer: MultipartWriter) -> None:
            for key, value in (values or {}).items():
                writer.write_field(key, value)

        self._write_multipart(write_fields)
        return self

    def upload(self, field_name: str, path: str | os.PathLike[str]) -> RequestBuilder:
        """Copy the file at `path` into a new file part named after its base name."""
        file_name = os.path.basename(os.fspath(path))
        try:
            handle = open(path, "rb")
        except OSError as exc:
            raise UploadError(f"failed to open {os.fspath(path)!r} for upload: {exc}") from exc
        with handle:
            self._write_multipart(lambda writer: writer.write_file(field_name, file_name, handle))
        return self

    def upload_from_reader(self, param: MultipartParam) -> RequestBuilder:
        """Copy `param.file_body` into a new file part. The stream is left open."""
        self._write_multipart(lambda writer: writer.write_file(param.field_name, param.file_name, param.file_body))
        return self

    def uploads(self, files: Mapping[str, str | os.PathLike[str]]) -> RequestBuilder:
        for field_name, path in files.items():
            self.upload(field_name, path)
        return self

    def uploads_from_reader(self, params: Iterable[MultipartParam]) -> RequestBuilder:
        for param in params:
            self.upload_from_reader(param)
        return self

    def on_before_request(self, hook: BeforeRequestHook) -> RequestBuilder:
        self._before_request_hooks.append(hook)
        return self

    def on_after_response(self, hook: AfterResponseHook) -> RequestBuilder:
        self._after_response_hooks.append(hook)
        return self

    def on_error(self, hook: ErrorHook) -> RequestBuilder:
        self._error_hooks.append(hook)
        return self

    def set_context(self, ctx: CancelContext) -> RequestBuilder:
        self._ctx = ctx
        return self

    def context(self) -> CancelContext:
        """Return the attached context, or an unbounded background context."""
        if self._ctx is None:
            return background()
        return self._ctx

    def get(self, url: str) -> Response:
        return self._dispatch("GET", url)

    def post(self, url: str) -> Response:
        return self._dispatch("POST", url)

    def put(self, url: str) -> Response:
        return self._dispatch("PUT", url)

    def patch(self, url: str) -> Response:
        return self._dispatch("PATCH", url)

    def delete(self, url: str) -> Response:
        return self._dispatch("DELETE", url)

    def head(self, url: str) -> Response:
        return self._dispatch("HEAD", url)

    def options(self, url: str) -> Response:
        return self._dispatch("OPTIONS", url)

    def request(self, method: str, url: str) -> Response:
        """Dispatch with an arbitrary method token (case-insensitive)."""
        return self._dispatch(method, url)

    def _run_error_hooks(self, error: Exception) -> None:
        for hook in list(self._error_hooks):
            try:
                hook(self, error)
            except Exception:  # noqa: BLE001
                logger.exception("Error hook %s failed", _hook_name(hook))

    def _fail(self, error: FluentHttpError) -> FluentHttpError:
        self._run_error_hooks(error)
        return error

    def _run_before_request_hooks(self) -> None:
        for hook in list(self._before_request_hooks):
            try:
                hook(self)
            except Exception as exc:  # noqa: BLE001
                raise HookError("before-request", hook, exc) from exc

    def _run_after_response_hooks(self, response: Response) -> None:
        if not self._after_response_hooks:
            return
        snapshot = response.copy()
        for hook in list(self._after_response_hooks):
            try:
                hook(snapshot)
            except Exception as exc:  # noqa: BLE001
                raise HookError("after-response", hook, exc) from exc

    def _resolve_client(self) -> tuple[httpx.Client, bool]:
        """Return (client, owned). An owned client is closed once the exchange is over."""
        if self.client is not None:
            return self.client, False
        self.client = create_default_client(
            self.settings,
            transport=self.transport,
            timeout=self.timeout,
            cookies=self.cookies,
        )
        return self.client, self.transport is None

    def _transport_error(self, exc: httpx.HTTPError | OSError, ctx: CancelContext) -> TransportError:
        if ctx.cancelled:
            return RequestCancelledError(f"request cancelled: {exc}")
        if ctx.expired and isinstance(exc, httpx.TimeoutException):
            return DeadlineExceededError(f"context deadline exceeded: {exc}")
        return TransportError(str(exc) or type(exc).__name__, category=categorize_exception(exc))

    @staticmethod
    def _request_timeout(client: httpx.Client, ctx: CancelContext) -> httpx.Timeout | None:
        """Clamp every client timeout phase to the time left before the context deadline."""
        remaining = ctx.remaining()
        if remaining is None:
            return None
        base = client.timeout

        def clamp(value: float | None) -> float:
            return remaining if value is None else min(value, remaining)

        return httpx.Timeout(
            connect=clamp(base.connect),
            read=clamp(base.read),
            write=clamp(base.write),
            pool=clamp(base.pool),
        )

    @staticmethod
    def _read_body(resp: httpx.Response, ctx: CancelContext) -> bytes:
        content = bytearray()
        for chunk in resp.iter_bytes():
            error = ctx.err()
            if error is not None:
                raise error
            content.extend(chunk)
        return bytes(content)

    def _dispatch(self, method: str, url: str) -> Response:
        if self._consumed:
            raise BuilderConsumedError("request builder already dispatched; create a new builder per request")
        self._consumed = True

        try:
            self._run_before_request_hooks()
        except HookError as exc:
            self._fail(exc)
            raise

        verb = str(method or "").upper()
        if not _METHOD_TOKEN.match(verb):
            raise self._fail(RequestBuildError(f"invalid HTTP method {method!r}"))

        client, owned = self._resolve_client()
        try:
            return self._exchange(client, verb, url)
        finally:
            if owned:
                client.close()

    def _exchange(self, client: httpx.Client, verb: str, url: str) -> Response:
        if isinstance(self._body, MultipartWriter):
            self._body.close()
        if self._query:
            url = f"{url}?{self._query}"

        payload = self.payload
        ctx = self.context()
        build_kwargs: dict[str, Any] = {"content": None if verb == "GET" else payload.content}
        timeout = self._request_timeout(client, ctx)
        if timeout is not None:
            build_kwargs["timeout"] = timeout

        try:
            request = client.build_request(verb, url, **build_kwargs)
        except (httpx.InvalidURL, TypeError, ValueError) as exc:
            raise self._fail(RequestBuildError(f"cannot build {verb} request for {url!r}: {exc}")) from exc

        request.headers["Content-Type"] = payload.content_type
        if self._basic_user and self._basic_password:
            request.headers["Authorization"] = _basic_auth_header(self._basic_user, self._basic_password)
        for key, value in self._headers.items():
            request.headers[key] = value

        ctx_error = ctx.err()
        if ctx_error is not None:
            raise self._fail(ctx_error)

        logger.debug("Dispatching %s %s (%s body, %d bytes)", verb, url, payload.kind.value, len(request.content))
        started = time.monotonic()
        try:
            raw = client.send(request, stream=True)
            try:
                content = self._read_body(raw, ctx)
            finally:
                raw.close()
        except RequestCancelledError as exc:
            self._fail(exc)
            raise
        except (httpx.HTTPError, OSError) as exc:
            raise self._fail(self._transport_error(exc, ctx)) from exc

        response = Response.from_httpx(raw, content, elapsed=time.monotonic() - started)
        logger.debug("%s %s -> %s (%d bytes)", verb, url, response.status_code, len(content))

        try:
            self._run_after_response_hooks(response)
        except HookError as exc:
            self._fail(exc)
            raise
        return response

    def __repr__(self) -> str:
        return (
            f"RequestBuilder(body={self._body.kind.value}, query={self._query!r}, "
            f"headers={sorted(self._headers)}, consumed={self._consumed})"
        )


def new_request(*options: Option) -> RequestBuilder:
    """Create a RequestBuilder configured by `options`."""
    return RequestBuilder(*options)


__all__ = [
    "AfterResponseHook",
    "BeforeRequestHook",
    "ErrorHook",
    "RequestBuilder",
    "new_request",
]
