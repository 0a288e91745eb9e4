# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl as ssl_module
from collections.abc import Iterator
from enum import Enum

import httpx


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    PROTOCOL_ERROR = "PROTOCOL_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


class FluentHttpError(Exception):
    """Base class for every error raised by the request builder."""


class ConfigurationError(FluentHttpError):
    """A configuration step (body encoding, upload) failed."""


class BodyEncodingError(ConfigurationError):
    """The request body could not be encoded."""


class UploadError(ConfigurationError):
    """A multipart part could not be written."""


class BuilderConsumedError(FluentHttpError):
    """A terminal verb was called on a builder that already dispatched."""


class RequestBuildError(FluentHttpError):
    """The outgoing request could not be constructed (bad URL or method)."""


class TransportError(FluentHttpError):
    """The exchange failed below HTTP (connect, TLS, DNS, timeout)."""

    def __init__(self, message: str, *, category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR):
        super().__init__(message)
        self.category = category

    @property
    def reason(self) -> str:
        return error_category_to_reason(self.category)


class RequestCancelledError(TransportError):
    """The request context was cancelled before the exchange finished."""

    def __init__(self, message: str = "request cancelled", *, category: ErrorCategory = ErrorCategory.CANCELLED):
        super().__init__(message, category=category)


class DeadlineExceededError(RequestCancelledError):
    """The request context deadline passed before the exchange finished."""

    def __init__(self, message: str = "context deadline exceeded"):
        super().__init__(message, category=ErrorCategory.TIMEOUT)


class HookError(FluentHttpError):
    """A before-request or after-response hook raised."""

    def __init__(self, stage: str, hook: object, exc: BaseException):
        name = getattr(hook, "__qualname__", None) or repr(hook)
        super().__init__(f"{stage} hook {name} failed: {exc}")
        self.stage = stage
        self.hook = hook


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.

    httpx wraps socket-level failures, so the cause chain is scanned for DNS and
    TLS errors before falling back to the httpx class itself.
    """
    if isinstance(exc, RequestCancelledError):
        return exc.category

    for link in _exception_chain(exc):
        if isinstance(link, (socket.gaierror, socket.herror)):
            return ErrorCategory.DNS_ERROR
        if isinstance(link, (ssl_module.SSLError, ssl_module.CertificateError)):
            return ErrorCategory.SSL_ERROR

    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, (httpx.ConnectError, httpx.NetworkError, httpx.ProxyError)):
        message = str(exc).lower()
        if "name or service not known" in message or "nodename nor servname" in message or "getaddrinfo" in message:
            return ErrorCategory.DNS_ERROR
        if "certificate" in message or "ssl" in message:
            return ErrorCategory.SSL_ERROR
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (httpx.RemoteProtocolError, httpx.LocalProtocolError, httpx.UnsupportedProtocol)):
        return ErrorCategory.PROTOCOL_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "Network timeout during request",
        ErrorCategory.CANCELLED: "Request cancelled by caller",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.CONNECTION_ERROR: "Network connectivity issue",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.PROTOCOL_ERROR: "HTTP protocol violation",
        ErrorCategory.UNKNOWN_ERROR: "Network error during request",
        ErrorCategory.NONE: "",
        None: "",
    }
    return mapping.get(category, "Request failed due to network error")


__all__ = [
    "BodyEncodingError",
    "BuilderConsumedError",
    "ConfigurationError",
    "DeadlineExceededError",
    "ErrorCategory",
    "FluentHttpError",
    "HookError",
    "RequestBuildError",
    "RequestCancelledError",
    "TransportError",
    "UploadError",
    "categorize_exception",
    "error_category_to_reason",
]
