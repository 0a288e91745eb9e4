# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
fluenthttp package entrypoint.

A chainable request builder over httpx: body encoding, query strings, headers,
basic auth, multipart uploads, lifecycle hooks and cancellation contexts are
configured on a RequestBuilder, and one terminal verb call sends the request.
Connection pooling, TLS, DNS and redirects are left to httpx.
"""

from .builder import AfterResponseHook, BeforeRequestHook, ErrorHook, RequestBuilder, new_request
from .config import ClientSettings, load_client_settings
from .context import CancelContext, background, with_cancel, with_deadline, with_timeout
from .errors import (
    BodyEncodingError,
    BuilderConsumedError,
    ConfigurationError,
    DeadlineExceededError,
    ErrorCategory,
    FluentHttpError,
    HookError,
    RequestBuildError,
    RequestCancelledError,
    TransportError,
    UploadError,
)
from .http import BodyKind, MultipartParam, Payload, Response
from .log import setup_logging
from .options import Option, with_client, with_client_timeout, with_cookie_jar, with_settings, with_transport
from .version import __version__

__all__ = [
    "AfterResponseHook",
    "BeforeRequestHook",
    "BodyEncodingError",
    "BodyKind",
    "BuilderConsumedError",
    "CancelContext",
    "ClientSettings",
    "ConfigurationError",
    "DeadlineExceededError",
    "ErrorCategory",
    "ErrorHook",
    "FluentHttpError",
    "HookError",
    "MultipartParam",
    "Option",
    "Payload",
    "RequestBuildError",
    "RequestBuilder",
    "RequestCancelledError",
    "Response",
    "TransportError",
    "UploadError",
    "background",
    "load_client_settings",
    "new_request",
    "setup_logging",
    "with_cancel",
    "with_client",
    "with_client_timeout",
    "with_cookie_jar",
    "with_deadline",
    "with_settings",
    "with_timeout",
    "with_transport",
    "__version__",
]
