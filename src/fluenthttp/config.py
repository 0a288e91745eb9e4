# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for fluenthttp."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"fluenthttp/{__version__}"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class ClientSettings:
    """Defaults for the client a builder creates when none is supplied.

    A timeout of zero (or less) means the exchange is unbounded.
    """

    timeout: float = 0.0
    user_agent: str = DEFAULT_USER_AGENT
    allow_redirects: bool = True
    max_redirects: int = 10
    verify_ssl: bool = True
    trust_env: bool = True

    @classmethod
    def from_env(cls) -> "ClientSettings":
        """Create settings from environment variables (evaluated at call time)."""
        max_redirects = _int_env("FLUENTHTTP_MAX_REDIRECTS", cls.max_redirects)
        if max_redirects < 0:
            max_redirects = cls.max_redirects
        return cls(
            timeout=_float_env("FLUENTHTTP_TIMEOUT", cls.timeout),
            user_agent=os.getenv("FLUENTHTTP_USER_AGENT", cls.user_agent),
            allow_redirects=_bool_env("FLUENTHTTP_REDIRECTS", cls.allow_redirects),
            max_redirects=max_redirects,
            verify_ssl=_bool_env("FLUENTHTTP_VERIFY_SSL", cls.verify_ssl),
            trust_env=_bool_env("FLUENTHTTP_TRUST_ENV", cls.trust_env),
        )


def load_client_settings() -> ClientSettings:
    """Load client settings from environment with sensible defaults."""
    return ClientSettings.from_env()
