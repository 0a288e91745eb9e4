# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for fluenthttp."""

from __future__ import annotations

import logging
import os

DEFAULT_LOG_LEVEL = os.getenv("FLUENTHTTP_LOG_LEVEL", "WARNING").upper()


def setup_logging(level: str | None = None) -> None:
    """Configure standard logging for scripts that drive the builder directly."""
    effective_level = (level or os.getenv("FLUENTHTTP_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, effective_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


__all__ = ["setup_logging"]
