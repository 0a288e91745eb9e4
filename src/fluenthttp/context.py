# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Cancellation contexts for request dispatch.

A CancelContext carries an optional deadline and a cancel signal. Contexts can be
derived from a parent: a child is done as soon as its parent is, and its
deadline is never later than the parent's. The signal is a threading.Event, so
another thread may cancel a request that is blocked in dispatch.
"""

from __future__ import annotations

import threading
import time

from .errors import DeadlineExceededError, RequestCancelledError


class CancelContext:
    """Deadline plus cancel signal attached to a request builder."""

    def __init__(self, *, deadline: float | None = None, parent: CancelContext | None = None):
        self._event = threading.Event()
        self._parent = parent
        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        self._deadline = deadline

    @property
    def deadline(self) -> float | None:
        """Absolute deadline on the time.monotonic() clock, or None."""
        return self._deadline

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._parent is not None and self._parent.cancelled

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def done(self) -> bool:
        return self.cancelled or self.expired

    def cancel(self) -> None:
        self._event.set()

    def remaining(self) -> float | None:
        """Seconds left before the deadline (never negative), or None when unbounded."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def err(self) -> RequestCancelledError | None:
        """Return the error describing why the context is done, or None."""
        if self.cancelled:
            return RequestCancelledError()
        if self.expired:
            return DeadlineExceededError()
        return None

    def raise_if_done(self) -> None:
        error = self.err()
        if error is not None:
            raise error

    def __enter__(self) -> CancelContext:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.cancel()

    def __repr__(self) -> str:
        return f"CancelContext(deadline={self._deadline!r}, cancelled={self.cancelled})"


def background() -> CancelContext:
    """An unbounded context that is never cancelled unless cancel() is called on it."""
    return CancelContext()


def with_cancel(parent: CancelContext | None = None) -> CancelContext:
    return CancelContext(parent=parent)


def with_deadline(deadline: float, parent: CancelContext | None = None) -> CancelContext:
    """Derive a context that expires at `deadline` (time.monotonic() clock)."""
    return CancelContext(deadline=deadline, parent=parent)


def with_timeout(seconds: float, parent: CancelContext | None = None) -> CancelContext:
    """Derive a context that expires `seconds` from now."""
    return with_deadline(time.monotonic() + seconds, parent=parent)


__all__ = ["CancelContext", "background", "with_cancel", "with_deadline", "with_timeout"]
