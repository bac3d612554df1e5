"""Per-call cancellation / deadline carrier.

A ``CallContext`` travels with a single conversion or admin operation. Services
call ``check()`` before every cache, store and provider call and hand
``timeout_for()`` to the provider so its HTTP timeout never outlives the
caller's deadline.
"""

from __future__ import annotations

import threading
import time
from typing import Optional

from fastapi import Request

from app.services.errors import Cancelled, DeadlineExceeded


class CallContext:
    def __init__(self, timeout: Optional[float] = None):
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline (None when unbounded)."""
        if self._deadline is None:
            return None
        return max(self._deadline - time.monotonic(), 0.0)

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    @property
    def done(self) -> bool:
        return self.cancelled or self.expired

    def check(self) -> None:
        if self.cancelled:
            raise Cancelled()
        if self.expired:
            raise DeadlineExceeded()

    def timeout_for(self, default: float) -> float:
        remaining = self.remaining()
        if remaining is None:
            return default
        return min(default, remaining)


def ensure_context(ctx: Optional[CallContext]) -> CallContext:
    return ctx if ctx is not None else CallContext()


def get_call_context(request: Request) -> CallContext:
    """FastAPI dependency: one bounded context per inbound request."""
    settings = request.app.state.settings
    return CallContext(timeout=settings.request_timeout_seconds)
