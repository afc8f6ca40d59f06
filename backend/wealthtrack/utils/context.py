# backend/wealthtrack/utils/context.py
"""
Request context management.

Provides context storage for request-scoped data:
- Correlation ID for request tracing
- Deadline bounding every upstream call made on behalf of the request

Uses Python's contextvars. Worker threads do NOT inherit context
automatically; code that fans work out to a thread pool must submit
`bind_context(func)` so the correlation ID and deadline follow the work.

Usage:
    from wealthtrack.utils.context import get_correlation_id, set_correlation_id

    # At the start of a request
    set_correlation_id("abc-123")

    # In any service
    correlation_id = get_correlation_id()  # Returns "abc-123"

    # Bound the upstream calls of a block of work
    with deadline_scope(Deadline(5.0)) as deadline:
        ...
        deadline.cancel()  # e.g. the client went away
"""

import contextvars
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Callable, TypeVar

T = TypeVar("T")

# =============================================================================
# CONTEXT VARIABLES
# =============================================================================

# Correlation ID for request tracing
_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)

# Deadline for upstream calls
_deadline_var: ContextVar["Deadline | None"] = ContextVar("deadline", default=None)


# =============================================================================
# CORRELATION ID
# =============================================================================

def get_correlation_id() -> str | None:
    """
    Get the current request's correlation ID.

    Returns:
        The correlation ID for the current request, or None if not set.
    """
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """
    Set the correlation ID for the current request.

    Args:
        correlation_id: Unique identifier for this request
    """
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    """Clear the correlation ID at the end of a request."""
    _correlation_id_var.set(None)


# =============================================================================
# THREAD HAND-OFF
# =============================================================================

def bind_context(func: Callable[..., T]) -> Callable[..., T]:
    """
    Capture the caller's context and return a callable that runs `func` in it.

    A fresh copy is taken per call, so the returned callable can be submitted
    to an executor once. Call bind_context() again for every task.

    Example:
        executor.submit(bind_context(resolver.resolve), asset, "USD")
    """
    ctx = contextvars.copy_context()

    def _run(*args: Any, **kwargs: Any) -> T:
        return ctx.run(func, *args, **kwargs)

    return _run


# =============================================================================
# DEADLINE
# =============================================================================

class Deadline:
    """
    Point in time after which no upstream call should be started.

    A deadline can also be cancelled early from any thread. Once cancelled
    or expired, `remaining()` is 0.

    Example:
        deadline = Deadline(30.0)
        timeout = deadline.remaining()
    """

    def __init__(self, seconds: float) -> None:
        self._expires_at = time.monotonic() + max(0.0, seconds)
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0

    def remaining(self) -> float:
        """Seconds left, 0 once expired or cancelled."""
        if self._cancelled.is_set():
            return 0.0
        return max(0.0, self._expires_at - time.monotonic())


def get_deadline() -> Deadline | None:
    """Deadline of the current context, None when unbounded."""
    return _deadline_var.get()


@contextmanager
def deadline_scope(deadline: Deadline) -> Iterator[Deadline]:
    """Make `deadline` current for the block, restoring the previous one after."""
    token = _deadline_var.set(deadline)
    try:
        yield deadline
    finally:
        _deadline_var.reset(token)
