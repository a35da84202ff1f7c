"""Fixed-window request rate limiting.

A key may make ``max_requests`` calls per window. The window starts at the
first call and resets on the first call made after it has elapsed, so bursts
straddling a boundary are not smoothed.

``InMemoryCounterStore`` is safe across threads within one process. With
several worker processes each keeps its own counts; share a
``CounterStore`` backed by an external service to enforce a global limit.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from .config import DEFAULT_RATE_LIMIT_MAX, DEFAULT_RATE_LIMIT_WINDOW_SECONDS
from .errors import RateLimitExceeded


@dataclass(frozen=True)
class WindowCount:
    count: int
    window_start: float


@runtime_checkable
class CounterStore(Protocol):
    def get(self, key: str) -> WindowCount | None: ...

    def increment(self, key: str, *, now: float, window_seconds: float, limit: int) -> tuple[WindowCount, bool]:
        """Atomically reset an expired window or count one more call.

        Returns the resulting count and whether the call was admitted. A call
        that would exceed ``limit`` is not counted.
        """
        ...

    def reset(self, key: str) -> None: ...


@dataclass
class InMemoryCounterStore:
    """Process-local counters.

    Expired windows are swept at most once per window length from inside
    ``increment``, so keys that stop calling do not accumulate.
    """

    _counts: dict[str, WindowCount] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _last_sweep: float | None = field(default=None, repr=False)

    def get(self, key: str) -> WindowCount | None:
        with self._lock:
            return self._counts.get(key)

    def increment(self, key: str, *, now: float, window_seconds: float, limit: int) -> tuple[WindowCount, bool]:
        with self._lock:
            if self._last_sweep is None:
                self._last_sweep = now
            elif now - self._last_sweep > window_seconds:
                self._drop_expired(now, window_seconds)
                self._last_sweep = now
            current = self._counts.get(key)
            if current is None or now - current.window_start > window_seconds:
                current = WindowCount(count=1, window_start=now)
                self._counts[key] = current
                return current, True
            if current.count >= limit:
                return current, False
            current = WindowCount(count=current.count + 1, window_start=current.window_start)
            self._counts[key] = current
            return current, True

    def reset(self, key: str) -> None:
        with self._lock:
            self._counts.pop(key, None)

    def cleanup_expired(self, *, now: float, window_seconds: float) -> int:
        """Drop every key whose window has elapsed. Returns how many were removed."""
        with self._lock:
            return self._drop_expired(now, window_seconds)

    def _drop_expired(self, now: float, window_seconds: float) -> int:
        expired = [key for key, state in self._counts.items() if now - state.window_start > window_seconds]
        for key in expired:
            del self._counts[key]
        return len(expired)


@dataclass
class RateLimiter:
    store: CounterStore = field(default_factory=InMemoryCounterStore)
    max_requests: int = DEFAULT_RATE_LIMIT_MAX
    window_seconds: float = DEFAULT_RATE_LIMIT_WINDOW_SECONDS
    clock: Callable[[], float] = time.monotonic

    def check(self, key: str) -> WindowCount:
        now = self.clock()
        state, admitted = self.store.increment(
            key,
            now=now,
            window_seconds=self.window_seconds,
            limit=self.max_requests,
        )
        if not admitted:
            retry_after = max(0.0, state.window_start + self.window_seconds - now)
            raise RateLimitExceeded(key, retry_after=retry_after)
        return state

    def cleanup_expired(self) -> int:
        cleanup = getattr(self.store, "cleanup_expired", None)
        if cleanup is None:
            return 0
        return cleanup(now=self.clock(), window_seconds=self.window_seconds)


def request_key(
    forwarded_for: str | None,
    *,
    client_host: str | None = None,
    has_credentials: bool = False,
) -> str:
    """Key a caller by client address plus authenticated/anonymous."""
    address = ""
    if forwarded_for:
        address = forwarded_for.split(",")[0].strip()
    if not address:
        address = (client_host or "").strip() or "ip:local"
    return f"{address}:{'auth' if has_credentials else 'anon'}"


__all__ = [
    "CounterStore",
    "InMemoryCounterStore",
    "RateLimiter",
    "WindowCount",
    "request_key",
]
