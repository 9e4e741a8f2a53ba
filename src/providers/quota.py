"""Per-provider daily request budgets.

Pure bookkeeping, no I/O. Counters are process-wide and shared by every
concurrent request, so every read-modify-write happens under one lock.
The window rolls over lazily: each check first compares the stored window
date with today and zeroes the counter when the calendar date has changed.

Single-process only. A horizontally scaled deployment needs a shared counter
(e.g. an atomic INCR with expiry in a key/value store) behind the same
interface.
"""

import threading
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, Optional

from src.models.models import ProviderQuota
from src.utils.logger import logger


@dataclass
class _Window:
    daily_limit: int
    request_count: int
    window_date: date


class QuotaTracker:
    """Tracks daily request counts for quota-limited providers.

    Providers that were never registered are treated as unlimited.

    Args:
        today: Callable returning the current date. Injectable for tests.
    """

    def __init__(self, today: Optional[Callable[[], date]] = None) -> None:
        self._today = today or date.today
        self._lock = threading.Lock()
        self._windows: Dict[str, _Window] = {}

    def register(self, provider_id: str, daily_limit: int) -> None:
        """Start tracking `provider_id` with a fresh window for today."""
        if daily_limit < 0:
            raise ValueError(f"daily_limit must be non-negative, got: {daily_limit}")
        with self._lock:
            self._windows[provider_id] = _Window(daily_limit, 0, self._today())
        logger.debug(f"Quota registered for {provider_id}: {daily_limit}/day")

    def is_tracked(self, provider_id: str) -> bool:
        with self._lock:
            return provider_id in self._windows

    def _reset_if_new_day_locked(self, provider_id: str) -> Optional[_Window]:
        window = self._windows.get(provider_id)
        if window is None:
            return None
        today = self._today()
        if window.window_date != today:
            logger.info(
                f"Daily request counter reset for {provider_id} "
                f"({window.request_count}/{window.daily_limit} used on {window.window_date})"
            )
            window.request_count = 0
            window.window_date = today
        return window

    def reset_if_new_day(self, provider_id: str) -> None:
        with self._lock:
            self._reset_if_new_day_locked(provider_id)

    def can_consume(self, provider_id: str) -> bool:
        """True if a request to `provider_id` would currently be allowed."""
        with self._lock:
            window = self._reset_if_new_day_locked(provider_id)
            if window is None:
                return True
            return window.request_count < window.daily_limit

    def consume(self, provider_id: str) -> bool:
        """Atomically reserve one request.

        Returns:
            True if the request was counted. False if the daily limit was
            already reached, in which case nothing is changed.
        """
        with self._lock:
            window = self._reset_if_new_day_locked(provider_id)
            if window is None:
                return True
            if window.request_count >= window.daily_limit:
                logger.info(f"Quota refused for {provider_id}: {window.request_count}/{window.daily_limit} used today")
                return False
            window.request_count += 1
            count, limit = window.request_count, window.daily_limit

        logger.debug(f"{provider_id} requests used today: {count}/{limit}")
        return True

    def exhaust(self, provider_id: str) -> None:
        """Mark today's budget as spent (the provider reported its quota is gone)."""
        with self._lock:
            window = self._reset_if_new_day_locked(provider_id)
            if window is not None:
                window.request_count = window.daily_limit
        logger.warning(f"{provider_id} reported its daily quota as exhausted")

    def remaining(self, provider_id: str) -> Optional[int]:
        """Requests left today, or None for untracked (unlimited) providers."""
        snapshot = self.snapshot(provider_id)
        return snapshot.remaining if snapshot else None

    def snapshot(self, provider_id: str) -> Optional[ProviderQuota]:
        with self._lock:
            window = self._reset_if_new_day_locked(provider_id)
            if window is None:
                return None
            return ProviderQuota(
                provider_id=provider_id,
                daily_limit=window.daily_limit,
                request_count=window.request_count,
                window_date=window.window_date,
            )
