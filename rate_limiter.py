import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import config
from error_handler import RateLimitExceededError

logger = logging.getLogger('chart_assistant.rate_limiter')

# Rate limiting configuration
CLEANUP_INTERVAL = 3600  # Clean up expired windows every hour (in seconds)
MAX_KEYS_TRACKED = 10000  # Maximum number of conversations to track before aggressive cleanup


@dataclass
class _Window:
    count: int
    reset_time: float


class FixedWindowRateLimiter:
    """
    Fixed-window request admission per conversation key.

    The first request after a window expires opens a new window of
    ``window_seconds``; at most ``max_requests`` are admitted inside it.
    The limiter is owned by a single session, so it takes no lock.
    """

    def __init__(
        self,
        max_requests: int = config.rate_limit_max_requests,
        window_seconds: float = config.rate_limit_window_seconds,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._last_cleanup_time = clock()

    def check_rate_limit(self, key: str) -> Tuple[bool, float]:
        """
        Check (and count) a request for ``key``.

        Args:
            key (str): The conversation id

        Returns:
            tuple: (is_rate_limited, seconds_to_wait)
        """
        current_time = self._clock()
        self._maybe_cleanup(current_time)

        window = self._windows.get(key)
        if window is None or current_time >= window.reset_time:
            self._windows[key] = _Window(count=1, reset_time=current_time + self.window_seconds)
            return False, 0

        if window.count >= self.max_requests:
            wait = window.reset_time - current_time
            logger.info(f"Rate limit reached for conversation {key}: {window.count} requests, {wait:.1f}s to reset")
            return True, wait

        window.count += 1
        return False, 0

    def enforce(self, key: str) -> None:
        """
        Count a request for ``key``, raising when it is over the limit.

        Raises:
            RateLimitExceededError: with the wait time and a user-facing sentence
        """
        is_limited, seconds_to_wait = self.check_rate_limit(key)
        if is_limited:
            raise RateLimitExceededError(format_rate_limit_message(seconds_to_wait), seconds_to_wait)

    def get_time_until_reset(self, key: str) -> float:
        """Seconds until the current window for ``key`` closes (0 if none)."""
        window = self._windows.get(key)
        if window is None:
            return 0
        return max(0, window.reset_time - self._clock())

    def clear(self, key: Optional[str] = None) -> None:
        """Forget one key, or every key when none is given."""
        if key is None:
            self._windows.clear()
        else:
            self._windows.pop(key, None)

    def tracked_keys(self) -> int:
        return len(self._windows)

    def _maybe_cleanup(self, current_time: float) -> None:
        if len(self._windows) > MAX_KEYS_TRACKED:
            logger.warning(f"Rate limiter tracking {len(self._windows)} conversations, performing aggressive cleanup")
            self.cleanup_expired_windows(current_time, aggressive=True)
            self._last_cleanup_time = current_time
        elif current_time - self._last_cleanup_time > CLEANUP_INTERVAL:
            self.cleanup_expired_windows(current_time)
            self._last_cleanup_time = current_time

    def cleanup_expired_windows(self, current_time: float, aggressive: bool = False) -> None:
        """
        Drop windows that have already closed.

        Args:
            current_time (float): The current clock value
            aggressive (bool): Also evict the oldest open windows while over the cap
        """
        expired = [key for key, window in self._windows.items() if window.reset_time <= current_time]
        for key in expired:
            del self._windows[key]

        if aggressive and len(self._windows) > MAX_KEYS_TRACKED:
            # Oldest windows first
            by_reset = sorted(self._windows.items(), key=lambda item: item[1].reset_time)
            to_remove = by_reset[:len(self._windows) - MAX_KEYS_TRACKED // 2]
            for key, _ in to_remove:
                del self._windows[key]
            logger.warning(f"Aggressive cleanup removed {len(to_remove)} open windows")

        if expired:
            cleanup_type = "aggressive" if aggressive else "normal"
            logger.info(f"Rate limiter {cleanup_type} cleanup: removed {len(expired)} expired windows, tracking {len(self._windows)} conversations")


def format_rate_limit_message(seconds_to_wait: float) -> str:
    """User-facing sentence for a rejected request, rounded up to whole seconds."""
    seconds = max(1, math.ceil(seconds_to_wait))
    return config.ERROR_MESSAGES['rate_limit_exceeded'].format(
        seconds=seconds,
        plural='s' if seconds > 1 else '',
    )
