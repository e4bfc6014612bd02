import logging
import math
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from utils.clock import utcnow

logger = logging.getLogger(__name__)

SWEEP_INTERVAL = timedelta(minutes=5)


def client_ip(request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()
    return request.remote_addr or "unknown"


@dataclass
class RateLimitEntry:
    count: int
    reset_at: datetime


@dataclass(frozen=True)
class RateLimitStatus:
    allowed: bool
    retry_after_seconds: Optional[int] = None


class RateLimiter:
    """
    Fixed-window counter of failed attempts per client IP.

    Lives in process memory only: a restart forgets every entry and
    separate processes do not share counts.
    """

    def __init__(
        self,
        max_attempts: int = 5,
        window: timedelta = timedelta(minutes=15),
        clock: Callable[[], datetime] = utcnow,
    ):
        self.max_attempts = max_attempts
        self.window = window
        self._clock = clock
        self._entries: Dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def check(self, ip: str) -> RateLimitStatus:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(ip)
            if entry is None:
                return RateLimitStatus(allowed=True)

            if now > entry.reset_at:
                del self._entries[ip]
                return RateLimitStatus(allowed=True)

            if entry.count >= self.max_attempts:
                retry_after = math.ceil((entry.reset_at - now).total_seconds())
                return RateLimitStatus(allowed=False, retry_after_seconds=max(retry_after, 1))

        return RateLimitStatus(allowed=True)

    def record_failure(self, ip: str) -> int:
        """
        Returns the failure count for the current window.
        """
        now = self._clock()
        with self._lock:
            self._maybe_sweep(now)
            entry = self._entries.get(ip)
            if entry is None or now > entry.reset_at:
                entry = RateLimitEntry(count=1, reset_at=now + self.window)
                self._entries[ip] = entry
            else:
                # window is not extended
                entry.count += 1

            if entry.count == self.max_attempts:
                logger.warning(
                    "IP %s reached %d failed attempts, blocked until %s",
                    ip, entry.count, entry.reset_at.isoformat(),
                )
            return entry.count

    def clear(self, ip: str) -> None:
        with self._lock:
            self._entries.pop(ip, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _maybe_sweep(self, now: datetime) -> None:
        """Drop expired entries of IPs that never came back (called under lock)."""
        if now - self._last_sweep < SWEEP_INTERVAL:
            return
        self._last_sweep = now
        expired = [ip for ip, entry in self._entries.items() if now > entry.reset_at]
        for ip in expired:
            del self._entries[ip]
