"""
Per-platform fixed-window rate limiter.

Admission is a coarse local hint in front of the platform's own quota:
`check()` decides, `consume()` counts an outbound request, and an upstream
HTTP 429 arms an override through `arm_retry_after()`.
"""

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from config.settings import Settings, settings as default_settings
from models.schemas import Platform


@dataclass
class RateLimitState:
    request_count: int = 0
    window_start: float = 0.0
    retry_after_until: Optional[float] = None


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    retry_after_seconds: Optional[int] = None


class RateLimiter:
    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.time,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self.state = RateLimitState(window_start=clock())

    def check(self) -> RateLimitDecision:
        """Decide whether one more outbound request may be issued now."""
        with self._lock:
            now = self._clock()
            state = self.state

            if now - state.window_start > self.window_seconds:
                state.request_count = 0
                state.window_start = now
                state.retry_after_until = None

            if state.retry_after_until is not None and now < state.retry_after_until:
                return RateLimitDecision(
                    allowed=False,
                    retry_after_seconds=math.ceil(state.retry_after_until - now),
                )

            if state.request_count >= self.max_requests:
                until_reset = self.window_seconds - (now - state.window_start)
                return RateLimitDecision(
                    allowed=False,
                    retry_after_seconds=max(1, math.ceil(until_reset)),
                )

            return RateLimitDecision(allowed=True)

    def consume(self) -> None:
        with self._lock:
            self.state.request_count += 1

    def arm_retry_after(self, seconds: float) -> None:
        """Deny every request for the next `seconds` (upstream said 429)."""
        with self._lock:
            self.state.retry_after_until = self._clock() + seconds


def build_rate_limiters(
    cfg: Settings = default_settings,
    clock: Callable[[], float] = time.time,
) -> Dict[Platform, RateLimiter]:
    return {
        Platform.TWITTER: RateLimiter(
            cfg.TWITTER_RATE_LIMIT_MAX, cfg.TWITTER_RATE_LIMIT_WINDOW, clock
        ),
        Platform.REDDIT: RateLimiter(
            cfg.REDDIT_RATE_LIMIT_MAX, cfg.REDDIT_RATE_LIMIT_WINDOW, clock
        ),
    }
