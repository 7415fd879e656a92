"""
Short-TTL in-memory response cache shared by all platform fetchers.

Entries expire on read only; a stale entry stays until the same key is
written again. Growth is unbounded across distinct queries.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from models.schemas import Mention, Platform


@dataclass(frozen=True)
class CacheEntry:
    mentions: List[Mention]
    stored_at: float
    is_real_data: bool
    platform: Platform


def make_cache_key(platform: Platform, query: str) -> str:
    return f"{platform.value}_{query.lower().strip()}"


class ResponseCache:
    def __init__(self, ttl_seconds: float = 15 * 60, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, platform: Platform, query: str) -> Optional[CacheEntry]:
        with self._lock:
            entry = self._entries.get(make_cache_key(platform, query))
        if entry is None or entry.platform != platform:
            return None
        if self._clock() - entry.stored_at >= self.ttl_seconds:
            return None
        return entry

    def put(
        self,
        platform: Platform,
        query: str,
        mentions: List[Mention],
        is_real_data: bool,
    ) -> CacheEntry:
        entry = CacheEntry(
            mentions=list(mentions),
            stored_at=self._clock(),
            is_real_data=is_real_data,
            platform=platform,
        )
        with self._lock:
            self._entries[make_cache_key(platform, query)] = entry
        return entry

    def __len__(self) -> int:
        return len(self._entries)
