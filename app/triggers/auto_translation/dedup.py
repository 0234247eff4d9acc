# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/14 00:45
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : 消息去重缓存，防止重复翻译与机器人回环
"""
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict

from models import CacheStats

DEFAULT_TTL_SECONDS = 10 * 60


@dataclass
class DedupEntry:
    first_seen_at: float
    processed: bool = False


class DeduplicationCache:
    """
    以 `{conversation_id}:{message_id}` 为键的限时缓存。

    每次读取前惰性清理过期条目，`is_processed` 永远不会对过期条目返回 True。
    内部加锁，可在多个处理单元间共享。
    """

    def __init__(
        self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, DedupEntry] = {}
        self._lock = threading.Lock()

    def _evict_expired(self, now: float) -> None:
        expired = [
            key
            for key, entry in self._entries.items()
            if now - entry.first_seen_at >= self.ttl_seconds
        ]
        for key in expired:
            del self._entries[key]

    def is_processed(self, key: str) -> bool:
        with self._lock:
            self._evict_expired(self._clock())
            entry = self._entries.get(key)
            return bool(entry and entry.processed)

    def mark_processed(self, key: str) -> None:
        with self._lock:
            self._entries[key] = DedupEntry(first_seen_at=self._clock(), processed=True)

    def stats(self) -> CacheStats:
        with self._lock:
            now = self._clock()
            self._evict_expired(now)
            if not self._entries:
                return CacheStats(size=0)
            oldest = min(entry.first_seen_at for entry in self._entries.values())
            return CacheStats(size=len(self._entries), oldest_entry_age=now - oldest)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            self._evict_expired(self._clock())
            return len(self._entries)
