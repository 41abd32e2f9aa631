# storefront/services/content_cache.py
"""
In-memory кэш ответов WPGraphQL с TTL и тегами.

Каждая запись помечается тегами (например, "posts", "post-hello-world");
вебхук ревалидации сбрасывает записи по тегам.
"""
import hashlib
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Set

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    value: Any
    expires_at: Optional[float] = None
    tags: Set[str] = field(default_factory=set)

    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and time.monotonic() > self.expires_at


class ContentCache:
    def __init__(self, default_ttl: Optional[float] = 60, max_size: int = 1000):
        self.default_ttl = default_ttl
        self.max_size = max_size
        self._entries: Dict[str, CacheEntry] = {}

    @staticmethod
    def make_key(query: str, variables: Optional[Dict[str, Any]] = None) -> str:
        raw = json.dumps({"query": query, "variables": variables or {}}, sort_keys=True, default=str)
        return hashlib.sha256(raw.encode('utf-8')).hexdigest()

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired:
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None, tags: Iterable[str] = ()) -> None:
        """ttl=0 означает "не кэшировать"."""
        effective_ttl = self.default_ttl if ttl is None else ttl
        if effective_ttl is not None and effective_ttl <= 0:
            return
        if len(self._entries) >= self.max_size and key not in self._entries:
            self._evict_oldest()
        expires_at = time.monotonic() + effective_ttl if effective_ttl is not None else None
        self._entries[key] = CacheEntry(value=value, expires_at=expires_at, tags=set(tags))

    def _evict_oldest(self) -> None:
        # dict хранит порядок вставки
        oldest_key = next(iter(self._entries))
        del self._entries[oldest_key]

    def invalidate_tags(self, tags: Iterable[str]) -> int:
        """Удаляет все записи, помеченные хотя бы одним из тегов. Возвращает число удаленных."""
        tags = set(tags)
        if not tags:
            return 0
        stale = [key for key, entry in self._entries.items() if entry.tags & tags]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.info(f"Cache invalidated {len(stale)} entries for tags {sorted(tags)}")
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
