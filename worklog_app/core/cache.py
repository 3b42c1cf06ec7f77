"""Run-scoped memoization store shared by the resolvers and the worklog fetcher."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Hashable
from typing import Any

logger = logging.getLogger(__name__)


class CacheStore:
    """Category-partitioned key/value table with hit and miss counters.

    Entries are write-once: the first ``put`` for a key wins and is never
    replaced or evicted. One instance lives for one report run and is passed
    to every component that needs it.
    """

    def __init__(self):
        self._data: dict[str, dict[Hashable, Any]] = {}
        self._hits: Counter[str] = Counter()
        self._misses: Counter[str] = Counter()

    def get(self, category: str, key: Hashable) -> Any | None:
        bucket = self._data.get(category)
        if bucket is not None and key in bucket:
            self._hits[category] += 1
            logger.debug("Cache hit %s[%s]", category, key)
            return bucket[key]
        self._misses[category] += 1
        return None

    def put(self, category: str, key: Hashable, value: Any) -> bool:
        """Store ``value`` unless ``key`` is already populated. Returns True if stored."""
        bucket = self._data.setdefault(category, {})
        if key in bucket:
            logger.debug("Cache %s[%s] already populated; keeping first value", category, key)
            return False
        bucket[key] = value
        return True

    def contains(self, category: str, key: Hashable) -> bool:
        """Membership check that does not touch the counters."""
        return key in self._data.get(category, {})

    def hits(self, category: str) -> int:
        return self._hits[category]

    def misses(self, category: str) -> int:
        return self._misses[category]

    def size(self, category: str) -> int:
        return len(self._data.get(category, {}))

    def stats(self) -> dict[str, dict[str, int]]:
        categories = set(self._data) | set(self._hits) | set(self._misses)
        return {
            cat: {"hits": self._hits[cat], "misses": self._misses[cat], "size": self.size(cat)}
            for cat in sorted(categories)
        }
