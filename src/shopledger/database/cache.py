"""Read cache keyed by query tag.

Entries are never patched. A mutation invalidates every tag it affects and
the next read goes back to the store.
"""

import logging
from typing import Any, Callable, Hashable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

QueryTag = tuple[Hashable, ...]

# Tags grouped by the data they cover. Invalidation is by prefix, so
# ("expenses",) also drops ("expenses", "filtered", ...).
EXPENSES: QueryTag = ("expenses",)
EXPENSE_TEMPLATES: QueryTag = ("expense-templates",)
SALES: QueryTag = ("sales",)
SETTLEMENTS: QueryTag = ("consignment-settlements",)
PRODUCTS: QueryTag = ("products",)
SUPPLIERS: QueryTag = ("suppliers",)
REPORTS: QueryTag = ("reports",)
DASHBOARD: QueryTag = ("dashboard-stats",)


class QueryCache:
    """Memoises query results per tag until the tag is invalidated."""

    def __init__(self):
        self._entries: dict[QueryTag, Any] = {}

    def read(self, tag: QueryTag, loader: Callable[[], T]) -> T:
        """Return the cached result for a tag, loading it on a miss."""
        if tag in self._entries:
            logger.debug("Cache hit %s", tag)
            return self._entries[tag]
        logger.debug("Cache miss %s", tag)
        value = loader()
        self._entries[tag] = value
        return value

    def invalidate(self, *tags: QueryTag) -> None:
        """Drop every entry whose tag starts with one of the given tags."""
        for tag in tags:
            stale = [key for key in self._entries if key[: len(tag)] == tag]
            for key in stale:
                del self._entries[key]
            logger.debug("Invalidated %s (%d entries)", tag, len(stale))

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, tag: QueryTag) -> bool:
        return tag in self._entries

    def __len__(self) -> int:
        return len(self._entries)
