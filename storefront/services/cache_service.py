"""In-process content cache with per-entry TTL."""

import time
from typing import Any, Callable, Dict, Iterable, Mapping

from storefront.config.loader import get_settings, get_cache_ttl_minutes
from storefront.util.logger import get_logger

logger = get_logger(__name__)

MILLIS_PER_MINUTE = 60_000


class CacheService:
    """Map of key -> {value, expiry}.

    ``expiry`` is an epoch timestamp in milliseconds, or None for entries that
    never expire (ttl of 0). There is no size bound; expired entries are
    dropped when they are read.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._store: Dict[str, Dict[str, Any]] = {}
        self._clock = clock

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def set(self, key: str, value: Any, ttl_minutes: float = 5) -> Any:
        expiry = None if ttl_minutes == 0 else self._now_ms() + ttl_minutes * MILLIS_PER_MINUTE
        self._store[key] = {"value": value, "expiry": expiry}
        return value

    def get(self, key: str) -> Any:
        entry = self._store.get(key)
        if entry is None:
            return None

        if entry["expiry"] is not None and self._now_ms() > entry["expiry"]:
            del self._store[key]
            return None

        return entry["value"]

    def get_or_fetch(self, key: str, fetch: Callable[[], Any], ttl_minutes: float = 5) -> Any:
        """Cached value, or the result of ``fetch()``.

        Envelopes with ok=False are returned but not cached. Exceptions raised
        by ``fetch`` propagate to the caller.
        """
        cached = self.get(key)
        if cached is not None:
            return cached

        result = fetch()

        if isinstance(result, Mapping) and result.get("ok") is False:
            logger.info(f"Not caching failed result for {key}")
            return result

        return self.set(key, result, ttl_minutes)

    def remove(self, key: str) -> bool:
        return self._store.pop(key, None) is not None

    def clear(self):
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)


def ttl_for(name: str) -> float:
    """Configured TTL in minutes: shop_page, site_config, published_page, stock_validation."""
    return get_cache_ttl_minutes(get_settings(), name)


def cart_stock_key(items: Iterable[Mapping[str, Any]]) -> str:
    """Cache key for a cart: product ids and quantities sorted by id."""
    parts = sorted(f"{item.get('id')}:{item.get('quantity', 0)}" for item in items)
    return "cart_stock_" + "|".join(parts)


def page_content_key(page_id: str, version: str) -> str:
    return f"page_content_{version}_{page_id}"


content_cache = CacheService()
