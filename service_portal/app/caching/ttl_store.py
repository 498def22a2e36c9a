"""
In-process TTL store for query results.
"""

import re
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Optional, Pattern, Tuple, Union

from shared.logging import get_logger


DEFAULT_TTL_SECONDS = 300.0

_MISSING = object()


@dataclass(frozen=True)
class CacheEntry:
    """A cached read result.

    Entries are replaced, never mutated. ``value`` belongs to the cache once
    stored; callers must treat it as read-only.
    """
    value: Any
    stored_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.stored_at > self.ttl


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time snapshot of the store."""
    total: int
    valid: int
    expired: int

    def to_dict(self) -> Dict[str, int]:
        return {"total": self.total, "valid": self.valid, "expired": self.expired}


class TTLStore:
    """Mapping of cache key to entry with lazy expiry.

    Expired entries are removed only when they are read; there is no
    background sweep, so ``stats().expired`` can stay non-zero for keys that
    are never read again.
    """

    def __init__(self, default_ttl: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        self.default_ttl = float(default_ttl)
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self.logger = get_logger("portal.cache.store")

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def resolve_ttl(self, ttl: Optional[float]) -> float:
        """Zero, negative or missing TTLs fall back to the default."""
        if ttl is None or ttl <= 0:
            return self.default_ttl
        return float(ttl)

    def lookup(self, key: str) -> Tuple[bool, Any]:
        """Return ``(found, value)`` so stored ``None`` is not a miss."""
        entry = self._entries.get(key)
        if entry is None:
            return False, None

        if entry.is_expired(self._clock()):
            del self._entries[key]
            self.logger.debug("Evicted expired entry", key=key)
            return False, None

        return True, entry.value

    def get(self, key: str, default: Any = None) -> Any:
        """Get a fresh value, or ``default`` when absent or expired."""
        found, value = self.lookup(key)
        return value if found else default

    def contains(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Insert or overwrite the entry for ``key``. Last writer wins."""
        self._entries[key] = CacheEntry(
            value=value,
            stored_at=self._clock(),
            ttl=self.resolve_ttl(ttl),
        )

    def invalidate(self, key: str) -> bool:
        """Remove a single entry. Returns whether one was present."""
        return self._entries.pop(key, None) is not None

    def invalidate_pattern(self, pattern: Union[str, Pattern[str]]) -> int:
        """Remove every entry whose key matches the regular expression.

        Matching uses ``re.search`` semantics; anchor with ``^`` for prefixes.
        An already compiled pattern is used as is.
        """
        regex = pattern if isinstance(pattern, re.Pattern) else re.compile(pattern)
        matched = [key for key in self._entries if regex.search(key)]
        for key in matched:
            del self._entries[key]
        return len(matched)

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    def stats(self) -> CacheStats:
        now = self._clock()
        expired = sum(1 for entry in self._entries.values() if entry.is_expired(now))
        total = len(self._entries)
        return CacheStats(total=total, valid=total - expired, expired=expired)
