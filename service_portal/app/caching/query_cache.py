"""
Read-through query cache with in-flight request deduplication.
"""

import asyncio
import functools
import inspect
import re
import time
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Tuple, TYPE_CHECKING

from shared.logging import get_logger, set_query_context
from .keys import generate_cache_key
from .ttl_store import CacheStats, DEFAULT_TTL_SECONDS, TTLStore

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


Loader = Callable[[], Awaitable[Any]]


def _retrieve_exception(task: "asyncio.Task[Any]") -> None:
    # Waiters that were all cancelled never read the outcome.
    if not task.cancelled():
        task.exception()


class _PendingRead:
    """An underlying read that has started but not settled."""

    __slots__ = ("key", "query", "task", "stale")

    def __init__(self, key: str, query: str):
        self.key = key
        self.query = query
        self.task: Optional["asyncio.Task[Any]"] = None
        # Set when the key is invalidated mid-flight; the result still
        # reaches waiters but is not stored.
        self.stale = False


class QueryCache:
    """Process-local cache that sits between callers and the data store.

    One instance is built per service and handed to every repository. For a
    given key at most one underlying read is in flight: the cache check and
    the registration of the pending read happen in the same synchronous step,
    so concurrent callers on the event loop either hit the store or attach
    to the read that is already running.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
        metrics: Optional["MetricsCollector"] = None,
        store: Optional[TTLStore] = None,
    ):
        self.store = store if store is not None else TTLStore(default_ttl, clock)
        self.metrics = metrics
        self.logger = get_logger("portal.cache")
        self._pending: Dict[str, _PendingRead] = {}

    # -- store operations -------------------------------------------------

    def get(self, key: str) -> Any:
        return self.store.get(key)

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        self.store.set(key, value, ttl)

    def invalidate(self, key: str) -> bool:
        """Drop one key. A read for it that is still in flight will not be stored."""
        pending = self._pending.get(key)
        if pending is not None:
            pending.stale = True

        removed = self.store.invalidate(key)
        if removed:
            self._record_invalidations("key", 1)
            self.logger.info("Invalidated cache key", key=key)
        return removed

    def invalidate_pattern(self, pattern: str) -> int:
        """Drop every key matching ``pattern`` (``re.search`` semantics)."""
        regex = re.compile(pattern)
        for key, pending in self._pending.items():
            if regex.search(key):
                pending.stale = True

        removed = self.store.invalidate_pattern(regex)
        if removed:
            self._record_invalidations("pattern", removed)
            self.logger.info("Invalidated cache pattern", pattern=pattern, keys_count=removed)
        return removed

    def clear(self) -> int:
        for pending in self._pending.values():
            pending.stale = True

        removed = self.store.clear()
        self._record_invalidations("clear", removed)
        self.logger.info("Cache cleared", keys_count=removed)
        return removed

    def stats(self) -> CacheStats:
        stats = self.store.stats()
        if self.metrics:
            self.metrics.set_gauge("cache_entries", stats.valid, state="valid")
            self.metrics.set_gauge("cache_entries", stats.expired, state="expired")
        return stats

    @property
    def pending_reads(self) -> int:
        return len(self._pending)

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    # -- read-through -----------------------------------------------------

    async def fetch(
        self,
        key: str,
        loader: Loader,
        *,
        ttl: Optional[float] = None,
        invalidate_on: Iterable[str] = (),
        query: Optional[str] = None,
    ) -> Any:
        """Return the cached value for ``key`` or load it once.

        Concurrent callers for the same key share one call to ``loader`` and
        all receive its result or its exception. Failures are never cached.
        Cancelling a caller does not cancel the shared read.
        """
        query = query or key.split(":", 1)[0]

        found, value = self.store.lookup(key)
        if found:
            self._count("cache_hits_total", query)
            return value

        # No await between the lookups above and registering the read below.
        pending = self._pending.get(key)
        if pending is None:
            self._count("cache_misses_total", query)
            pending = self._start_read(key, query, loader, ttl, tuple(invalidate_on))
        else:
            self._count("cache_coalesced_total", query)
            self.logger.debug("Attached to in-flight read", key=key)

        return await asyncio.shield(pending.task)

    def _start_read(
        self,
        key: str,
        query: str,
        loader: Loader,
        ttl: Optional[float],
        invalidate_on: Tuple[str, ...],
    ) -> _PendingRead:
        pending = _PendingRead(key, query)
        pending.task = asyncio.ensure_future(self._run_read(pending, loader, ttl, invalidate_on))
        pending.task.add_done_callback(_retrieve_exception)
        self._pending[key] = pending
        return pending

    async def _run_read(
        self,
        pending: _PendingRead,
        loader: Loader,
        ttl: Optional[float],
        invalidate_on: Tuple[str, ...],
    ) -> Any:
        set_query_context(pending.query)
        started = time.perf_counter()
        try:
            result = await loader()
        except Exception as exc:
            self._count("cache_read_failures_total", pending.query)
            self.logger.warning("Cached read failed", key=pending.key, error=str(exc))
            raise
        finally:
            self._pending.pop(pending.key, None)
            if self.metrics:
                self.metrics.observe_histogram(
                    "cache_read_duration_seconds",
                    time.perf_counter() - started,
                    query=pending.query,
                )

        if pending.stale:
            self.logger.debug("Dropped result invalidated while in flight", key=pending.key)
        else:
            self.store.set(pending.key, result, ttl)
            self.logger.debug("Cached read result", key=pending.key, ttl=self.store.resolve_ttl(ttl))

        for pattern in invalidate_on:
            self.invalidate_pattern(pattern)

        return result

    def cached(
        self,
        fn: Optional[Callable[..., Awaitable[Any]]] = None,
        *,
        ttl: Optional[float] = None,
        key_generator: Optional[Callable[..., str]] = None,
        invalidate_on: Optional[Iterable[str]] = None,
        name: Optional[str] = None,
    ):
        """Wrap an async read so calls go through :meth:`fetch`.

        Usable bare (``@cache.cached``) or with options. The default key is
        ``generate_cache_key(name or fn.__name__, <bound call arguments>)``
        with defaults applied, so positional and keyword spellings of the
        same call share one entry. The wrapper exposes ``cache_key(*args,
        **kwargs)`` for write paths that need to invalidate a specific call.
        """
        patterns = tuple(invalidate_on or ())

        def decorator(func: Callable[..., Awaitable[Any]]):
            if not inspect.iscoroutinefunction(func):
                raise TypeError(f"cached() expects an async function, got {func!r}")

            query = name or func.__name__
            signature = inspect.signature(func)

            def cache_key(*args, **kwargs) -> str:
                if key_generator is not None:
                    return key_generator(*args, **kwargs)
                bound = signature.bind(*args, **kwargs)
                bound.apply_defaults()
                return generate_cache_key(query, bound.arguments)

            @functools.wraps(func)
            async def wrapper(*args, **kwargs):
                key = cache_key(*args, **kwargs)
                return await self.fetch(
                    key,
                    lambda: func(*args, **kwargs),
                    ttl=ttl,
                    invalidate_on=patterns,
                    query=query,
                )

            wrapper.cache_key = cache_key
            wrapper.query_name = query
            return wrapper

        if fn is not None:
            return decorator(fn)
        return decorator

    # -- metrics ----------------------------------------------------------

    def _count(self, metric_name: str, query: str) -> None:
        if self.metrics:
            self.metrics.increment_counter(metric_name, query=query)

    def _record_invalidations(self, kind: str, count: int) -> None:
        if self.metrics and count:
            self.metrics.increment_counter("cache_invalidations_total", count, kind=kind)
