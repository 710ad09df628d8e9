"""RemoteCache — key-addressed memo of asynchronous read results.

Entry lifecycle: created on the first resolve for a key, overwritten by
every refetch, marked stale by :meth:`RemoteCache.invalidate`, never deleted
(entries live as long as the cache).

INVARIANT: at most one loader is in flight per key. A resolve issued while a
load is pending awaits the same task instead of starting another request.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, TypeVar

import structlog

log = structlog.get_logger(__name__)

V = TypeVar("V")


class CacheState(StrEnum):
    """Load state of a cache entry."""

    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


@dataclass
class CacheEntry:
    """One cached read result. Only :class:`RemoteCache` mutates these."""

    key: str
    state: CacheState
    value: Any = None
    error: BaseException | None = None
    stale: bool = False
    fetched_at: datetime | None = None


class RemoteCache:
    """In-memory, process-lifetime store for remote read results.

    Usage::

        cache = RemoteCache()
        listing = await cache.resolve("/a?list", lambda: client.list_chambers(("a",)))
        cache.invalidate("/a?list")  # next resolve reloads
    """

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._inflight: dict[str, asyncio.Task[Any]] = {}

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def get(self, key: str) -> CacheEntry | None:
        """Return a snapshot of the entry for *key*, or None if never requested."""
        entry = self._entries.get(key)
        return replace(entry) if entry is not None else None

    def is_stale(self, key: str) -> bool:
        """True iff an entry exists for *key* and has been invalidated."""
        entry = self._entries.get(key)
        return entry is not None and entry.stale

    def is_pending(self, key: str) -> bool:
        return key in self._inflight

    def keys(self) -> list[str]:
        return list(self._entries)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def put(self, key: str, value: Any) -> None:
        """Store *value* as a fresh, ready entry."""
        entry = self._entries.get(key)
        if entry is None:
            entry = CacheEntry(key=key, state=CacheState.READY)
            self._entries[key] = entry
        entry.state = CacheState.READY
        entry.value = value
        entry.error = None
        entry.stale = False
        entry.fetched_at = datetime.now(UTC)

    def invalidate(self, key: str) -> bool:
        """Mark *key* stale so the next resolve reloads. No-op for unknown keys."""
        entry = self._entries.get(key)
        if entry is None:
            return False
        entry.stale = True
        log.debug("cache.invalidate", key=key, state=str(entry.state))
        return True

    def invalidate_prefix(self, prefix: str) -> int:
        """Invalidate every key starting with *prefix*; return how many."""
        return sum(self.invalidate(key) for key in list(self._entries) if key.startswith(prefix))

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    async def resolve(self, key: str, loader: Callable[[], Awaitable[V]]) -> V:
        """Return the cached value for *key*, loading it when needed.

        A ready, non-stale entry is returned as-is. Otherwise the entry moves
        to PENDING and *loader* runs once; concurrent callers share that load.
        Failures leave a FAILED entry and propagate to every waiting caller.

        A load that was invalidated while in flight is not joined: the caller
        waits for it to settle and then starts a fresh one.
        """
        while True:
            task = self._inflight.get(key)
            if task is None:
                entry = self._entries.get(key)
                if entry is not None and entry.state is CacheState.READY and not entry.stale:
                    return entry.value  # type: ignore[no-any-return]
                task = self._start_load(key, loader)
            elif self._entries[key].stale:
                await asyncio.wait([task])
                continue
            # Shielded so a caller navigating away never cancels a shared load.
            return await asyncio.shield(task)  # type: ignore[no-any-return]

    def _start_load(self, key: str, loader: Callable[[], Awaitable[Any]]) -> asyncio.Task[Any]:
        entry = self._entries.get(key)
        if entry is None:
            entry = CacheEntry(key=key, state=CacheState.PENDING)
            self._entries[key] = entry
        entry.state = CacheState.PENDING
        entry.stale = False
        log.debug("cache.load.start", key=key)

        task = asyncio.create_task(self._run_loader(entry, loader))
        self._inflight[key] = task
        return task

    async def _run_loader(self, entry: CacheEntry, loader: Callable[[], Awaitable[Any]]) -> Any:
        try:
            value = await loader()
        except Exception as exc:
            entry.state = CacheState.FAILED
            entry.value = None
            entry.error = exc
            entry.fetched_at = datetime.now(UTC)
            log.debug("cache.load.failed", key=entry.key, error=str(exc))
            raise
        else:
            # An invalidate during the load keeps ``stale`` set.
            entry.state = CacheState.READY
            entry.value = value
            entry.error = None
            entry.fetched_at = datetime.now(UTC)
            log.debug("cache.load.ready", key=entry.key, stale=entry.stale)
            return value
        finally:
            self._inflight.pop(entry.key, None)
