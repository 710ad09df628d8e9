"""DirectoryQuery and DetailQuery — cached reads bound to a navigation path.

Both queries resolve through the session's :class:`RemoteCache` under keys
derived from the same encoded path but in distinct namespaces::

    list_key(("a", "b"))   == "/a/b?list"
    detail_key(("a", "b")) == "/a/b#detail"

A NotFound from the server is not an error here: it reads as "no children"
or "no rules yet". Transport failures propagate and leave a FAILED entry.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

import structlog

from realmctl.domain.chambers import ChamberListing, RuleSet
from realmctl.domain.errors import NotFound
from realmctl.domain.paths import NavigationPath, encode
from realmctl.infrastructure.cache import CacheState

if TYPE_CHECKING:
    from realmctl.infrastructure.cache import CacheEntry, RemoteCache
    from realmctl.infrastructure.session import RealmSession

log = structlog.get_logger(__name__)

LIST_SUFFIX = "?list"
DETAIL_SUFFIX = "#detail"

T = TypeVar("T")


def list_key(path: Sequence[str]) -> str:
    """Cache key of the child listing for *path*."""
    return encode(path) + LIST_SUFFIX


def detail_key(path: Sequence[str]) -> str:
    """Cache key of the rule set for *path*."""
    return encode(path) + DETAIL_SUFFIX


class _ChamberQuery(Generic[T]):
    """Binding of ``RemoteCache.resolve`` to one key namespace."""

    kind = ""

    def __init__(self, session: RealmSession) -> None:
        self._session = session

    def key(self, path: Sequence[str]) -> str:
        raise NotImplementedError

    async def load(self, path: Sequence[str]) -> T:
        """Resolve the value for *path*, fetching only when missing or stale."""
        target: NavigationPath = tuple(path)
        return await self._session.cache.resolve(self.key(target), lambda: self._fetch(target))

    def peek(self, path: Sequence[str]) -> CacheEntry | None:
        """Current cache entry for *path* without triggering a load."""
        return self._session.cache.get(self.key(path))

    async def _fetch(self, path: NavigationPath) -> T:
        try:
            return await self._request(path)
        except NotFound:
            log.debug("query.not_found", kind=self.kind, path=encode(path))
            return self._empty()

    async def _request(self, path: NavigationPath) -> T:
        raise NotImplementedError

    def _empty(self) -> T:
        raise NotImplementedError


class DirectoryQuery(_ChamberQuery[ChamberListing]):
    """Child names of a chamber."""

    kind = "listing"

    def key(self, path: Sequence[str]) -> str:
        return list_key(path)

    async def _request(self, path: NavigationPath) -> ChamberListing:
        return await self._session.client.list_chambers(path)

    def _empty(self) -> ChamberListing:
        return ChamberListing()


class DetailQuery(_ChamberQuery[RuleSet]):
    """Rule set of a chamber; empty when the chamber has no rules yet."""

    kind = "detail"

    def key(self, path: Sequence[str]) -> str:
        return detail_key(path)

    async def _request(self, path: NavigationPath) -> RuleSet:
        return await self._session.client.get_chamber(path)

    def _empty(self) -> RuleSet:
        return {}


@dataclass(frozen=True)
class QueryState:
    """Load state of both queries for one path, read without side effects."""

    listing: CacheState | None
    detail: CacheState | None
    listing_error: str | None = None
    detail_error: str | None = None

    @classmethod
    def of(cls, cache: RemoteCache, path: Sequence[str]) -> QueryState:
        listing = cache.get(list_key(path))
        detail = cache.get(detail_key(path))
        return cls(
            listing=listing.state if listing else None,
            detail=detail.state if detail else None,
            listing_error=str(listing.error) if listing and listing.error else None,
            detail_error=str(detail.error) if detail and detail.error else None,
        )

    @property
    def loading(self) -> bool:
        """True while either query is in flight."""
        return CacheState.PENDING in (self.listing, self.detail)

    @property
    def failed(self) -> bool:
        return CacheState.FAILED in (self.listing, self.detail)
