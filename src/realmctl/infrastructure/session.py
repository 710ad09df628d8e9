"""RealmSession — the single dependency injected into every service.

Owns the :class:`ChamberClient` and the :class:`RemoteCache` for one
process run. The cache lives exactly as long as the session; closing the
session closes the HTTP client.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from realmctl.infrastructure.cache import RemoteCache
from realmctl.infrastructure.client import ChamberClient

if TYPE_CHECKING:
    from realmctl.config.settings import RealmSettings


class RealmSession:
    """Client + cache pair shared by queries, commands, and the browser.

    Usage::

        async with RealmSession.from_settings(settings) as session:
            view = await BrowseService(session).view(("team", "web"))
    """

    def __init__(self, client: ChamberClient, cache: RemoteCache | None = None) -> None:
        self._client = client
        self._cache = cache if cache is not None else RemoteCache()

    @classmethod
    def from_settings(
        cls,
        settings: RealmSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> RealmSession:
        """Build a session from the ``[client]`` settings section."""
        client = ChamberClient(
            settings.client.address,
            timeout=settings.client.timeout,
            api_prefix=settings.client.api_prefix,
            transport=transport,
        )
        return cls(client)

    @property
    def client(self) -> ChamberClient:
        return self._client

    @property
    def cache(self) -> RemoteCache:
        return self._cache

    async def close(self) -> None:
        await self._client.close()

    async def __aenter__(self) -> RealmSession:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
