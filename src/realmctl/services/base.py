"""BaseService — foundation for all realmctl services.

Every service receives a :class:`RealmSession` at construction time. The
session owns the chamber client and the shared remote cache; services never
build their own.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from realmctl.infrastructure.cache import RemoteCache
    from realmctl.infrastructure.client import ChamberClient
    from realmctl.infrastructure.session import RealmSession


class BaseService:
    """Base for service-layer classes.

    Usage::

        class BrowseService(BaseService):
            async def view(self, path) -> ServiceResult:
                listing = await DirectoryQuery(self._session).load(path)
                ...
    """

    def __init__(self, session: RealmSession) -> None:
        self._session = session

    @property
    def client(self) -> ChamberClient:
        return self._session.client

    @property
    def cache(self) -> RemoteCache:
        return self._session.cache
