"""DeleteChamberCommand — remove a chamber and invalidate what showed it.

Pipeline: VALIDATE → DELETE → INVALIDATE → RESPOND

The parent's listing and detail entries go stale once the request settles,
whatever its outcome, together with every entry under the deleted chamber.
"""

from __future__ import annotations

from collections.abc import Awaitable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from realmctl.domain.errors import InvalidOperation
from realmctl.domain.paths import SEPARATOR, NavigationPath, encode
from realmctl.services.queries import detail_key, list_key

if TYPE_CHECKING:
    from realmctl.infrastructure.session import RealmSession

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class DeletionResult:
    parent: NavigationPath
    path: NavigationPath
    encoded_path: str
    status_code: int

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.path[-1],
            "parent": encode(self.parent),
            "path": self.encoded_path,
            "status_code": self.status_code,
        }


class DeleteChamberCommand:
    """Deletes one chamber. Never retries."""

    def __init__(self, session: RealmSession) -> None:
        self._session = session

    def execute(self, path: Sequence[str]) -> Awaitable[DeletionResult]:
        """Validate eagerly, then return the awaitable that performs the delete.

        Raises:
            InvalidOperation: *path* is the root, which cannot be deleted.
        """
        target: NavigationPath = tuple(path)
        if not target:
            msg = "The root chamber cannot be deleted"
            raise InvalidOperation(msg)
        return self._run(target[:-1], target, encode(target))

    async def _run(
        self, parent: NavigationPath, target: NavigationPath, encoded: str
    ) -> DeletionResult:
        log.debug("chamber.delete.start", path=encoded)
        ok = False
        try:
            status_code = await self._session.client.delete_chamber(target)
            ok = True
        finally:
            stale = self._invalidate(parent, target, encoded)
            log.debug("chamber.delete.settled", path=encoded, ok=ok, stale=stale)
        return DeletionResult(
            parent=parent, path=target, encoded_path=encoded, status_code=status_code
        )

    def _invalidate(self, parent: NavigationPath, target: NavigationPath, encoded: str) -> int:
        cache = self._session.cache
        stale = 0
        for key in (list_key(parent), detail_key(parent), list_key(target), detail_key(target)):
            stale += cache.invalidate(key)
        return stale + cache.invalidate_prefix(encoded + SEPARATOR)
