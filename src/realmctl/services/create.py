"""CreateChamberCommand — create a child chamber and invalidate its parent.

Pipeline: VALIDATE → WRITE → INVALIDATE → RESPOND

INVARIANT: once the write settles, success or failure, the parent's listing
and detail entries are stale before control returns to the caller. A failed
request may still have changed server state, so invalidation never depends
on the outcome.
"""

from __future__ import annotations

from collections.abc import Awaitable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from realmctl.domain.paths import NavigationPath, child_of, encode
from realmctl.services.queries import detail_key, list_key

if TYPE_CHECKING:
    from realmctl.infrastructure.session import RealmSession

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CreationResult:
    """Outcome of a successful creation write."""

    parent: NavigationPath
    path: NavigationPath
    encoded_path: str
    status_code: int

    @property
    def name(self) -> str:
        return self.path[-1]

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "parent": encode(self.parent),
            "path": self.encoded_path,
            "status_code": self.status_code,
        }


class CreateChamberCommand:
    """Creates chambers with an empty rule set. Never retries."""

    def __init__(self, session: RealmSession) -> None:
        self._session = session

    def execute(self, parent_path: Sequence[str], new_name: str) -> Awaitable[CreationResult]:
        """Validate eagerly, then return the awaitable that performs the write.

        Raises:
            ValidationError: *new_name* is empty, ``"."`` or ``".."``. Raised
                here, before any request is issued.
        """
        parent: NavigationPath = tuple(parent_path)
        child = child_of(parent, new_name)
        encoded = encode(child)
        return self._run(parent, child, encoded)

    async def _run(
        self, parent: NavigationPath, child: NavigationPath, encoded: str
    ) -> CreationResult:
        log.debug("chamber.create.start", path=encoded)
        ok = False
        try:
            status_code = await self._session.client.create_chamber(child)
            ok = True
        finally:
            self._invalidate_parent(parent)
            log.debug("chamber.create.settled", path=encoded, ok=ok)
        return CreationResult(
            parent=parent, path=child, encoded_path=encoded, status_code=status_code
        )

    def _invalidate_parent(self, parent: NavigationPath) -> None:
        cache = self._session.cache
        cache.invalidate(list_key(parent))
        cache.invalidate(detail_key(parent))
