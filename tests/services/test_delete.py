"""Tests for DeleteChamberCommand — delete, then invalidate parent and subtree."""

from __future__ import annotations

from typing import Any

import anyio
import pytest

from realmctl.domain.errors import InvalidOperation, NotFound, TransportFailure
from realmctl.infrastructure.session import RealmSession
from realmctl.services.delete import DeleteChamberCommand, DeletionResult
from realmctl.services.queries import DetailQuery, DirectoryQuery, detail_key, list_key


async def _warm(session: RealmSession, *paths: tuple[str, ...]) -> None:
    for path in paths:
        await DirectoryQuery(session).load(path)
        await DetailQuery(session).load(path)


class TestDeleteChamber:
    def test_deletes_encoded_path(self, session: RealmSession, realm: Any) -> None:
        async def scenario() -> DeletionResult:
            async with session:
                return await DeleteChamberCommand(session).execute(("team", "web"))

        deleted = anyio.run(scenario)
        assert ("DELETE", "/v1/chambers/team/web", "") in realm.requests
        assert deleted.to_dict() == {
            "name": "web",
            "parent": "/team",
            "path": "/team/web",
            "status_code": 200,
        }
        assert ("team", "web") not in realm.chambers
        assert ("team", "web", "beta") not in realm.chambers

    def test_slash_in_name_is_one_segment(self, session: RealmSession, realm: Any) -> None:
        async def scenario() -> DeletionResult:
            async with session:
                return await DeleteChamberCommand(session).execute(("a/b",))

        assert anyio.run(scenario).encoded_path == "/a%2Fb"
        assert ("a", "b") in realm.chambers

    def test_root_is_rejected_before_any_request(
        self, session: RealmSession, realm: Any
    ) -> None:
        with pytest.raises(InvalidOperation, match="cannot be deleted"):
            DeleteChamberCommand(session).execute(())
        assert realm.requests == []

    def test_missing_chamber(self, session: RealmSession) -> None:
        async def scenario() -> None:
            async with session:
                with pytest.raises(NotFound):
                    await DeleteChamberCommand(session).execute(("ghost",))

        anyio.run(scenario)


class TestInvalidation:
    def test_success_marks_parent_and_subtree_stale(self, session: RealmSession) -> None:
        async def scenario() -> None:
            async with session:
                await _warm(session, ("team",), ("team", "web"), ("team", "web", "beta"))
                await DeleteChamberCommand(session).execute(("team", "web"))

        anyio.run(scenario)
        for path in (("team",), ("team", "web"), ("team", "web", "beta")):
            assert session.cache.is_stale(list_key(path))
            assert session.cache.is_stale(detail_key(path))

    def test_failure_marks_parent_stale(self, session: RealmSession, realm: Any) -> None:
        realm.failures["delete"] = 500

        async def scenario() -> None:
            async with session:
                await _warm(session, ("a",))
                with pytest.raises(TransportFailure, match="delete rejected"):
                    await DeleteChamberCommand(session).execute(("a", "b"))

        anyio.run(scenario)
        assert session.cache.is_stale(list_key(("a",)))
        assert session.cache.is_stale(detail_key(("a",)))

    def test_name_prefix_siblings_untouched(self, session: RealmSession, realm: Any) -> None:
        realm.chambers[("a", "bc")] = {}

        async def scenario() -> None:
            async with session:
                await _warm(session, ("a", "bc"))
                await DeleteChamberCommand(session).execute(("a", "b"))

        anyio.run(scenario)
        assert not session.cache.is_stale(list_key(("a", "bc")))
        assert not session.cache.is_stale(detail_key(("a", "bc")))
