"""Shared pytest fixtures for realmctl tests.

HTTP is faked with :class:`httpx.MockTransport` backed by an in-memory
chamber tree, so no test touches the network.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest
from click.testing import CliRunner

from realmctl.domain.paths import decode
from realmctl.infrastructure.client import ChamberClient
from realmctl.infrastructure.session import RealmSession
from realmctl.services.browse import BrowseService

ADDRESS = "http://realm.test"
CHAMBERS_PREFIX = "/v1/chambers"

DARK_MODE = {
    "type": "bool",
    "value": True,
    "overrides": [
        {
            "type": "bool",
            "value": False,
            "minimumVersion": "1.0.0",
            "maximumVersion": "1.9.9",
        }
    ],
}


class FakeRealm:
    """In-memory chamber service speaking the realm wire format.

    ``chambers`` maps navigation paths to their raw rule maps. Requests are
    recorded as ``(method, raw_path, query)`` tuples. ``failures`` maps an
    operation kind (``"list"``, ``"detail"``, ``"create"``, ``"delete"``) to the HTTP
    status every such request answers with.
    """

    def __init__(self) -> None:
        self.chambers: dict[tuple[str, ...], dict[str, Any] | None] = {
            (): {},
            ("team",): {},
            ("team", "web"): {"dark-mode": DARK_MODE},
            ("team", "web", "beta"): None,
            ("a",): {},
            ("a", "b"): {},
            ("a/b",): {"max-items": {"type": "int", "value": 25}},
        }
        self.requests: list[tuple[str, str, str]] = []
        self.failures: dict[str, int] = {}

    def children(self, path: tuple[str, ...]) -> list[str]:
        depth = len(path)
        return [
            key[-1] for key in self.chambers if len(key) == depth + 1 and key[:depth] == path
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        raw_path, _, query = request.url.raw_path.decode("ascii").partition("?")
        self.requests.append((request.method, raw_path, query))
        if not raw_path.startswith(CHAMBERS_PREFIX):
            return httpx.Response(404)
        path = decode(raw_path[len(CHAMBERS_PREFIX) :])

        if request.method == "POST":
            return self._create(path, json.loads(request.content or b"{}"))
        if request.method == "DELETE":
            return self._delete(path)
        kind = "list" if "list=true" in query else "detail"
        if kind in self.failures:
            return httpx.Response(self.failures[kind], json={"errors": [f"{kind} unavailable"]})
        if path not in self.chambers:
            return httpx.Response(404, json={"errors": ["not found"]})
        if kind == "list":
            return httpx.Response(200, json={"data": [".", *self.children(path)]})
        rules = self.chambers[path]
        return httpx.Response(200, json={"data": {} if rules is None else {"rules": rules}})

    def _create(self, path: tuple[str, ...], body: dict[str, Any]) -> httpx.Response:
        if "create" in self.failures:
            return httpx.Response(self.failures["create"], json={"errors": ["write rejected"]})
        if path[:-1] not in self.chambers:
            return httpx.Response(404, json={"errors": ["parent not found"]})
        if path in self.chambers:
            return httpx.Response(409, json={"errors": ["chamber exists"]})
        self.chambers[path] = body.get("rules", {})
        return httpx.Response(201, json={"data": {"created": True}})

    def _delete(self, path: tuple[str, ...]) -> httpx.Response:
        if "delete" in self.failures:
            return httpx.Response(self.failures["delete"], json={"errors": ["delete rejected"]})
        if path not in self.chambers:
            return httpx.Response(404, json={"errors": ["not found"]})
        for key in [k for k in self.chambers if k[: len(path)] == path]:
            del self.chambers[key]
        return httpx.Response(200, json={"data": None})

    def reads_of(self, raw_path: str) -> list[str]:
        """Query strings of every GET issued for *raw_path*."""
        return [q for method, p, q in self.requests if method == "GET" and p == raw_path]


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def realm() -> FakeRealm:
    """Seeded in-memory chamber service."""
    return FakeRealm()


@pytest.fixture
def transport(realm: FakeRealm) -> httpx.MockTransport:
    return httpx.MockTransport(realm.handler)


@pytest.fixture
def client(transport: httpx.MockTransport) -> ChamberClient:
    return ChamberClient(ADDRESS, transport=transport)


@pytest.fixture
def session(client: ChamberClient) -> RealmSession:
    """Session over the fake realm. Tests close it inside their event loop."""
    return RealmSession(client)


@pytest.fixture
def service(session: RealmSession) -> BrowseService:
    return BrowseService(session)


@pytest.fixture
def _isolated_config(tmp_path: Any, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run from an empty directory with no realmctl env overrides."""
    for name in ("REALMCTL_CONFIG", "REALMCTL_CLIENT__ADDRESS", "REALMCTL_CLIENT__TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
