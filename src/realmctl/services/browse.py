"""BrowseService and ChamberBrowser — the host side of chamber navigation.

``BrowseService`` turns queries and the mutation commands into
ServiceResults for the CLI. ``ChamberBrowser`` holds the current path and
recomputes everything explicitly whenever it changes::

    browser = ChamberBrowser(BrowseService(session))
    await browser.navigate("/team/web/")   # breadcrumbs + both queries
    await browser.create("feature-x")      # write, invalidate, refetch
    await browser.delete("feature-x")
    await browser.up()
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import structlog

from realmctl.domain.chambers import ChamberListing
from realmctl.domain.errors import RealmError, TransportFailure, ValidationError
from realmctl.domain.navigation import (
    DEFAULT_ROOT_LABEL,
    breadcrumbs,
    has_parent,
    link_target,
)
from realmctl.domain.paths import ROOT, NavigationPath, as_path, child_of, encode, parent_of
from realmctl.infrastructure.cache import CacheState
from realmctl.services.base import BaseService
from realmctl.services.create import CreateChamberCommand
from realmctl.services.delete import DeleteChamberCommand
from realmctl.services.queries import DetailQuery, DirectoryQuery, QueryState, detail_key, list_key
from realmctl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from realmctl.domain.chambers import RuleSet
    from realmctl.infrastructure.session import RealmSession

log = structlog.get_logger(__name__)

PathLike = str | Sequence[str]


def _error_result(op: str, exc: RealmError, **detail: Any) -> ServiceResult:
    return ServiceResult(ok=False, op=op, error=ServiceError.from_exception(exc, **detail))


def _rules_payload(rules: RuleSet) -> dict[str, Any]:
    return {name: rule.model_dump(by_alias=True) for name, rule in rules.items()}


class BrowseService(BaseService):
    """Listing, detail, composite view, creation and deletion for chamber paths."""

    def __init__(
        self,
        session: RealmSession,
        *,
        root_label: str = DEFAULT_ROOT_LABEL,
        show_self_marker: bool = False,
    ) -> None:
        super().__init__(session)
        self.root_label = root_label
        self.show_self_marker = show_self_marker
        self.directory = DirectoryQuery(session)
        self.detail = DetailQuery(session)

    # ------------------------------------------------------------------
    # Single queries
    # ------------------------------------------------------------------

    async def list_chambers(self, path: PathLike) -> ServiceResult:
        """Child chambers of *path*."""
        op = "list_chambers"
        try:
            target = as_path(path)
            listing = await self.directory.load(target)
        except RealmError as exc:
            return _error_result(op, exc, path=str(path))
        return ServiceResult(
            ok=True,
            op=op,
            data={"path": encode(target), **self._listing_payload(listing)},
        )

    async def get_chamber(self, path: PathLike) -> ServiceResult:
        """Rule set of *path*."""
        op = "get_chamber"
        try:
            target = as_path(path)
            rules = await self.detail.load(target)
        except RealmError as exc:
            return _error_result(op, exc, path=str(path))
        return ServiceResult(
            ok=True,
            op=op,
            data={"path": encode(target), "rules": _rules_payload(rules), "count": len(rules)},
        )

    # ------------------------------------------------------------------
    # Composite view
    # ------------------------------------------------------------------

    async def view(self, path: PathLike) -> ServiceResult:
        """Breadcrumbs, children, and rules of *path*, loaded concurrently.

        One query failing never hides the other's data; the result is only
        ``ok=False`` when both fail.
        """
        op = "view_chamber"
        try:
            target = as_path(path)
        except RealmError as exc:
            return _error_result(op, exc, path=str(path))

        await self.load_both(target)
        return self.snapshot(target)

    async def load_both(self, path: NavigationPath) -> list[BaseException | None]:
        """Resolve listing and detail concurrently; return their failures."""
        outcomes = await asyncio.gather(
            self.directory.load(path),
            self.detail.load(path),
            return_exceptions=True,
        )
        failures: list[BaseException | None] = []
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                log.debug("view.query_failed", path=encode(path), error=str(outcome))
                failures.append(outcome)
            else:
                failures.append(None)
        return failures

    def snapshot(self, path: Sequence[str]) -> ServiceResult:
        """Compose the view of *path* from cache state alone (no I/O)."""
        op = "view_chamber"
        target: NavigationPath = tuple(path)
        state = QueryState.of(self.cache, target)

        listing_entry = self.directory.peek(target)
        detail_entry = self.detail.peek(target)
        listing: ChamberListing = (
            listing_entry.value
            if listing_entry is not None and listing_entry.value is not None
            else ChamberListing()
        )
        rules: RuleSet = (
            detail_entry.value
            if detail_entry is not None and detail_entry.value is not None
            else {}
        )

        data: dict[str, Any] = {
            "path": encode(target),
            "breadcrumbs": [c.to_dict() for c in breadcrumbs(target, root_label=self.root_label)],
            "has_parent": has_parent(target),
            "parent": encode(target[:-1]) if has_parent(target) else None,
            **self._listing_payload(listing, parent=target),
            "rules": _rules_payload(rules),
            "loading": state.loading,
            "ready_to_create": (
                state.detail is CacheState.READY
                and not rules
                and not state.loading
            ),
            "errors": {"listing": state.listing_error, "detail": state.detail_error},
        }

        warnings = [
            f"{kind} query failed: {message}"
            for kind, message in (("listing", state.listing_error), ("detail", state.detail_error))
            if message
        ]
        if state.listing_error and state.detail_error:
            return ServiceResult(
                ok=False,
                op=op,
                data=data,
                warnings=warnings,
                error=ServiceError(
                    code=TransportFailure.code,
                    message=f"Could not load {encode(target)}",
                    detail={"path": encode(target)},
                ),
            )
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create_chamber(self, parent: PathLike, name: str) -> ServiceResult:
        """Create *name* under *parent*, then refetch the parent's view.

        The refetch happens whether or not the write succeeded; validation
        errors short-circuit before any request.
        """
        op = "create_chamber"
        try:
            parent_path = as_path(parent)
            pending = CreateChamberCommand(self._session).execute(parent_path, name)
        except ValidationError as exc:
            return _error_result(op, exc, parent=str(parent), name=name)
        except RealmError as exc:
            return _error_result(op, exc, parent=str(parent))

        try:
            created = await pending
        except RealmError as exc:
            await self.load_both(parent_path)
            return _error_result(op, exc, parent=encode(parent_path), name=name)

        await self.load_both(parent_path)
        view = self.snapshot(parent_path)
        return ServiceResult(
            ok=True,
            op=op,
            data={**created.to_dict(), "siblings": view.data["children"]},
            warnings=view.warnings,
        )

    async def delete_chamber(self, path: PathLike) -> ServiceResult:
        """Delete the chamber at *path*, then refetch its parent's view.

        As with creation, the parent is refetched whether or not the delete
        succeeded. The root cannot be deleted.
        """
        op = "delete_chamber"
        try:
            target = as_path(path)
            pending = DeleteChamberCommand(self._session).execute(target)
        except RealmError as exc:
            return _error_result(op, exc, path=str(path))

        parent_path = target[:-1]
        try:
            deleted = await pending
        except RealmError as exc:
            await self.load_both(parent_path)
            return _error_result(op, exc, path=encode(target))

        await self.load_both(parent_path)
        view = self.snapshot(parent_path)
        return ServiceResult(
            ok=True,
            op=op,
            data={**deleted.to_dict(), "siblings": view.data["children"]},
            warnings=view.warnings,
        )

    def invalidate(self, path: Sequence[str]) -> None:
        """Mark both queries for *path* stale (explicit refresh)."""
        self.cache.invalidate(list_key(path))
        self.cache.invalidate(detail_key(path))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _listing_payload(
        self, listing: ChamberListing, *, parent: NavigationPath | None = None
    ) -> dict[str, Any]:
        names = listing.names if self.show_self_marker else listing.children
        payload: dict[str, Any] = {
            "children": listing.children,
            "has_children": listing.has_children,
            "has_self_marker": listing.has_self_marker,
        }
        if parent is not None:
            payload["links"] = [
                {"name": name, "target": encode(link_target(parent, name))} for name in names
            ]
        return payload


class ChamberBrowser:
    """Stateful navigator: the current path plus explicit recomputation.

    Every path change re-derives breadcrumbs and re-resolves both queries.
    Loads for a path the browser has left are not cancelled; their results
    land under that path's own cache keys.
    """

    def __init__(self, service: BrowseService, path: PathLike = ROOT) -> None:
        self.service = service
        self.path: NavigationPath = as_path(path)

    async def navigate(self, target: PathLike) -> ServiceResult:
        try:
            self.path = as_path(target)
        except RealmError as exc:
            return _error_result("view_chamber", exc, path=str(target))
        log.debug("browser.navigate", path=encode(self.path))
        return await self.service.view(self.path)

    async def open(self, name: str) -> ServiceResult:
        """Follow a listing entry (``"."`` goes up one level)."""
        try:
            target = link_target(self.path, name)
        except RealmError as exc:
            return _error_result("view_chamber", exc, name=name)
        return await self.navigate(target)

    async def up(self) -> ServiceResult:
        try:
            target = parent_of(self.path)
        except RealmError as exc:
            return _error_result("view_chamber", exc, path=encode(self.path))
        return await self.navigate(target)

    async def refresh(self) -> ServiceResult:
        self.service.invalidate(self.path)
        return await self.service.view(self.path)

    async def create(self, name: str) -> ServiceResult:
        """Create a child of the current chamber."""
        return await self.service.create_chamber(self.path, name)

    async def delete(self, name: str) -> ServiceResult:
        """Delete a child of the current chamber."""
        try:
            target = child_of(self.path, name)
        except RealmError as exc:
            return _error_result("delete_chamber", exc, name=name)
        return await self.service.delete_chamber(target)

    def snapshot(self) -> ServiceResult:
        return self.service.snapshot(self.path)
