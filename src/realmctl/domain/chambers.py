"""Chamber payload models: listings, rules, and version-ranged overrides.

Overrides are carried opaquely; evaluating them against a version is the
chamber service's concern.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from realmctl.domain.paths import PARENT_REFERENCE, SELF_MARKER

RuleValue = bool | int | float | str


class OverrideEntry(BaseModel):
    """A rule value scoped to a semantic version range."""

    model_config = {"frozen": True, "populate_by_name": True}

    type: str
    value: RuleValue
    minimum_version: str = Field(alias="minimumVersion")
    maximum_version: str = Field(alias="maximumVersion")


class RuleEntry(BaseModel):
    """A named, typed configuration value attached to a chamber."""

    model_config = {"frozen": True}

    name: str
    type: str
    value: RuleValue
    overrides: list[OverrideEntry] = Field(default_factory=list)


RuleSet = dict[str, RuleEntry]


class ChamberListing(BaseModel):
    """Immediate child names of a chamber, in server order.

    The server may include the self-marker ``"."``; it is kept in
    :attr:`names` but excluded from :attr:`children`.
    Empty names and ``".."`` cannot be navigated and are rejected.
    """

    model_config = {"frozen": True}

    names: list[str] = Field(default_factory=list)

    @field_validator("names")
    @classmethod
    def _navigable(cls, names: list[str]) -> list[str]:
        for name in names:
            if name in ("", PARENT_REFERENCE):
                msg = f"listing contains unusable name {name!r}"
                raise ValueError(msg)
        return names

    @property
    def children(self) -> list[str]:
        return [name for name in self.names if name != SELF_MARKER]

    @property
    def has_self_marker(self) -> bool:
        return SELF_MARKER in self.names

    @property
    def has_children(self) -> bool:
        return bool(self.children)


def listing_from_response(body: dict[str, Any]) -> ChamberListing:
    """Build a listing from a ``{"data": [names]}`` response body."""
    names = body.get("data") or []
    return ChamberListing.model_validate({"names": names})


def rules_from_response(body: dict[str, Any]) -> RuleSet:
    """Build a rule set from a ``{"data": {"rules": {...}}}`` response body.

    Older servers send the map under ``toggles``. A missing map means the
    chamber has no rules yet.
    """
    data = body.get("data") or {}
    raw = data.get("rules")
    if raw is None:
        raw = data.get("toggles")
    rules: RuleSet = {}
    for name, entry in (raw or {}).items():
        if entry is None:
            continue
        rules[name] = RuleEntry.model_validate({**entry, "name": name})
    return rules
