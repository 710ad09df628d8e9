"""Breadcrumb trail and parent-link state derived from a navigation path.

Pure and O(depth): recomputed on every path change, never cached.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from realmctl.domain.paths import ROOT, SELF_MARKER, NavigationPath, child_of, encode

DEFAULT_ROOT_LABEL = "root"


@dataclass(frozen=True)
class Breadcrumb:
    """One link in the trail from the root to the current chamber."""

    label: str
    target: NavigationPath

    @property
    def href(self) -> str:
        return encode(self.target)

    def to_dict(self) -> dict[str, object]:
        return {"label": self.label, "target": list(self.target), "href": self.href}


def breadcrumbs(path: Sequence[str], *, root_label: str = DEFAULT_ROOT_LABEL) -> list[Breadcrumb]:
    """Root entry followed by one entry per segment, each targeting its prefix.

    Examples:
        >>> [c.target for c in breadcrumbs(("a", "b"))]
        [(), ('a',), ('a', 'b')]
    """
    trail = [Breadcrumb(label=root_label, target=ROOT)]
    for index, segment in enumerate(path):
        trail.append(Breadcrumb(label=segment, target=tuple(path[: index + 1])))
    return trail


def has_parent(path: Sequence[str]) -> bool:
    """True iff *path* has at least one segment."""
    return len(path) > 0


def link_target(path: Sequence[str], name: str) -> NavigationPath:
    """Resolve a listing entry to the path it navigates to.

    The self-marker ``"."`` links one level up (or stays at the root);
    any other name opens the child chamber.
    """
    if name == SELF_MARKER:
        return tuple(path[:-1])
    return child_of(path, name)
