"""Navigation paths and their server-addressable encoding.

A navigation path is a tuple of segments; the root is ``()``. The encoded
form percent-encodes every segment on its own (``/`` inside a name becomes
``%2F``) and joins them with ``/`` behind a leading ``/``.

INVARIANT: ``decode(encode(p)) == p`` for every valid path ``p``.

Examples:
    >>> encode(("a", "b"))
    '/a/b'
    >>> decode("/a/b/")
    ('a', 'b')
    >>> decode(encode(("a/b",)))
    ('a/b',)
"""

from __future__ import annotations

from collections.abc import Sequence
from urllib.parse import quote, unquote

from realmctl.domain.errors import EncodingError, InvalidOperation, ValidationError

NavigationPath = tuple[str, ...]

ROOT: NavigationPath = ()
SEPARATOR = "/"
SELF_MARKER = "."
PARENT_REFERENCE = ".."

_RESERVED_NAMES = frozenset({"", SELF_MARKER, PARENT_REFERENCE})


def validate_segment(name: str) -> str:
    """Return *name* if it is a usable chamber name, else raise ValidationError."""
    if not isinstance(name, str) or name in _RESERVED_NAMES:
        msg = f"Invalid chamber name: {name!r}"
        raise ValidationError(msg)
    return name


def _encode_segment(segment: str) -> str:
    if segment in _RESERVED_NAMES:
        msg = f"Segment {segment!r} is not addressable"
        raise EncodingError(msg)
    try:
        return quote(segment, safe="", errors="strict")
    except UnicodeEncodeError as exc:
        msg = f"Segment {segment!r} cannot be percent-encoded"
        raise EncodingError(msg) from exc


def _decode_segment(raw: str) -> str:
    try:
        segment = unquote(raw, errors="strict")
    except UnicodeDecodeError as exc:
        msg = f"Segment {raw!r} is not valid percent-encoded UTF-8"
        raise EncodingError(msg) from exc
    if segment in _RESERVED_NAMES:
        msg = f"Segment {raw!r} is not a navigable name"
        raise EncodingError(msg)
    return segment


def encode(path: Sequence[str]) -> str:
    """Encode a navigation path as ``/seg1/seg2``; the root encodes to ``/``."""
    return SEPARATOR + SEPARATOR.join(_encode_segment(s) for s in path)


def decode(raw: str) -> NavigationPath:
    """Decode a location string into a navigation path.

    Strips one leading and one trailing ``/``, splits on ``/`` and
    percent-decodes each segment. An empty remainder is the root.
    """
    text = raw.removeprefix(SEPARATOR).removesuffix(SEPARATOR)
    if not text:
        return ROOT
    return tuple(_decode_segment(part) for part in text.split(SEPARATOR))


def directory_path(path: Sequence[str]) -> str:
    """Encoded path in directory form (trailing ``/``), as used for reads."""
    encoded = encode(path)
    return encoded if encoded.endswith(SEPARATOR) else encoded + SEPARATOR


def parent_of(path: Sequence[str]) -> NavigationPath:
    """Drop the last segment. Raises InvalidOperation at the root."""
    if not path:
        msg = "The root chamber has no parent"
        raise InvalidOperation(msg)
    return tuple(path[:-1])


def child_of(path: Sequence[str], name: str) -> NavigationPath:
    """Append a validated chamber name to *path*."""
    return (*path, validate_segment(name))


def as_path(value: str | Sequence[str]) -> NavigationPath:
    """Coerce a location string or segment sequence into a navigation path."""
    if isinstance(value, str):
        return decode(value)
    return tuple(validate_segment(s) for s in value)
