"""Error taxonomy for chamber navigation and synchronization.

Every error carries a stable ``code`` so the service layer can turn it into
a :class:`~realmctl.services.result.ServiceError` without string matching.
"""

from __future__ import annotations


class RealmError(Exception):
    """Base class for all realmctl errors."""

    code = "REALM_ERROR"


class ValidationError(RealmError, ValueError):
    """Malformed input to a command, rejected before any I/O."""

    code = "VALIDATION_ERROR"


class InvalidOperation(RealmError, ValueError):
    """Operation not defined for the given path (e.g. parent of root)."""

    code = "INVALID_OPERATION"


class EncodingError(RealmError, ValueError):
    """A path segment that cannot round-trip through encode/decode."""

    code = "ENCODING_ERROR"


class NotFound(RealmError):
    """The chamber service reports no such namespace."""

    code = "NOT_FOUND"

    def __init__(self, path: str, message: str | None = None) -> None:
        super().__init__(message or f"No chamber at {path}")
        self.path = path


class TransportFailure(RealmError):
    """Network or server error during a read or the creation write."""

    code = "TRANSPORT_FAILURE"

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
