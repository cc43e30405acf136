"""Domain error kinds.

None of these is ever fatal: the session controller turns each one into a
failed ``ServiceResult`` and leaves the live graph untouched.
"""

from __future__ import annotations


class FunnelError(Exception):
    """Base class for funnel engine errors."""

    code = "FUNNEL_ERROR"


class InvalidConnection(FunnelError):
    """An edge was rejected before commit."""

    code = "INVALID_CONNECTION"


class SnapshotImportError(FunnelError):
    """An import payload was malformed or carried an unsupported version."""

    code = "IMPORT_ERROR"


class StoreUnavailable(FunnelError):
    """The keyed store could not be read or written."""

    code = "STORE_UNAVAILABLE"
