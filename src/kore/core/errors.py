"""Journal error types.

Raised by the journal layer, translated to HTTP status codes by the
api layer. Aggregation never raises these.
"""

from __future__ import annotations


class JournalError(ValueError):
    """Base class for journal operation failures."""


class NotFoundError(JournalError):
    """Row does not exist or is not owned by the caller."""


class ConflictError(JournalError):
    """Row would duplicate an existing one."""


class InvalidStateError(JournalError):
    """Trade status does not allow the requested transition."""
