"""
Error taxonomy for the ingestion pipeline.

* ``SightingRejected``  -- caller-fixable (validation, too-close); HTTP 400.
* ``DependencyFailure`` -- repository / image store failed; HTTP 500.
* ``DispatcherClosed``  -- enqueue attempted after shutdown began.
"""

from __future__ import annotations

from typing import Optional

from .enums import ErrorCode


class SightingError(Exception):
    """Base class for every error raised by the ingestion pipeline."""


class SightingRejected(SightingError):
    def __init__(self, code: ErrorCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def __repr__(self) -> str:
        return f"SightingRejected({self.code.value!r}, {self.message!r})"


class DependencyFailure(SightingError):
    """A collaborator (repository, image store) raised; not retried."""

    def __init__(self, operation: str, tiger_id: Optional[int] = None):
        super().__init__(f"{operation} failed (tiger_id={tiger_id})")
        self.operation = operation
        self.tiger_id = tiger_id


class ImageProcessingError(SightingError):
    """Raised by an image store that cannot accept the upload."""


class DispatcherClosed(SightingError):
    """The notification dispatcher no longer accepts messages."""


class LockUnavailable(SightingError):
    """The per-tiger ingestion lock could not be acquired in time."""
