"""Error taxonomy for the digest store.

These types answer: "Why did a store operation fail?"

- ConfigurationError: bad settings, raised at construction time
- PreconditionError: caller passed an undefined or unusable value
- StoreIOError: the filesystem refused a read, mkdir, write or rename

"Not found" is NOT an error. fetch/exists on an unknown id return
None/False instead of raising.
"""

from __future__ import annotations

import os


class DigestStoreError(Exception):
    """Base class for every error raised by digeststore."""

    pass


class ConfigurationError(DigestStoreError, ValueError):
    """Raised when store configuration is invalid or missing.

    Always raised while building a store (or its settings), never deferred
    into a store/fetch call.
    """

    pass


class PreconditionError(DigestStoreError, ValueError):
    """Raised when a caller passes an absent or unusable argument.

    Examples: storing None, fetching with a None id, mapping a digest
    that is not hex.
    """

    pass


class StoreIOError(DigestStoreError, OSError):
    """Raised when the filesystem fails a store operation.

    Attributes:
        path: Filesystem path the failed operation was acting on
    """

    def __init__(self, message: str, *, path: str | os.PathLike[str] | None = None) -> None:
        super().__init__(message)
        self.path = path
