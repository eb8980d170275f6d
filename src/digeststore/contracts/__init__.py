"""Shared contracts for cross-boundary data types.

Errors and result types used by more than one subsystem live here.

Import pattern:
    from digeststore.contracts import StoreResult, StoreIOError
"""

from digeststore.contracts.errors import (
    ConfigurationError,
    DigestStoreError,
    PreconditionError,
    StoreIOError,
)
from digeststore.contracts.results import StoreResult

__all__ = [
    "ConfigurationError",
    "DigestStoreError",
    "PreconditionError",
    "StoreIOError",
    "StoreResult",
]
