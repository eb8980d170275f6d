# src/digeststore/core/hashing.py
"""Content digests for the store.

The digest of an object's bytes is its identifier, so the algorithm is
resolved once at construction and an unknown name fails immediately
instead of on the first store.

Usage:
    from digeststore.core.hashing import HashlibDigestProvider

    digester = HashlibDigestProvider("sha512")
    digester.hexdigest(b"")  # 'cf83e135...'
"""

from __future__ import annotations

import hashlib
from typing import BinaryIO, Protocol, runtime_checkable

from digeststore.contracts.errors import ConfigurationError, PreconditionError

DEFAULT_ALGORITHM = "sha512"

# Read size for hexdigest_stream
_CHUNK_SIZE = 1024 * 1024


@runtime_checkable
class DigestProvider(Protocol):
    """Protocol for digest algorithms used by DigestStore.

    Implementations must be deterministic: equal bytes always give
    equal lowercase hex digests of a fixed length.
    """

    @property
    def name(self) -> str:
        """Canonical algorithm name."""
        ...

    @property
    def hex_length(self) -> int:
        """Number of hex characters in every digest."""
        ...

    def hexdigest(self, data: bytes) -> str:
        """Return the hex digest of the full content."""
        ...

    def hexdigest_stream(self, handle: BinaryIO) -> str:
        """Return the hex digest of everything readable from handle."""
        ...


def resolve_algorithm(name: str) -> str:
    """Map a user-facing algorithm name to a hashlib name.

    Accepts hashlib names ("sha512", "sha3_512") and the dashed spellings
    common in other digest libraries ("SHA-512", "SHA3-512").

    Raises:
        ConfigurationError: If no fixed-length hashlib algorithm matches
    """
    if not name or not name.strip():
        raise ConfigurationError("Digest algorithm name cannot be empty")

    lowered = name.strip().lower()
    available = hashlib.algorithms_available
    for candidate in (lowered, lowered.replace("-", ""), lowered.replace("-", "_")):
        if candidate in available:
            if candidate.startswith("shake_"):
                raise ConfigurationError(
                    f"Digest algorithm '{name}' has a variable-length output "
                    "and cannot be used to address content"
                )
            return candidate

    raise ConfigurationError(
        f"Unsupported digest algorithm '{name}'. "
        f"Available: {sorted(a for a in available if not a.startswith('shake_'))}"
    )


class HashlibDigestProvider:
    """DigestProvider backed by hashlib."""

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM) -> None:
        self._name = resolve_algorithm(algorithm)
        self._hex_length = hashlib.new(self._name).digest_size * 2

    def __repr__(self) -> str:
        return f"HashlibDigestProvider({self._name!r})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def hex_length(self) -> int:
        return self._hex_length

    def hexdigest(self, data: bytes) -> str:
        if data is None:
            raise PreconditionError("Can't digest an undefined value")
        return hashlib.new(self._name, data).hexdigest()

    def hexdigest_stream(self, handle: BinaryIO) -> str:
        hasher = hashlib.new(self._name)
        while chunk := handle.read(_CHUNK_SIZE):
            hasher.update(chunk)
        return hasher.hexdigest()
