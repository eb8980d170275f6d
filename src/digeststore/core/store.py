# src/digeststore/core/store.py
"""
Digest store: content-addressable storage of blobs on a filesystem.

Content is stored under a path derived from its digest and the digest is
returned as a short identifier to keep in an external index instead of
the blob itself. This gives:
- Automatic deduplication of identical content
- Write-once files that are never moved or rewritten
- Race-free concurrent use across threads, processes and hosts

Structure: root/<bucket-1>/<bucket-2>/.../<digest>

Existence of the file is both the index and the store; there is no
separate catalog. There is no delete operation.
"""

from __future__ import annotations

import os
import re
import warnings
from pathlib import Path
from typing import BinaryIO, Protocol, runtime_checkable

from digeststore.contracts.errors import ConfigurationError, PreconditionError, StoreIOError
from digeststore.contracts.results import StoreResult
from digeststore.core.atomic import AtomicWriter, ensure_directory
from digeststore.core.config import StoreSettings
from digeststore.core.hashing import DigestProvider, HashlibDigestProvider
from digeststore.core.logging import get_logger
from digeststore.core.nhash import BucketMapper, NhashBucketMapper
from digeststore.core.paths import PathResolver

logger = get_logger(__name__)

_LOWER_HEX_PATTERN = re.compile(r"^[0-9a-f]+$")


@runtime_checkable
class ContentStore(Protocol):
    """Protocol for content-addressable stores.

    Identifiers are digests of the content; storing the same bytes twice
    returns the same identifier.
    """

    def store(self, data: bytes) -> StoreResult:
        """Store content and return its digest and length.

        Args:
            data: Raw bytes to store

        Returns:
            StoreResult(digest, length)
        """
        ...

    def fetch_path(self, digest: str) -> Path | None:
        """Path of the stored copy, or None if never stored."""
        ...

    def fetch_bytes(self, digest: str) -> bytes | None:
        """Stored content, or None if never stored."""
        ...

    def exists(self, digest: str) -> bool:
        """Check if content exists."""
        ...


class DigestStore:
    """Filesystem-backed content-addressable store.

    Example:
        store = DigestStore(StoreSettings(root=Path("/var/lib/digeststore")))
        digest, length = store.store(b"Hello, world")
        store.fetch_bytes(digest)  # b"Hello, world"
        store.fetch_path(digest)   # /var/lib/digeststore/<b1>/<b2>/<digest>

    The path returned by fetch_path() is the master copy; copy it before
    modifying.
    """

    def __init__(
        self,
        settings: StoreSettings,
        *,
        digester: DigestProvider | None = None,
        mapper: BucketMapper | None = None,
    ) -> None:
        """Initialize the store and create its root directory.

        Args:
            settings: Validated store settings
            digester: Digest algorithm; defaults to hashlib with settings.algorithm
            mapper: Bucket mapper; defaults to nhash with settings.levels

        Raises:
            ConfigurationError: If the mapper needs more hex digits than the
                digester produces
            StoreIOError: If the root directory cannot be created
        """
        self.settings = settings
        self._digester = digester if digester is not None else HashlibDigestProvider(settings.algorithm)
        self._mapper = mapper if mapper is not None else NhashBucketMapper(settings.levels)

        if self._mapper.digits_required > self._digester.hex_length:
            raise ConfigurationError(
                f"Storage levels {list(self._mapper.levels)} consume "
                f"{self._mapper.digits_required} hex digits but {self._digester.name} "
                f"digests only have {self._digester.hex_length}"
            )

        self._resolver = PathResolver(settings.root, self._mapper)
        self._writer = AtomicWriter(dir_mask=settings.dir_mask, file_mask=settings.file_mask)
        self._warned_fetch_file = False

        ensure_directory(self.root, settings.dir_mask)

    @classmethod
    def from_settings(
        cls,
        settings: StoreSettings,
        *,
        digester: DigestProvider | None = None,
        mapper: BucketMapper | None = None,
    ) -> DigestStore:
        return cls(settings, digester=digester, mapper=mapper)

    def __repr__(self) -> str:
        return f"DigestStore(root={str(self.root)!r}, digester={self._digester!r}, mapper={self._mapper!r})"

    @property
    def root(self) -> Path:
        return self._resolver.root

    @property
    def algorithm(self) -> str:
        return self._digester.name

    @property
    def levels(self) -> tuple[int, ...]:
        return self._mapper.levels

    def _resolve(self, digest: str) -> Path | None:
        """Path for digest, or None if digest can never have been stored.

        Anything other than lowercase hex of the digester's length (wrong
        algorithm, typos, "../" tricks) resolves to nothing.
        """
        if len(digest) != self._digester.hex_length or not _LOWER_HEX_PATTERN.match(digest):
            return None
        return self._resolver.path_for(digest)

    def store(self, data: bytes) -> StoreResult:
        """Store content and return its digest and length.

        Re-storing known content is a no-op that returns the same digest.

        Raises:
            PreconditionError: If data is None or text
            StoreIOError: If the object cannot be written
        """
        if data is None:
            raise PreconditionError("Can't store an undefined value")
        if isinstance(data, str):
            raise PreconditionError("Can't store text; encode it to bytes first")
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise PreconditionError(f"Can't store {type(data).__name__}; content must be bytes")

        content = bytes(data)
        digest = self._digester.hexdigest(content)
        path = self._resolver.path_for(digest)

        if self._writer.write_if_absent(path, content):
            logger.debug("Stored object", digest=digest, length=len(content), path=str(path))
        else:
            logger.debug("Object already stored", digest=digest)

        return StoreResult(digest, len(content))

    def store_from_source(self, source: str | os.PathLike[str] | BinaryIO) -> StoreResult:
        """Read all content from a file path or binary handle, then store it.

        A file whose content is already stored is only hashed, never read
        into memory.

        Raises:
            PreconditionError: If source is None, neither a path nor a
                readable handle, or yields text
            StoreIOError: If source is missing, not a regular file, or unreadable
        """
        if source is None:
            raise PreconditionError("Can't store from an undefined source")

        if isinstance(source, (str, os.PathLike)):
            return self._store_path(Path(source))

        if not callable(getattr(source, "read", None)):
            raise PreconditionError(
                f"Can't store from {type(source).__name__}; pass a path or a binary handle"
            )

        try:
            data = source.read()
        except OSError as e:
            raise StoreIOError(f"Can't read source: {e}") from e
        if isinstance(data, str):
            raise PreconditionError("Source must be opened in binary mode")
        return self.store(data)

    def _store_path(self, path: Path) -> StoreResult:
        if path.exists() and not path.is_file():
            raise StoreIOError(f"Can't read {path}: not a file", path=path)

        try:
            with path.open("rb") as handle:
                digest = self._digester.hexdigest_stream(handle)
                length = handle.tell()
                if self._resolver.path_for(digest).is_file():
                    logger.debug("Object already stored", digest=digest)
                    return StoreResult(digest, length)
                handle.seek(0)
                data = handle.read()
        except OSError as e:
            raise StoreIOError(f"Can't read {path}: {e.strerror}", path=path) from e

        return self.store(data)

    def fetch_path(self, digest: str) -> Path | None:
        """Path of the stored copy of digest, or None if never stored.

        Raises:
            PreconditionError: If digest is None or not a string
        """
        if digest is None:
            raise PreconditionError("Can't fetch an undefined ID")
        if not isinstance(digest, str):
            raise PreconditionError(f"ID must be a string, got {type(digest).__name__}")

        path = self._resolve(digest)
        if path is None or not path.is_file():
            return None
        return path

    def fetch_bytes(self, digest: str) -> bytes | None:
        """Stored content for digest, or None if never stored.

        Raises:
            PreconditionError: If digest is None
            StoreIOError: If the stored file exists but cannot be read
        """
        path = self.fetch_path(digest)
        if path is None:
            return None
        return _read_file(path)

    def exists(self, digest: str) -> bool:
        """Check if content exists.

        Raises:
            PreconditionError: If digest is None
        """
        return self.fetch_path(digest) is not None

    def fetch_file(self, digest: str) -> Path | None:
        """Deprecated alias for fetch_path().

        Warns on the first call per store instance only.
        """
        if not self._warned_fetch_file:
            self._warned_fetch_file = True
            warnings.warn(
                "Deprecated fetch_file() called; use fetch_path() instead",
                DeprecationWarning,
                stacklevel=2,
            )
        return self.fetch_path(digest)

    # Original names, kept for callers that still use them
    store_string = store
    fetch_string = fetch_bytes


def _read_file(path: Path) -> bytes:
    """Read a regular file byte-exact.

    Raises:
        StoreIOError: If path is missing, not a regular file, or unreadable
    """
    if path.exists() and not path.is_file():
        raise StoreIOError(f"Can't read {path}: not a file", path=path)

    try:
        with path.open("rb") as handle:
            return handle.read()
    except OSError as e:
        raise StoreIOError(f"Can't read {path}: {e.strerror}", path=path) from e
