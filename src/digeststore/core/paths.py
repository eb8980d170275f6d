# src/digeststore/core/paths.py
"""Canonical on-disk locations of stored objects."""

from __future__ import annotations

from pathlib import Path

from digeststore.core.nhash import BucketMapper


class PathResolver:
    """Compose root + bucket directories + digest into an object path.

    Structure: root/<bucket-1>/<bucket-2>/.../<digest>

    The stored file's name is its own digest, so the path is a pure
    function of the digest for a fixed root and mapper.
    """

    def __init__(self, root: Path, mapper: BucketMapper) -> None:
        self._root = Path(root)
        self._mapper = mapper

    @property
    def root(self) -> Path:
        return self._root

    def bucket_dir(self, digest: str) -> Path:
        """Directory that holds (or would hold) digest."""
        return self._root.joinpath(*self._mapper.bucket_path(digest))

    def path_for(self, digest: str) -> Path:
        """Get filesystem path for digest."""
        return self.bucket_dir(digest) / digest
