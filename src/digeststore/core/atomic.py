# src/digeststore/core/atomic.py
"""Write-once publication of content at a canonical path.

Protocol for write_if_absent(path, data):
1. If path exists, stop (dedup fast path)
2. Create missing parent directories with dir_mask
3. Write data to a temp file beside path, named per writer
4. os.replace() the temp file onto path

The rename is the only externally visible state change, so readers see
either no file or a complete one. Two writers racing on the same digest
hold identical bytes, so the loser's rename is harmless.

No locks are taken. Temp files orphaned by a crashed writer are left in
place; cleaning them up is external housekeeping.
"""

from __future__ import annotations

import os
import socket
import threading
from pathlib import Path

from digeststore.contracts.errors import StoreIOError
from digeststore.core.logging import get_logger

logger = get_logger(__name__)

_HOSTNAME = socket.gethostname()


def temp_name_for(target: Path) -> Path:
    """Per-writer temp file path in the same directory as target.

    Unique across hosts sharing a filesystem, processes on one host, and
    threads in one process.
    """
    unique = f"{target.name}.{_HOSTNAME}.{os.getpid()}.{threading.get_ident()}"
    return target.with_name(unique)


def ensure_directory(directory: Path, mode: int) -> None:
    """Create directory and any missing parents, each with mode.

    os.makedirs() only applies mode to the leaf, so every level is created
    explicitly. Losing a creation race to another writer is success.

    Raises:
        StoreIOError: If a directory cannot be created
    """
    missing: list[Path] = []
    current = directory
    while not current.is_dir():
        missing.append(current)
        if current.parent == current:
            break
        current = current.parent

    for path in reversed(missing):
        try:
            os.mkdir(path, mode)
        except FileExistsError:
            if not path.is_dir():
                raise StoreIOError(
                    f"Can't create directory {path}: a non-directory is in the way",
                    path=path,
                ) from None
            continue
        except OSError as e:
            raise StoreIOError(f"Can't create directory {path}: {e.strerror}", path=path) from e
        logger.debug("Created directory", path=str(path))


class AtomicWriter:
    """Publishes content at a path exactly once, safely under concurrency.

    Masks are merged with the process umask by the OS, as with open(2)
    and mkdir(2).
    """

    def __init__(self, dir_mask: int = 0o777, file_mask: int = 0o666) -> None:
        self.dir_mask = dir_mask
        self.file_mask = file_mask

    def write_if_absent(self, path: Path, data: bytes) -> bool:
        """Write data to path unless a file is already there.

        Args:
            path: Canonical object path
            data: Full content

        Returns:
            True if this call published the file, False if it already existed

        Raises:
            StoreIOError: If directory creation, writing or renaming fails
        """
        # Idempotent: skip if already exists
        if path.exists():
            return False

        ensure_directory(path.parent, self.dir_mask)
        self._publish(path, data)
        return True

    def _publish(self, path: Path, data: bytes) -> None:
        """Write a temp file and rename it onto path."""
        temp_path = temp_name_for(path)

        try:
            fd = os.open(temp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, self.file_mask)
        except OSError as e:
            raise StoreIOError(f"Can't create {temp_path}: {e.strerror}", path=temp_path) from e

        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
        except OSError as e:
            raise StoreIOError(f"Can't write {temp_path}: {e.strerror}", path=temp_path) from e

        try:
            os.replace(temp_path, path)
        except OSError as e:
            raise StoreIOError(
                f"Could not rename {temp_path} to {path}: {e.strerror}", path=path
            ) from e
