"""digeststore: digested hierarchical storage of files.

Stashes large files or byte strings in a content-addressed directory tree
and hands back a short hex ID to keep in a database instead of the BLOB.

    from digeststore import DigestStore, StoreSettings

    store = DigestStore(StoreSettings(root="/var/lib/digeststore"))
    digest, length = store.store_from_source("/etc/motd")
    path = store.fetch_path(digest)
"""

__version__ = "0.1.0"

from digeststore.contracts import (  # noqa: E402
    ConfigurationError,
    DigestStoreError,
    PreconditionError,
    StoreIOError,
    StoreResult,
)
from digeststore.core import DigestStore, StoreSettings  # noqa: E402

__all__ = [
    "ConfigurationError",
    "DigestStore",
    "DigestStoreError",
    "PreconditionError",
    "StoreIOError",
    "StoreResult",
    "StoreSettings",
    "__version__",
]
