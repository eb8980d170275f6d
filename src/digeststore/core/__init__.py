"""Core infrastructure: hashing, bucket mapping, atomic writes, configuration, logging."""

from digeststore.core.atomic import AtomicWriter
from digeststore.core.config import (
    DigestStoreSettings,
    LoggingSettings,
    StoreSettings,
    load_settings,
    parse_levels,
    parse_mode,
)
from digeststore.core.hashing import (
    DigestProvider,
    HashlibDigestProvider,
)
from digeststore.core.logging import (
    configure_logging,
    get_logger,
)
from digeststore.core.nhash import (
    BucketMapper,
    NhashBucketMapper,
    nhash,
)
from digeststore.core.paths import PathResolver
from digeststore.core.store import (
    ContentStore,
    DigestStore,
)

__all__ = [
    "AtomicWriter",
    "BucketMapper",
    "ContentStore",
    "DigestProvider",
    "DigestStore",
    "DigestStoreSettings",
    "HashlibDigestProvider",
    "LoggingSettings",
    "NhashBucketMapper",
    "PathResolver",
    "StoreSettings",
    "configure_logging",
    "get_logger",
    "load_settings",
    "nhash",
    "parse_levels",
    "parse_mode",
]
