# src/digeststore/core/nhash.py
"""Bucket mapping ("nhash") from digests to nested directory names.

Spreads objects over a balanced directory tree so that no single
directory accumulates millions of entries.

Levels are the number of possible directory names at each depth:
(8, 256) gives a top level named "0".."7", each holding "0".."255".

Consumption order (FIXED - changing it orphans every stored object):
- Hex digits are read left to right, most significant first
- Each level takes the fewest digits d >= 1 with 16**d >= width
- No digit is reused across levels
- The digits are parsed as one integer, reduced modulo the width,
  and formatted in decimal

Example with levels (8, 256) and digest "cf83e135...":
    level 0: "c"  -> 12  % 8   -> "4"
    level 1: "f8" -> 248 % 256 -> "248"
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from typing import Protocol, runtime_checkable

from digeststore.contracts.errors import ConfigurationError, PreconditionError

DEFAULT_LEVELS: tuple[int, ...] = (8, 256)

_HEX_PATTERN = re.compile(r"^[0-9a-fA-F]+$")


@runtime_checkable
class BucketMapper(Protocol):
    """Protocol for digest-to-directory mappers used by DigestStore."""

    @property
    def levels(self) -> tuple[int, ...]:
        """Bucket width per directory depth."""
        ...

    @property
    def digits_required(self) -> int:
        """Hex digits a digest must have to be mapped."""
        ...

    def bucket_path(self, digest: str) -> tuple[str, ...]:
        """Return one directory name per level for digest."""
        ...


def digits_for_width(width: int) -> int:
    """Return how many hex digits are consumed for a level of this width."""
    if width < 1:
        raise ConfigurationError(f"Storage level width must be positive, got {width}")
    digits = 1
    while 16**digits < width:
        digits += 1
    return digits


def validate_levels(levels: Iterable[int] | None) -> tuple[int, ...]:
    """Check a level list and return it as a tuple.

    Raises:
        ConfigurationError: If the list is missing, empty, or holds a
            width that is not a positive integer
    """
    if levels is None:
        raise ConfigurationError("At least one storage level is required")

    validated = tuple(levels)
    if not validated:
        raise ConfigurationError("At least one storage level is required")

    for width in validated:
        # bool is an int subclass; True is not a width
        if isinstance(width, bool) or not isinstance(width, int):
            raise ConfigurationError(
                f"Storage level widths must be integers, got {width!r}"
            )
        if width < 1:
            raise ConfigurationError(
                f"Storage level widths must be positive, got {width}"
            )
    return validated


def nhash(digest: str, levels: Sequence[int]) -> tuple[str, ...]:
    """Map digest to one directory name per level.

    Pure function of (digest, levels); see the module docstring for the
    consumption order.

    Args:
        digest: Hex digest (case-insensitive)
        levels: Bucket widths, outermost first

    Returns:
        Directory names, outermost first

    Raises:
        ConfigurationError: If levels is invalid
        PreconditionError: If digest is None, not hex, or too short
    """
    widths = validate_levels(levels)

    if digest is None:
        raise PreconditionError("Can't map an undefined digest")
    if not _HEX_PATTERN.match(digest):
        raise PreconditionError(f"Digest must be a hex string, got {digest!r}")

    needed = sum(digits_for_width(w) for w in widths)
    if len(digest) < needed:
        raise PreconditionError(
            f"Digest has {len(digest)} hex digits but levels {list(widths)} "
            f"consume {needed}"
        )

    buckets: list[str] = []
    offset = 0
    for width in widths:
        digits = digits_for_width(width)
        value = int(digest[offset : offset + digits], 16)
        buckets.append(str(value % width))
        offset += digits
    return tuple(buckets)


class NhashBucketMapper:
    """BucketMapper using the nhash consumption order.

    Levels are validated in the constructor, so a store with an empty
    level list fails before any digest is mapped.
    """

    def __init__(self, levels: Iterable[int] | None = DEFAULT_LEVELS) -> None:
        self._levels = validate_levels(levels)
        self._digits_required = sum(digits_for_width(w) for w in self._levels)

    def __repr__(self) -> str:
        return f"NhashBucketMapper({list(self._levels)!r})"

    @property
    def levels(self) -> tuple[int, ...]:
        return self._levels

    @property
    def digits_required(self) -> int:
        return self._digits_required

    def bucket_path(self, digest: str) -> tuple[str, ...]:
        return nhash(digest, self._levels)
