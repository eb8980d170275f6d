"""Operation outcomes.

These types answer: "What did a store operation produce?"
"""

from typing import NamedTuple


class StoreResult(NamedTuple):
    """Identifier and size of stored content.

    A NamedTuple so callers can unpack it directly:

        digest, length = store.store(b"hello")
    """

    digest: str
    length: int
