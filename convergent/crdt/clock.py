"""
Logical clock ordering used by every last-write-wins decision.
"""

from typing import Any, NamedTuple


class Stamp(NamedTuple):
    """
    A ``(timestamp, peer_id)`` pair.

    Field order makes plain tuple comparison the tie-break rule: the larger
    timestamp wins, and on equal timestamps the larger peer id wins. Peer
    ids of one system must all be of one comparable kind.
    """
    timestamp: int
    peer_id: Any


def compare(a: Stamp, b: Stamp) -> int:
    """Return 1 if ``a`` is newer, -1 if ``b`` is newer, 0 if they are equal."""
    if a == b:
        return 0
    return 1 if a > b else -1


def is_newer(a: Stamp, b: Stamp) -> bool:
    """True iff ``a`` is strictly newer than ``b``."""
    return compare(a, b) > 0


def newer(a: Stamp, b: Stamp) -> Stamp:
    """Return the newer of two stamps (``a`` when they are equal)."""
    return b if is_newer(b, a) else a


# Logical timestamps are signed 64-bit integers on the wire.
MAX_TIMESTAMP = 2 ** 63 - 1
