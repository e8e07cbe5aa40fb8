"""
Grow-only Counter (G-Counter) CRDT implementation.
"""

from typing import Any, Dict, Mapping, Optional

from .base import CRDT

CounterState = Dict[Any, int]


def merge_counter_states(local: CounterState, remote: CounterState) -> CounterState:
    """Take the maximum count of every node seen by either side."""
    merged = dict(local)
    for node, count in remote.items():
        merged[node] = max(merged.get(node, 0), count)
    return merged


class GCounter(CRDT[CounterState]):
    """
    Grow-only Counter CRDT.

    A G-Counter can only be incremented, never decremented.
    Each node maintains its own count, and the total value
    is the sum of all node counts.
    """

    def __init__(self, node_id: Any, counts: Optional[Mapping[Any, int]] = None):
        """
        Initialize the G-Counter.

        Args:
            node_id: Unique identifier for the node
            counts: Optional initial counts dictionary
        """
        super().__init__(node_id)
        self._counts: CounterState = dict(counts) if counts else {}

    def state(self) -> CounterState:
        """Return a copy of the per-node counts."""
        return dict(self._counts)

    def increment(self, amount: int = 1) -> 'GCounter':
        """
        Increment the counter for this node.

        Args:
            amount: Amount to increment by (default: 1)

        Returns:
            A new GCounter with this node's count raised
        """
        if amount < 0:
            raise ValueError("G-Counter can only be incremented with positive values")
        counts = dict(self._counts)
        counts[self.node_id] = counts.get(self.node_id, 0) + amount
        return GCounter(self.node_id, counts)

    def value(self) -> int:
        """
        Get the current total value of the counter.

        Returns:
            Sum of all node counts
        """
        return sum(self._counts.values())

    def merge(self, remote_state: CounterState) -> 'GCounter':
        """
        Merge a counter state from another replica.

        Takes the maximum count for each node from both states.

        Args:
            remote_state: Counts (node -> count) of another replica

        Returns:
            A new GCounter with merged counts
        """
        return GCounter(self.node_id, merge_counter_states(self._counts, remote_state))

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the G-Counter to a dictionary.

        Returns:
            Dictionary representation of the G-Counter
        """
        return {
            'type': 'GCounter',
            'node_id': self.node_id,
            'counts': dict(self._counts)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GCounter':
        """
        Create a GCounter from a dictionary representation.

        Args:
            data: Dictionary containing serialized GCounter state

        Returns:
            A new GCounter instance
        """
        return cls(
            node_id=data['node_id'],
            counts=data.get('counts', {})
        )

    def __repr__(self) -> str:
        return f"GCounter(value={self.value()}, counts={self._counts})"
