"""
Abstract base class for state-based Conflict-free Replicated Data Types (CRDTs).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, TypeVar

T = TypeVar('T', bound='CRDT')
S = TypeVar('S')


class CRDT(ABC, Generic[S]):
    """
    Abstract base class for all state-based CRDTs.

    A CRDT owns a mergeable state of type ``S`` and the identifier of the
    replica holding it. Instances are immutable: every mutating operation
    returns a new instance and leaves the receiver untouched, so a snapshot
    handed out earlier never changes under its holder.
    """

    def __init__(self, node_id: Any):
        """
        Initialize the CRDT with a node identifier.

        Args:
            node_id: Unique identifier of the replica owning this instance.
                Used to stamp local writes, never to judge remote state.
        """
        self._node_id = node_id

    @property
    def node_id(self) -> Any:
        return self._node_id

    @abstractmethod
    def state(self) -> S:
        """
        Return the state exchanged between peers.

        The returned value never aliases internal structures.
        """

    @abstractmethod
    def value(self) -> Any:
        """Return the application view derived from the state."""

    @abstractmethod
    def merge(self: T, remote_state: S) -> T:
        """
        Absorb a state received from another replica.

        The underlying state merge must be:
        - Commutative: merge(a, b) == merge(b, a)
        - Associative: merge(merge(a, b), c) == merge(a, merge(b, c))
        - Idempotent: merge(a, a) == a

        Args:
            remote_state: State of another instance of the same type

        Returns:
            A new CRDT instance holding the merged state
        """

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the CRDT to a dictionary for storage or transmission.

        Returns:
            Dictionary representation of the CRDT and its owner
        """

    @classmethod
    @abstractmethod
    def from_dict(cls, data: Dict[str, Any]):
        """
        Create a CRDT instance from a dictionary representation.

        Args:
            data: Dictionary produced by ``to_dict``

        Returns:
            A new CRDT instance reconstructed from the dictionary
        """

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self._node_id == other._node_id and self.state() == other.state()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._node_id))
