"""
Last-Write-Wins Register (LWW-Register) CRDT implementation.
"""

from dataclasses import dataclass
from typing import Any, Dict, Generic, TypeVar

from .base import CRDT
from .clock import MAX_TIMESTAMP, Stamp, is_newer

T = TypeVar('T')


@dataclass(frozen=True)
class RegisterState(Generic[T]):
    """
    The exchanged state of a register: who wrote ``value`` and when.

    Args:
        writer_id: Peer id of the replica that performed the write
        timestamp: Logical timestamp of the write
        value: The written value
    """
    writer_id: Any
    timestamp: int
    value: T

    @property
    def stamp(self) -> Stamp:
        return Stamp(self.timestamp, self.writer_id)


def merge_register_states(local: RegisterState[T], remote: RegisterState[T]) -> RegisterState[T]:
    """
    Pick the winning state of two register states.

    The remote state wins only when its stamp is strictly newer; on equal
    stamps the local state is kept, which makes merging identical states
    a no-op.
    """
    if is_newer(remote.stamp, local.stamp):
        return remote
    return local


class LWWRegister(CRDT[RegisterState[T]]):
    """
    Last-Write-Wins Register CRDT.

    Holds a single value. Concurrent writes are resolved by keeping the
    write with the newest ``(timestamp, writer_id)`` stamp. Peer ids must
    be unique per replica: two replicas sharing an id can produce equal
    stamps with different values, and merges of those no longer converge.
    """

    def __init__(self, node_id: Any, state: RegisterState[T]):
        """
        Initialize the register.

        Args:
            node_id: Peer id used to stamp local writes
            state: Current state, possibly written by another peer
        """
        super().__init__(node_id)
        self._state = state

    @classmethod
    def initial(cls, node_id: Any, value: T) -> 'LWWRegister[T]':
        """Create a register owned by ``node_id`` holding its first write."""
        return cls(node_id, RegisterState(node_id, 1, value))

    @property
    def writer_id(self) -> Any:
        return self._state.writer_id

    @property
    def timestamp(self) -> int:
        return self._state.timestamp

    def state(self) -> RegisterState[T]:
        return self._state

    def value(self) -> T:
        return self._state.value

    def set(self, new_value: T) -> 'LWWRegister[T]':
        """
        Write a new value.

        The new timestamp is one past the timestamp of the state in hand,
        whichever peer wrote it.

        Args:
            new_value: Value to store

        Returns:
            A new LWWRegister holding ``(self.node_id, timestamp + 1, new_value)``

        Raises:
            OverflowError: If the logical clock is exhausted
        """
        if self._state.timestamp >= MAX_TIMESTAMP:
            raise OverflowError("logical timestamp exhausted")
        return LWWRegister(
            self.node_id,
            RegisterState(self.node_id, self._state.timestamp + 1, new_value)
        )

    def merge(self, remote_state: RegisterState[T]) -> 'LWWRegister[T]':
        """
        Merge a register state received from another replica.

        The remote state is adopted verbatim, keeping its writer and
        timestamp, when it is strictly newer. Otherwise the local state is
        kept.

        Args:
            remote_state: State of the same register on another replica

        Returns:
            A new LWWRegister holding the winning state
        """
        return LWWRegister(self.node_id, merge_register_states(self._state, remote_state))

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the register to a dictionary.

        Returns:
            Dictionary representation of the register
        """
        from .wire import register_state_to_wire

        return {
            'type': 'LWWRegister',
            'node_id': self.node_id,
            'state': register_state_to_wire(self._state)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LWWRegister':
        """
        Create an LWWRegister from a dictionary representation.

        Raises:
            MalformedStateError: If the embedded state is not well formed
        """
        from .wire import register_state_from_wire

        return cls(
            node_id=data['node_id'],
            state=register_state_from_wire(data['state'])
        )

    def __repr__(self) -> str:
        s = self._state
        return f"LWWRegister(value={s.value!r}, ts={s.timestamp}, writer={s.writer_id!r})"
