"""
Last-Write-Wins Map (LWW-Map) CRDT implementation.
"""

from typing import Any, Dict, Iterator, List, Mapping, Optional, TypeVar

from .base import CRDT
from .lww_register import LWWRegister, RegisterState, merge_register_states
from .option import ABSENT, Option, Present, is_present

T = TypeVar('T')

MapState = Dict[str, RegisterState[Option[T]]]


def merge_map_states(local: MapState, remote: MapState) -> MapState:
    """
    Merge two map states key by key.

    Keys known to only one side are carried over as they are; keys known
    to both are resolved with the register rule.
    """
    merged = dict(local)
    for key, remote_state in remote.items():
        if key in merged:
            merged[key] = merge_register_states(merged[key], remote_state)
        else:
            merged[key] = remote_state
    return merged


class LWWMap(CRDT[MapState]):
    """
    Last-Write-Wins Map CRDT.

    Every key is backed by its own LWW-Register holding ``Present(value)``
    or ``ABSENT``. Deleting a key writes ``ABSENT`` to its register; the
    register stays in the map as a tombstone so that a stale write merged
    later cannot bring the value back.
    """

    def __init__(self, node_id: Any, registers: Optional[Mapping[str, LWWRegister]] = None):
        """
        Initialize the LWW-Map.

        Args:
            node_id: Unique identifier for the node
            registers: Optional initial registers (key -> LWWRegister[Option])
        """
        super().__init__(node_id)
        self._registers: Dict[str, LWWRegister] = dict(registers) if registers else {}

    @classmethod
    def from_state(cls, node_id: Any, state: MapState) -> 'LWWMap':
        """Create a map owned by ``node_id`` from an exchanged map state."""
        return cls(node_id, {
            key: LWWRegister(node_id, register_state)
            for key, register_state in state.items()
        })

    def state(self) -> MapState:
        """
        Get the exchanged form of the map, tombstones included.

        Returns:
            A new dictionary (key -> RegisterState[Option])
        """
        return {key: register.state() for key, register in self._registers.items()}

    def value(self) -> Dict[str, T]:
        """
        Get the application view of the map.

        Returns:
            Dictionary of live keys to their unwrapped values
        """
        return {
            key: register.value().value
            for key, register in self._registers.items()
            if is_present(register.value())
        }

    def has(self, key: str) -> bool:
        register = self._registers.get(key)
        return register is not None and is_present(register.value())

    def get(self, key: str) -> Option[T]:
        """
        Get the value for a key.

        Args:
            key: Key to look up

        Returns:
            ``Present(value)``, or ``ABSENT`` if the key is unknown or deleted
        """
        register = self._registers.get(key)
        if register is None:
            return ABSENT
        return register.value()

    def register(self, key: str) -> Optional[LWWRegister]:
        """Return the register backing ``key``, tombstones included."""
        return self._registers.get(key)

    def set(self, key: str, value: T) -> 'LWWMap[T]':
        """
        Set a key to a value.

        A known key (live or deleted) is written through its register; an
        unknown key gets a fresh register seeded at timestamp 1.

        Args:
            key: Key to set
            value: Value to associate with the key

        Returns:
            A new LWWMap with that key's register replaced
        """
        register = self._registers.get(key)
        if register is None:
            register = LWWRegister.initial(self.node_id, Present(value))
        else:
            register = register.set(Present(value))
        return self._replace(key, register)

    def delete(self, key: str) -> 'LWWMap[T]':
        """
        Delete a key by writing a tombstone to its register.

        Deleting a key that was never seen leaves the map unchanged and
        creates no tombstone.

        Args:
            key: Key to delete

        Returns:
            A new LWWMap
        """
        register = self._registers.get(key)
        if register is None:
            return LWWMap(self.node_id, self._registers)
        return self._replace(key, register.set(ABSENT))

    def merge(self, remote_state: MapState) -> 'LWWMap[T]':
        """
        Absorb a map state received from another replica.

        Each remote key is merged into the local register of the same key,
        or adopted as a new register (keeping the remote writer and
        timestamp) when the key is unknown locally. Keys the remote side
        does not mention are left untouched.

        Args:
            remote_state: Map state (key -> RegisterState[Option])

        Returns:
            A new LWWMap with merged entries
        """
        registers = dict(self._registers)
        for key, remote_register_state in remote_state.items():
            local = registers.get(key)
            if local is None:
                registers[key] = LWWRegister(self.node_id, remote_register_state)
            else:
                registers[key] = local.merge(remote_register_state)
        return LWWMap(self.node_id, registers)

    def keys(self) -> List[str]:
        """Get the live keys of the map."""
        return [key for key, register in self._registers.items() if is_present(register.value())]

    def tombstones(self) -> List[str]:
        """Get the deleted keys whose tombstones are still held."""
        return [key for key, register in self._registers.items() if not is_present(register.value())]

    def _replace(self, key: str, register: LWWRegister) -> 'LWWMap[T]':
        registers = dict(self._registers)
        registers[key] = register
        return LWWMap(self.node_id, registers)

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the LWW-Map to a dictionary.

        Returns:
            Dictionary representation of the LWW-Map
        """
        from .wire import map_state_to_wire

        return {
            'type': 'LWWMap',
            'node_id': self.node_id,
            'state': map_state_to_wire(self.state())
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LWWMap':
        """
        Create an LWWMap from a dictionary representation.

        Raises:
            MalformedStateError: If the embedded map state is not well formed
        """
        from .wire import map_state_from_wire

        return cls.from_state(data['node_id'], map_state_from_wire(data.get('state', {})))

    def __repr__(self) -> str:
        keys_list = self.keys()
        preview = keys_list[:5]
        more = f", ... +{len(keys_list) - 5} more" if len(keys_list) > 5 else ""
        return f"LWWMap(size={len(keys_list)}, keys={preview}{more}, tombstones={len(self.tombstones())})"

    def __len__(self) -> int:
        return len(self.keys())

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())
