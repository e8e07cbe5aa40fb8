"""
Single-owner holder of a replica's LWW-Map.
"""

import logging
import threading
from typing import Any, Dict, List, Optional

from ..crdt.lww_map import LWWMap, MapState
from ..crdt.option import Option
from ..crdt.wire import map_state_from_wire, map_state_to_wire
from .storage import JsonFileStorage
from .transport import HttpTransport, TransportError

logger = logging.getLogger(__name__)


class Replica:
    """
    Owns the current LWWMap of one replica.

    The map itself is immutable; the replica swaps in the instance returned
    by every write or merge. Concurrent callers are serialized by a lock so
    that each write stamps its timestamp from the latest map.

    Args:
        node_id: Peer id of this replica
        storage: Optional storage; the state is loaded at start and saved
            after every change
        transport: Optional transport used by ``push_to_peers``
        peers: Base URLs of the other replicas
    """

    def __init__(self, node_id: Any, storage: Optional[JsonFileStorage] = None,
                 transport: Optional[HttpTransport] = None, peers: Optional[List[str]] = None):
        self.node_id = node_id
        self.storage = storage
        self.transport = transport
        self.peers = list(peers) if peers else []
        self._lock = threading.Lock()

        initial = storage.load() if storage is not None else None
        if initial is None:
            self._map = LWWMap(node_id)
        else:
            self._map = LWWMap.from_state(node_id, initial)
            logger.info("[%s] Restored %d entries from storage", node_id, len(initial))

    @property
    def map(self) -> LWWMap:
        """Current snapshot; unaffected by later writes."""
        return self._map

    def value(self) -> Dict[str, Any]:
        return self._map.value()

    def get(self, key: str) -> Option:
        return self._map.get(key)

    def has(self, key: str) -> bool:
        return self._map.has(key)

    def state(self) -> MapState:
        return self._map.state()

    def wire_state(self) -> Dict[str, Any]:
        return map_state_to_wire(self._map.state())

    def set(self, key: str, value: Any) -> LWWMap:
        with self._lock:
            snapshot = self._commit(self._map.set(key, value))
        logger.debug("[%s] Set %r at ts %d", self.node_id, key, snapshot.register(key).timestamp)
        return snapshot

    def delete(self, key: str) -> LWWMap:
        """Delete ``key``; a key never seen is left alone and nothing is saved."""
        with self._lock:
            if self._map.register(key) is None:
                return self._map
            snapshot = self._commit(self._map.delete(key))
        logger.debug("[%s] Deleted %r at ts %d", self.node_id, key, snapshot.register(key).timestamp)
        return snapshot

    def merge(self, remote_state: MapState) -> LWWMap:
        with self._lock:
            snapshot = self._commit(self._map.merge(remote_state))
        logger.debug("[%s] Merged %d remote entries", self.node_id, len(remote_state))
        return snapshot

    def merge_wire(self, wire_state: Any) -> LWWMap:
        """
        Validate and merge a wire map state.

        Raises:
            MalformedStateError: If ``wire_state`` is not a map state
        """
        return self.merge(map_state_from_wire(wire_state))

    def push_to_peers(self) -> List[str]:
        """
        Send the current state to every peer.

        A peer that cannot be reached is logged and skipped; the local
        state is kept either way.

        Returns:
            URLs of the peers that accepted the state
        """
        if self.transport is None or not self.peers:
            return []

        wire_state = self.wire_state()
        delivered = []
        for url in self.peers:
            try:
                self.transport.send(url, wire_state)
            except TransportError as e:
                logger.warning("[%s] Failed to sync with %s: %s", self.node_id, url, e)
                continue
            logger.info("[%s] Successfully synced with %s", self.node_id, url)
            delivered.append(url)
        return delivered

    def pull_from_peers(self) -> int:
        """
        Fetch and merge the state of every reachable peer once.

        Returns:
            Number of peers whose state was merged
        """
        if self.transport is None:
            return 0

        merged = 0
        for url in self.peers:
            try:
                remote_state = self.transport.fetch(url)
            except TransportError as e:
                logger.warning("[%s] Failed to fetch state from %s: %s", self.node_id, url, e)
                continue
            self.merge(remote_state)
            merged += 1
        return merged

    def get_summary(self) -> Dict[str, Any]:
        snapshot = self._map
        return {
            'node_id': self.node_id,
            'entries': len(snapshot),
            'tombstones': len(snapshot.tombstones()),
            'keys': sorted(snapshot.keys())
        }

    def _commit(self, new_map: LWWMap) -> LWWMap:
        # Caller holds the lock. The swap happens only once the save succeeded.
        if self.storage is not None:
            self.storage.save(new_map.state())
        self._map = new_map
        return new_map

    def __repr__(self) -> str:
        return f"Replica(node_id={self.node_id!r}, map={self._map!r})"
