"""
HTTP transport of map states between replicas.
"""

import logging
import time
from typing import Any, Callable, Dict, Iterator, Optional, Sequence, Tuple

import requests

from ..crdt.lww_map import MapState
from ..crdt.wire import MalformedStateError, map_state_from_wire

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """Raised when a state could not be delivered to or fetched from a peer."""

    def __init__(self, peer_url: str, message: str):
        super().__init__(f"{peer_url}: {message}")
        self.peer_url = peer_url


class HttpTransport:
    """
    Pushes and pulls map states over the replica HTTP API.

    Args:
        timeout: Seconds to wait for a peer before giving up
        session: Optional requests session to reuse connections
    """

    def __init__(self, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def send(self, peer_url: str, wire_state: Dict[str, Any]) -> None:
        """
        Deliver a wire map state to a peer's sync endpoint.

        Raises:
            TransportError: If the peer cannot be reached or rejects the state
        """
        try:
            response = self.session.post(
                f"{peer_url}/crdt/sync",
                json={"crdt_state": wire_state},
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise TransportError(peer_url, str(e)) from e
        if response.status_code != 200:
            raise TransportError(peer_url, f"sync rejected with status {response.status_code}")

    def fetch(self, peer_url: str) -> MapState:
        """
        Pull a peer's full map state.

        Raises:
            TransportError: If the peer cannot be reached or answers with an error
            MalformedStateError: If the answer is not a map state
        """
        try:
            response = self.session.get(f"{peer_url}/crdt/state", timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(peer_url, str(e)) from e
        if response.status_code != 200:
            raise TransportError(peer_url, f"state request failed with status {response.status_code}")
        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(peer_url, "invalid JSON response") from e
        return map_state_from_wire(data)

    def receive(self, peer_urls: Sequence[str], interval: float = 5.0,
                sleep: Callable[[float], None] = time.sleep) -> Iterator[Tuple[str, MapState]]:
        """
        Poll peers for their states, forever.

        Each call starts a fresh round-robin over ``peer_urls``. Unreachable
        peers and malformed answers are logged and skipped for that round.

        Yields:
            ``(peer_url, map_state)`` pairs
        """
        while True:
            for url in peer_urls:
                try:
                    state = self.fetch(url)
                except (TransportError, MalformedStateError) as e:
                    logger.warning("Skipping %s this round: %s", url, e)
                    continue
                yield url, state
            sleep(interval)
