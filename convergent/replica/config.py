"""
Command line configuration of a replica service.
"""

import argparse
from dataclasses import dataclass, field
from typing import List, Optional, Sequence


@dataclass
class ReplicaConfig:
    """
    Settings of one replica process.

    The node id is the replica's peer id for its whole lifetime; it must
    be unique across the cluster.
    """
    node_id: str = "replica-1"
    host: str = "0.0.0.0"
    port: int = 8001
    peers: List[str] = field(default_factory=list)
    state_file: Optional[str] = None
    sync_timeout: float = 10.0
    log_level: str = "INFO"

    def __post_init__(self):
        if not self.node_id:
            raise ValueError("node_id must not be empty")
        if self.sync_timeout <= 0:
            raise ValueError("sync_timeout must be positive")
        self.peers = [url.rstrip('/') for url in self.peers]

    @classmethod
    def from_args(cls, argv: Optional[Sequence[str]] = None) -> 'ReplicaConfig':
        parser = argparse.ArgumentParser(description="CRDT Replica Server")
        parser.add_argument("--node-id", type=str, default="replica-1", help="Unique peer ID of this replica")
        parser.add_argument("--host", type=str, default="0.0.0.0", help="Interface to bind")
        parser.add_argument("--port", type=int, default=8001, help="Port to run server on")
        parser.add_argument("--peer", dest="peers", action="append", default=[],
                            help="Base URL of another replica (repeatable)")
        parser.add_argument("--state-file", type=str, default=None,
                            help="JSON file the map state is loaded from and saved to")
        parser.add_argument("--sync-timeout", type=float, default=10.0,
                            help="Seconds to wait for a peer during sync")
        parser.add_argument("--log-level", type=str, default="INFO",
                            choices=["DEBUG", "INFO", "WARNING", "ERROR"])

        args = parser.parse_args(argv)
        return cls(
            node_id=args.node_id,
            host=args.host,
            port=args.port,
            peers=args.peers,
            state_file=args.state_file,
            sync_timeout=args.sync_timeout,
            log_level=args.log_level,
        )
