"""
FastAPI service exposing one replica's LWW-Map.

Run with:
    python -m convergent.replica.server --node-id A --port 8001 \
        --peer http://localhost:8002 --peer http://localhost:8003
"""

import logging
from typing import Any, Optional, Sequence

import uvicorn
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from ..crdt.option import unwrap
from ..crdt.wire import MalformedStateError
from .config import ReplicaConfig
from .node import Replica
from .storage import JsonFileStorage
from .transport import HttpTransport

logger = logging.getLogger(__name__)


# Global variables
app = FastAPI(title="convergent replica")
replica: Optional[Replica] = None
config: Optional[ReplicaConfig] = None


# Pydantic models
class CRDTSyncRequest(BaseModel):
    crdt_state: dict


class ValueUpdate(BaseModel):
    value: Any


def configure(new_config: ReplicaConfig, transport: Optional[HttpTransport] = None) -> Replica:
    """Build the replica served by ``app`` from configuration."""
    global replica, config

    storage = JsonFileStorage(new_config.state_file) if new_config.state_file else None
    if transport is None:
        transport = HttpTransport(timeout=new_config.sync_timeout)

    config = new_config
    replica = Replica(new_config.node_id, storage=storage, transport=transport, peers=new_config.peers)
    return replica


def _replica() -> Replica:
    if replica is None:
        raise HTTPException(status_code=503, detail="replica not configured")
    return replica


# FastAPI Endpoints
@app.get("/health")
def health_check():
    """Health check endpoint."""
    node = _replica()
    return {"status": "healthy", "node_id": node.node_id, "port": config.port}


@app.get("/crdt/state")
def get_crdt_state():
    """Return the full map state, tombstones included."""
    return _replica().wire_state()


@app.get("/crdt/summary")
def get_crdt_summary():
    """Return CRDT state summary."""
    return _replica().get_summary()


@app.post("/crdt/sync")
def sync_crdt(request: CRDTSyncRequest):
    """Receive and merge map state from another replica."""
    node = _replica()
    try:
        node.merge_wire(request.crdt_state)
    except MalformedStateError as e:
        logger.warning("[%s] Rejected sync payload: %s", node.node_id, e)
        raise HTTPException(status_code=400, detail={"message": str(e), "errors": e.errors})
    return {"status": "synced", "entries": len(node.map)}


@app.get("/keys")
def list_values():
    """Return the live entries of the map."""
    return _replica().value()


@app.get("/keys/{key}")
def get_value(key: str):
    node = _replica()
    if not node.has(key):
        raise HTTPException(status_code=404, detail=f"key {key!r} not found")
    return {"key": key, "value": unwrap(node.get(key))}


@app.put("/keys/{key}")
def set_value(key: str, update: ValueUpdate):
    """Set a key locally, then push the new state to the peers."""
    node = _replica()
    snapshot = node.set(key, update.value)
    synced = node.push_to_peers()
    return {"key": key, "timestamp": snapshot.register(key).timestamp, "synced": synced}


@app.delete("/keys/{key}")
def delete_value(key: str):
    """Delete a key locally, then push the tombstone to the peers."""
    node = _replica()
    if node.map.register(key) is None:
        raise HTTPException(status_code=404, detail=f"key {key!r} was never set")
    snapshot = node.delete(key)
    synced = node.push_to_peers()
    return {"key": key, "timestamp": snapshot.register(key).timestamp, "synced": synced}


def main(argv: Optional[Sequence[str]] = None) -> None:
    new_config = ReplicaConfig.from_args(argv)
    logging.basicConfig(
        level=new_config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    node = configure(new_config)
    node.pull_from_peers()
    logger.info("Replica %s started on port %d with peers %s",
                new_config.node_id, new_config.port, new_config.peers)

    uvicorn.run(app, host=new_config.host, port=new_config.port)


if __name__ == "__main__":
    main()
