"""Replica service: owns one LWW-Map and exchanges its state with peers."""

from .config import ReplicaConfig
from .node import Replica
from .storage import JsonFileStorage
from .transport import HttpTransport, TransportError

__all__ = ['ReplicaConfig', 'Replica', 'JsonFileStorage', 'HttpTransport', 'TransportError']
