"""CRDT module for conflict-free replicated data types."""

from .base import CRDT
from .clock import Stamp, compare, is_newer, newer
from .option import ABSENT, Option, Present, is_present, unwrap
from .lww_register import LWWRegister, RegisterState, merge_register_states
from .lww_map import LWWMap, MapState, merge_map_states
from .g_counter import GCounter, merge_counter_states
from .properties import ConvergenceChecker, PropertyViolation
from .wire import (
    MalformedStateError,
    map_state_from_wire,
    map_state_to_wire,
    register_state_from_wire,
    register_state_to_wire,
)

__all__ = [
    'CRDT', 'Stamp', 'compare', 'is_newer', 'newer',
    'ABSENT', 'Option', 'Present', 'is_present', 'unwrap',
    'LWWRegister', 'RegisterState', 'merge_register_states',
    'LWWMap', 'MapState', 'merge_map_states',
    'GCounter', 'merge_counter_states',
    'ConvergenceChecker', 'PropertyViolation',
    'MalformedStateError', 'map_state_from_wire', 'map_state_to_wire',
    'register_state_from_wire', 'register_state_to_wire',
]
