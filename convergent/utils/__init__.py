"""Utility modules for convergent."""

from .state_generators import (
    random_register_states,
    random_map_states,
    random_counter_states,
    simulate_map_replicas,
    simulate_register_replicas,
)

__all__ = [
    'random_register_states',
    'random_map_states',
    'random_counter_states',
    'simulate_map_replicas',
    'simulate_register_replicas',
]
