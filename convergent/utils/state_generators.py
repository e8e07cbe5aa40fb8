"""
Random state generators for fuzzing merge functions.

Every generator takes a ``random.Random`` so a failing sample can be
replayed from its seed. Generated states never contain two different
values under the same ``(writer_id, timestamp)`` stamp: unique peer ids
are a precondition of last-write-wins convergence, and states breaking it
are not reachable.
"""

import random
from itertools import product
from typing import Dict, List, Sequence, Tuple

from ..crdt.g_counter import CounterState
from ..crdt.lww_map import LWWMap, MapState
from ..crdt.lww_register import LWWRegister, RegisterState
from ..crdt.option import ABSENT, Option, Present

DEFAULT_PEERS = ('A', 'B', 'C')
DEFAULT_KEYS = ('loc', 'count', 'name', 'color')


def _stamps(peers: Sequence, max_timestamp: int) -> List[Tuple[int, str]]:
    return list(product(range(1, max_timestamp + 1), peers))


def random_register_states(rng: random.Random, count: int = 8,
                           peers: Sequence = DEFAULT_PEERS,
                           max_timestamp: int = 4) -> List[RegisterState[str]]:
    """
    Draw register states with distinct stamps.

    The value of each state is derived from its stamp, so equal stamps
    always carry equal values.
    """
    stamps = _stamps(peers, max_timestamp)
    chosen = rng.sample(stamps, min(count, len(stamps)))
    return [RegisterState(peer, ts, f"{peer}{ts}") for ts, peer in chosen]


def _option_catalogue(rng: random.Random, keys: Sequence, peers: Sequence,
                      max_timestamp: int) -> Dict[Tuple[str, int, str], Option]:
    catalogue = {}
    for key in keys:
        for ts, peer in _stamps(peers, max_timestamp):
            if rng.random() < 0.25:
                catalogue[(key, ts, peer)] = ABSENT
            else:
                catalogue[(key, ts, peer)] = Present(rng.randint(0, 99))
    return catalogue


def random_map_states(rng: random.Random, count: int = 6,
                      keys: Sequence[str] = DEFAULT_KEYS,
                      peers: Sequence = DEFAULT_PEERS,
                      max_timestamp: int = 3) -> List[MapState]:
    """
    Draw map states over a shared key space, tombstones included.

    Options are looked up in a catalogue fixed per call, so the same
    ``(key, writer_id, timestamp)`` means the same entry in every state.
    """
    catalogue = _option_catalogue(rng, keys, peers, max_timestamp)
    stamps = _stamps(peers, max_timestamp)
    states = []
    for _ in range(count):
        state = {}
        for key in keys:
            if rng.random() < 0.3:
                continue
            ts, peer = rng.choice(stamps)
            state[key] = RegisterState(peer, ts, catalogue[(key, ts, peer)])
        states.append(state)
    return states


def random_counter_states(rng: random.Random, count: int = 6,
                          peers: Sequence = DEFAULT_PEERS,
                          max_count: int = 10) -> List[CounterState]:
    states = []
    for _ in range(count):
        states.append({
            peer: rng.randint(0, max_count)
            for peer in peers
            if rng.random() < 0.7
        })
    return states


def simulate_register_replicas(rng: random.Random, steps: int = 30,
                               peers: Sequence = DEFAULT_PEERS) -> List[RegisterState[int]]:
    """
    Run random writes and merges on one register replicated across peers.

    Returns:
        Every state the replicas passed through, in order
    """
    replicas = {peer: LWWRegister.initial(peer, 0) for peer in peers}
    seen = [replica.state() for replica in replicas.values()]
    for _ in range(steps):
        peer = rng.choice(peers)
        if rng.random() < 0.5:
            replicas[peer] = replicas[peer].set(rng.randint(0, 99))
        else:
            source = rng.choice(peers)
            replicas[peer] = replicas[peer].merge(replicas[source].state())
        seen.append(replicas[peer].state())
    return seen


def simulate_map_replicas(rng: random.Random, steps: int = 40,
                          keys: Sequence[str] = DEFAULT_KEYS,
                          peers: Sequence = DEFAULT_PEERS) -> List[MapState]:
    """
    Run random sets, deletes and merges on maps replicated across peers.

    Returns:
        Every map state the replicas passed through, in order
    """
    replicas = {peer: LWWMap(peer) for peer in peers}
    seen = []
    for _ in range(steps):
        peer = rng.choice(peers)
        roll = rng.random()
        if roll < 0.45:
            replicas[peer] = replicas[peer].set(rng.choice(keys), rng.randint(0, 99))
        elif roll < 0.65:
            replicas[peer] = replicas[peer].delete(rng.choice(keys))
        else:
            source = rng.choice(peers)
            replicas[peer] = replicas[peer].merge(replicas[source].state())
        seen.append(replicas[peer].state())
    return seen
