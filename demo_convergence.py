"""
In-process convergence demo.

Three replicas write and delete keys independently, then exchange their
states over a simulated network that shuffles and duplicates deliveries.
Every replica ends with the same map.
"""

import argparse
import logging
import random

from convergent.crdt import ConvergenceChecker, LWWMap, merge_map_states
from convergent.utils import random_map_states

logger = logging.getLogger("demo_convergence")

PEERS = ['A', 'B', 'C']
KEYS = ['loc', 'count', 'name', 'color', 'size']


def print_banner():
    print("\n" + "=" * 60)
    print("       LWW-Map Convergence Demo")
    print("=" * 60)
    print("\nThis demo showcases:")
    print("  - Independent writes and deletes on three replicas")
    print("  - Out-of-order, duplicated state delivery")
    print("  - Merge laws checked on random states")
    print("=" * 60 + "\n")


def print_replicas(title, replicas):
    print(f"\n--- {title} ---")
    for peer, lww_map in replicas.items():
        print(f"  {peer}: {lww_map.value()}  tombstones={sorted(lww_map.tombstones())}")


def step1_local_writes(rng, replicas, writes):
    print("\n" + "=" * 60)
    print(f"STEP 1: {writes} Local Writes per Replica")
    print("=" * 60)

    for peer in PEERS:
        for _ in range(writes):
            key = rng.choice(KEYS)
            if rng.random() < 0.25:
                replicas[peer] = replicas[peer].delete(key)
                logger.debug("%s deleted %s", peer, key)
            else:
                value = rng.randint(0, 99)
                replicas[peer] = replicas[peer].set(key, value)
                logger.debug("%s set %s=%s", peer, key, value)

    print_replicas("Diverged replicas", replicas)


def step2_exchange(rng, replicas, duplicates):
    print("\n" + "=" * 60)
    print("STEP 2: Exchanging States over an Unreliable Network")
    print("=" * 60)

    outbox = [
        (sender, receiver, replicas[sender].state())
        for sender in PEERS
        for receiver in PEERS
        if sender != receiver
    ]
    deliveries = outbox + [rng.choice(outbox) for _ in range(duplicates)]
    rng.shuffle(deliveries)

    print(f"\nDelivering {len(deliveries)} messages ({duplicates} duplicates) in random order")
    for sender, receiver, state in deliveries:
        replicas[receiver] = replicas[receiver].merge(state)

    print_replicas("Merged replicas", replicas)

    states = [replicas[peer].state() for peer in PEERS]
    converged = all(state == states[0] for state in states)
    print(f"\nConverged: {'YES' if converged else 'NO'}")
    return converged


def step3_check_laws(rng, samples):
    print("\n" + "=" * 60)
    print("STEP 3: Checking Merge Laws")
    print("=" * 60)

    checker = ConvergenceChecker(merge_map_states)
    states = random_map_states(rng, count=samples, keys=KEYS, peers=PEERS)
    violations = checker.find_violations(states)

    print(f"\nChecked {samples} states, {samples ** 2} pairs, {samples ** 3} triples")
    if violations:
        for violation in violations[:5]:
            print(f"  [-] {violation.law} violated by {violation.operands}")
    else:
        print("  [+] idempotence, commutativity and associativity hold")
    return not violations


def main():
    parser = argparse.ArgumentParser(description="LWW-Map convergence demo")
    parser.add_argument("--seed", type=int, default=7, help="Random seed")
    parser.add_argument("--writes", type=int, default=6, help="Local writes per replica")
    parser.add_argument("--duplicates", type=int, default=4, help="Duplicated deliveries")
    parser.add_argument("--samples", type=int, default=6, help="States drawn for the law check")
    parser.add_argument("--verbose", action="store_true", help="Log every local write")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    rng = random.Random(args.seed)
    replicas = {peer: LWWMap(peer) for peer in PEERS}

    print_banner()
    step1_local_writes(rng, replicas, args.writes)
    converged = step2_exchange(rng, replicas, args.duplicates)
    laws_hold = step3_check_laws(rng, args.samples)

    print("\n" + "=" * 60)
    print("Demo complete" if converged and laws_hold else "Demo found a convergence bug")
    print("=" * 60 + "\n")


if __name__ == "__main__":
    main()
