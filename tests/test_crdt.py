"""
Unit tests for CRDT implementations.
"""

import pytest
import sys
import os
from itertools import permutations

# Add project root to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from convergent.crdt.clock import MAX_TIMESTAMP, Stamp, compare, is_newer, newer
from convergent.crdt.g_counter import GCounter
from convergent.crdt.lww_map import LWWMap, merge_map_states
from convergent.crdt.lww_register import LWWRegister, RegisterState, merge_register_states
from convergent.crdt.option import ABSENT, Present, is_present, unwrap


class TestClock:
    """Tests for the (timestamp, peer_id) comparator."""

    def test_larger_timestamp_is_newer(self):
        """A larger timestamp wins whatever the peer ids."""
        assert is_newer(Stamp(2, "A"), Stamp(1, "Z"))
        assert not is_newer(Stamp(1, "Z"), Stamp(2, "A"))

    def test_equal_timestamp_larger_peer_is_newer(self):
        """On equal timestamps the larger peer id breaks the tie."""
        assert is_newer(Stamp(1, "B"), Stamp(1, "A"))
        assert not is_newer(Stamp(1, "A"), Stamp(1, "B"))

    def test_integer_peer_ids(self):
        """Integer peer ids are ordered numerically."""
        assert is_newer(Stamp(3, 10), Stamp(3, 9))

    def test_compare(self):
        assert compare(Stamp(1, "A"), Stamp(1, "A")) == 0
        assert compare(Stamp(1, "B"), Stamp(1, "A")) == 1
        assert compare(Stamp(1, "A"), Stamp(2, "A")) == -1

    def test_equal_stamps_are_not_newer(self):
        """A stamp is never newer than itself."""
        assert not is_newer(Stamp(4, "A"), Stamp(4, "A"))

    def test_newer(self):
        assert newer(Stamp(1, "A"), Stamp(1, "B")) == Stamp(1, "B")
        assert newer(Stamp(5, "A"), Stamp(1, "B")) == Stamp(5, "A")


class TestOption:
    """Tests for the present/absent tag."""

    def test_present_equality(self):
        assert Present(42) == Present(42)
        assert Present(42) != Present(43)
        assert Present(None) != ABSENT

    def test_absent_is_singleton(self):
        assert type(ABSENT)() is ABSENT
        assert not ABSENT

    def test_unwrap(self):
        assert unwrap(Present("x")) == "x"
        assert unwrap(ABSENT) is None
        assert unwrap(ABSENT, "default") == "default"
        assert is_present(Present(0))
        assert not is_present(ABSENT)


class TestLWWRegister:
    """Tests for LWW-Register CRDT."""

    def test_initial_value(self):
        """A fresh register holds its first write at timestamp 1."""
        register = LWWRegister.initial("A", "x")

        assert register.value() == "x"
        assert register.state() == RegisterState("A", 1, "x")

    def test_set_increments_timestamp(self):
        """Each local write bumps the timestamp by exactly one."""
        register = LWWRegister.initial("A", "x")

        register = register.set("y")
        register = register.set("z")

        assert register.value() == "z"
        assert register.state() == RegisterState("A", 3, "z")

    def test_set_returns_new_register(self):
        """Writes leave the previous snapshot untouched."""
        original = LWWRegister.initial("A", "x")

        updated = original.set("y")

        assert original.value() == "x"
        assert original.timestamp == 1
        assert updated.value() == "y"

    def test_set_after_adopting_remote_write(self):
        """The next timestamp follows the state in hand, even if another peer wrote it."""
        register = LWWRegister("A", RegisterState("B", 7, "remote"))

        register = register.set("local")

        assert register.state() == RegisterState("A", 8, "local")

    def test_set_at_clock_limit_raises(self):
        register = LWWRegister("A", RegisterState("A", MAX_TIMESTAMP, "x"))

        with pytest.raises(OverflowError):
            register.set("y")

    def test_merge_tie_broken_by_peer_id(self):
        """Equal timestamps resolve to the larger peer id on both sides."""
        r1 = LWWRegister.initial("A", "x")
        r2 = LWWRegister.initial("B", "y")

        merged_on_a = r1.merge(r2.state())
        merged_on_b = r2.merge(r1.state())

        assert merged_on_a.state() == RegisterState("B", 1, "y")
        assert merged_on_b.state() == merged_on_a.state()

    def test_merge_ignores_older_remote(self):
        """A remote state with a smaller timestamp leaves the register unchanged."""
        register = LWWRegister("A", RegisterState("A", 5, 10))

        merged = register.merge(RegisterState("B", 3, 99))

        assert merged.state() == RegisterState("A", 5, 10)

    def test_merge_adopts_newer_remote_verbatim(self):
        """The winning remote state keeps its own writer and timestamp."""
        register = LWWRegister("A", RegisterState("A", 2, "old"))

        merged = register.merge(RegisterState("C", 4, "new"))

        assert merged.state() == RegisterState("C", 4, "new")
        assert merged.node_id == "A"

    def test_merge_identical_state_is_noop(self):
        register = LWWRegister.initial("A", "x").set("y")

        assert register.merge(register.state()) == register

    def test_merge_register_states_prefers_local_on_equal_stamp(self):
        local = RegisterState("A", 1, "x")

        assert merge_register_states(local, RegisterState("A", 1, "x")) is local

    def test_to_dict_from_dict_roundtrip(self):
        original = LWWRegister("A", RegisterState("B", 3, {"lat": 1.5}))

        restored = LWWRegister.from_dict(original.to_dict())

        assert original.to_dict()['type'] == 'LWWRegister'
        assert restored == original


class TestLWWMap:
    """Tests for LWW-Map CRDT."""

    def test_set_and_get(self):
        """Test basic set and get operations."""
        lww_map = LWWMap("A").set("key1", "value1")

        assert lww_map.get("key1") == Present("value1")
        assert lww_map.has("key1")
        assert lww_map.value() == {"key1": "value1"}

    def test_get_missing(self):
        """Unknown keys read as ABSENT."""
        lww_map = LWWMap("A")

        assert lww_map.get("nonexistent") is ABSENT
        assert not lww_map.has("nonexistent")
        assert "nonexistent" not in lww_map

    def test_new_key_seeded_at_timestamp_one(self):
        lww_map = LWWMap("A").set("loc", 42)

        assert lww_map.state() == {"loc": RegisterState("A", 1, Present(42))}

    def test_overwrite_increments_key_timestamp(self):
        lww_map = LWWMap("A").set("loc", 1).set("loc", 2)

        assert lww_map.value() == {"loc": 2}
        assert lww_map.register("loc").timestamp == 2

    def test_keys_have_independent_clocks(self):
        lww_map = LWWMap("A").set("a", 1).set("a", 2).set("b", 3)

        assert lww_map.register("a").timestamp == 2
        assert lww_map.register("b").timestamp == 1

    def test_delete_leaves_tombstone(self):
        """A delete is a write of ABSENT that stays in the state."""
        lww_map = LWWMap("A").set("loc", 42).delete("loc")

        assert lww_map.value() == {}
        assert lww_map.get("loc") is ABSENT
        assert lww_map.tombstones() == ["loc"]
        assert lww_map.state() == {"loc": RegisterState("A", 2, ABSENT)}
        assert len(lww_map) == 0

    def test_delete_unknown_key_is_noop(self):
        """Deleting a key never seen creates no tombstone."""
        lww_map = LWWMap("A").set("a", 1)

        result = lww_map.delete("never-seen")

        assert result.state() == lww_map.state()
        assert result.tombstones() == []

    def test_set_after_delete_revives_key(self):
        lww_map = LWWMap("A").set("loc", 1).delete("loc").set("loc", 2)

        assert lww_map.get("loc") == Present(2)
        assert lww_map.register("loc").timestamp == 3

    def test_operations_do_not_mutate_snapshot(self):
        original = LWWMap("A").set("a", 1)

        original.set("a", 2)
        original.delete("a")
        original.merge({"b": RegisterState("B", 1, Present(3))})

        assert original.value() == {"a": 1}

    def test_state_does_not_alias_internals(self):
        lww_map = LWWMap("A").set("a", 1)

        state = lww_map.state()
        state["b"] = RegisterState("B", 1, Present(2))

        assert not lww_map.has("b")

    def test_tombstone_survives_stale_set(self):
        """A stale write merged after a delete does not resurrect the key."""
        peer_a = LWWMap("A").set("loc", 42)
        peer_b = LWWMap("B").merge(peer_a.state())

        peer_a = peer_a.delete("loc")
        peer_a = peer_a.merge(peer_b.state())

        assert not peer_a.has("loc")
        assert peer_a.state()["loc"] == RegisterState("A", 2, ABSENT)

    def test_tombstone_survives_stale_set_from_losing_peer(self):
        """Equal timestamp with a smaller peer id loses against the tombstone."""
        lww_map = LWWMap("B", {"loc": LWWRegister("B", RegisterState("B", 2, ABSENT))})

        lww_map = lww_map.merge({"loc": RegisterState("A", 2, Present(1))})

        assert not lww_map.has("loc")

    def test_newer_concurrent_write_overrides_delete(self):
        """A delete is an ordinary write and loses to a newer one."""
        lww_map = LWWMap("A").set("loc", 1).delete("loc")

        lww_map = lww_map.merge({"loc": RegisterState("B", 3, Present(7))})

        assert lww_map.get("loc") == Present(7)

    def test_empty_map_absorbs_remote_key(self):
        """Keys unknown locally are adopted with the remote writer and timestamp."""
        lww_map = LWWMap("A")

        merged = lww_map.merge({"count": RegisterState("B", 1, Present(7))})

        assert merged.value()["count"] == 7
        assert merged.state()["count"] == RegisterState("B", 1, Present(7))

    def test_merge_leaves_local_only_keys(self):
        lww_map = LWWMap("A").set("mine", 1)

        merged = lww_map.merge({"theirs": RegisterState("B", 1, Present(2))})

        assert merged.value() == {"mine": 1, "theirs": 2}

    def test_merge_multiple_keys(self):
        """Test merging maps with multiple keys."""
        map1 = LWWMap("A").set("key1", "a").set("key1", "a2").set("key2", "a")
        map2 = LWWMap("B").set("key1", "b").set("key2", "b").set("key3", "b")

        merged = map1.merge(map2.state())

        assert merged.get("key1") == Present("a2")   # ts 2 beats ts 1
        assert merged.get("key2") == Present("b")    # tie, B > A
        assert merged.get("key3") == Present("b")    # only in map2

    def test_three_peers_converge_in_every_order(self):
        """Concurrent writes of one key converge whatever the merge order."""
        replicas = {
            "A": LWWMap("A").set("k", "a"),
            "B": LWWMap("B").set("k", "b"),
            "C": LWWMap("C").set("k", "c"),
        }

        results = []
        for order in permutations("ABC"):
            first, second, third = (replicas[p] for p in order)
            results.append(first.merge(second.state()).merge(third.state()).state())
            results.append(merge_map_states(
                first.state(), merge_map_states(second.state(), third.state())
            ))

        assert all(result == results[0] for result in results)
        assert results[0] == {"k": RegisterState("C", 1, Present("c"))}

    def test_to_dict_from_dict_roundtrip(self):
        original = LWWMap("A").set("a", 1).set("b", [1, 2]).delete("a")

        data = original.to_dict()
        restored = LWWMap.from_dict(data)

        assert data['type'] == 'LWWMap'
        assert data['state']['a']['value'] == {'tag': 'absent'}
        assert restored == original

    def test_repr_and_iteration(self):
        lww_map = LWWMap("A").set("a", 1).set("b", 2).delete("b")

        assert list(lww_map) == ["a"]
        assert "tombstones=1" in repr(lww_map)


class TestGCounter:
    """Tests for G-Counter CRDT."""

    def test_increment_and_value(self):
        """Test basic increment and value operations."""
        counter = GCounter("node1")
        assert counter.value() == 0

        counter = counter.increment(5)
        assert counter.value() == 5

        counter = counter.increment(3)
        assert counter.value() == 8

    def test_increment_returns_new_counter(self):
        counter = GCounter("node1")

        counter.increment(5)

        assert counter.value() == 0

    def test_two_counters_merge(self):
        """Create two counters, increment each, merge, and verify sum."""
        counter1 = GCounter("node1").increment(10)
        counter2 = GCounter("node2").increment(7)

        merged = counter1.merge(counter2.state())

        assert merged.value() == 17

    def test_merge_takes_max_per_node(self):
        counter1 = GCounter("node1").increment(5)
        counter2 = GCounter("node2", {"node1": 2, "node2": 3})

        merged = counter1.merge(counter2.state())

        # node1: max(5, 2) = 5, node2: max(0, 3) = 3
        assert merged.value() == 8
        assert merged.state() == {"node1": 5, "node2": 3}

    def test_to_dict_from_dict_roundtrip(self):
        original = GCounter("node1").increment(15)

        restored = GCounter.from_dict(original.to_dict())

        assert restored == original

    def test_increment_negative_raises_error(self):
        """Test that incrementing with negative value raises error."""
        counter = GCounter("node1")

        with pytest.raises(ValueError):
            counter.increment(-1)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
