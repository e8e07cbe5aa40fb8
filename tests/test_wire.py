"""
Tests for the wire codec and its validation of incoming states.
"""

import json
import pytest
import sys
import os

# Add project root to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from convergent.crdt.clock import MAX_TIMESTAMP
from convergent.crdt.lww_map import LWWMap
from convergent.crdt.lww_register import RegisterState
from convergent.crdt.option import ABSENT, Present
from convergent.crdt.wire import (
    MalformedStateError,
    map_state_from_wire,
    map_state_to_wire,
    register_state_from_wire,
    register_state_to_wire,
)


class TestRegisterStateWire:
    """Tests for register state encoding and validation."""

    def test_to_wire(self):
        assert register_state_to_wire(RegisterState("A", 3, "x")) == {
            'writer_id': 'A',
            'timestamp': 3,
            'value': 'x'
        }

    def test_from_wire(self):
        state = register_state_from_wire({'writer_id': 'B', 'timestamp': 0, 'value': [1, 2]})

        assert state == RegisterState("B", 0, [1, 2])

    def test_integer_writer_id_rejected(self):
        """Peer ids are strings on the wire; a number could not be ordered against them."""
        with pytest.raises(MalformedStateError):
            register_state_from_wire({'writer_id': 7, 'timestamp': 1, 'value': None})

    def test_integer_writer_id_rejected_in_map_state(self):
        with pytest.raises(MalformedStateError):
            map_state_from_wire({'k': {'writer_id': 7, 'timestamp': 1, 'value': {'tag': 'absent'}}})

    @pytest.mark.parametrize("data", [
        {'timestamp': 1, 'value': 'x'},
        {'writer_id': 'A', 'value': 'x'},
        {'writer_id': 'A', 'timestamp': 1},
        {'writer_id': 'A', 'timestamp': '1', 'value': 'x'},
        {'writer_id': 'A', 'timestamp': 1.5, 'value': 'x'},
        {'writer_id': 'A', 'timestamp': True, 'value': 'x'},
        {'writer_id': 'A', 'timestamp': -1, 'value': 'x'},
        {'writer_id': 'A', 'timestamp': MAX_TIMESTAMP + 1, 'value': 'x'},
        {'writer_id': None, 'timestamp': 1, 'value': 'x'},
        {'writer_id': 'A', 'timestamp': 1, 'value': 'x', 'extra': 1},
        ['A', 1, 'x'],
        "not a state",
    ])
    def test_malformed_input_rejected(self, data):
        with pytest.raises(MalformedStateError) as exc_info:
            register_state_from_wire(data)

        assert exc_info.value.errors

    def test_malformed_error_is_value_error(self):
        with pytest.raises(ValueError):
            register_state_from_wire({})


class TestMapStateWire:
    """Tests for map state encoding and validation."""

    def test_present_and_absent_encoding(self):
        state = {
            'loc': RegisterState("A", 2, ABSENT),
            'count': RegisterState("B", 1, Present(7)),
        }

        wire = map_state_to_wire(state)

        assert wire == {
            'loc': {'writer_id': 'A', 'timestamp': 2, 'value': {'tag': 'absent'}},
            'count': {'writer_id': 'B', 'timestamp': 1, 'value': {'tag': 'present', 'value': 7}},
        }

    def test_null_value_is_not_a_tombstone(self):
        """A present None stays distinguishable from a deleted entry."""
        state = {'k': RegisterState("A", 1, Present(None))}

        decoded = map_state_from_wire(json.loads(json.dumps(map_state_to_wire(state))))

        assert decoded['k'].value == Present(None)
        assert decoded['k'].value is not ABSENT

    def test_survives_json_transport(self):
        lww_map = LWWMap("A").set("a", {"lat": 1.0}).set("b", 2).delete("b")

        decoded = map_state_from_wire(json.loads(json.dumps(map_state_to_wire(lww_map.state()))))

        assert decoded == lww_map.state()

    def test_empty_map_state(self):
        assert map_state_from_wire({}) == {}

    @pytest.mark.parametrize("data", [
        {'k': {'writer_id': 'A', 'timestamp': 1, 'value': 7}},
        {'k': {'writer_id': 'A', 'timestamp': 1, 'value': {'tag': 'maybe'}}},
        {'k': {'writer_id': 'A', 'timestamp': 1, 'value': {'tag': 'present'}}},
        {'k': {'writer_id': 'A', 'timestamp': 1, 'value': {'tag': 'absent', 'value': 1}}},
        {'k': {'timestamp': 1, 'value': {'tag': 'absent'}}},
        {'k': None},
        [],
    ])
    def test_malformed_input_rejected(self, data):
        with pytest.raises(MalformedStateError):
            map_state_from_wire(data)

    def test_errors_point_at_offending_key(self):
        data = {
            'good': {'writer_id': 'A', 'timestamp': 1, 'value': {'tag': 'absent'}},
            'bad': {'writer_id': 'A', 'timestamp': -5, 'value': {'tag': 'absent'}},
        }

        with pytest.raises(MalformedStateError) as exc_info:
            map_state_from_wire(data)

        assert exc_info.value.errors[0]['loc'][0] == 'bad'
        json.dumps(exc_info.value.errors)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
