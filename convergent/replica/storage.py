"""
JSON file persistence of a map state.
"""

import json
import logging
import os
import tempfile
from typing import Optional

from ..crdt.lww_map import MapState
from ..crdt.wire import MalformedStateError, map_state_from_wire, map_state_to_wire

logger = logging.getLogger(__name__)


class JsonFileStorage:
    """
    Stores a map state, tombstones included, as one JSON document.

    Args:
        path: File to read from and write to
    """

    def __init__(self, path: str):
        self.path = path

    def load(self) -> Optional[MapState]:
        """
        Load the saved state.

        Returns:
            The saved map state, or None if nothing was saved yet

        Raises:
            MalformedStateError: If the file does not hold a map state
        """
        if not os.path.exists(self.path):
            return None
        with open(self.path, 'r', encoding='utf-8') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise MalformedStateError(f"{self.path} is not valid JSON: {e}") from e
        state = map_state_from_wire(data)
        logger.debug("Loaded %d entries from %s", len(state), self.path)
        return state

    def save(self, state: MapState) -> None:
        """
        Write the state, replacing the previous file atomically.

        Raises:
            OSError: If the file cannot be written
        """
        directory = os.path.dirname(os.path.abspath(self.path))
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.state-', suffix='.json')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(map_state_to_wire(state), f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
        logger.debug("Saved %d entries to %s", len(state), self.path)
