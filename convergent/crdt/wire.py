"""
Wire form of register and map states.

States cross the process boundary as plain JSON-compatible data:

    register state:  {"writer_id": "A", "timestamp": 3, "value": ...}
    map state:       {"key": {"writer_id": "A", "timestamp": 3,
                              "value": {"tag": "present", "value": ...}}}

A deleted map entry carries ``{"tag": "absent"}`` as its value, which no
application value can be mistaken for. Incoming data is validated here,
so the merge functions only ever see well-formed states.
"""

from typing import Annotated, Any, Dict, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, TypeAdapter, ValidationError

from .clock import MAX_TIMESTAMP
from .lww_register import RegisterState
from .option import ABSENT, Option, Present

# Peer ids travel as strings; every replica of a cluster compares them lexicographically.
PeerIdField = StrictStr
TimestampField = Annotated[StrictInt, Field(ge=0, le=MAX_TIMESTAMP)]


class MalformedStateError(ValueError):
    """Raised when incoming data does not have the shape of a state."""

    def __init__(self, message: str, errors: list = None):
        super().__init__(message)
        self.errors = errors or []


class RegisterStateModel(BaseModel):
    model_config = ConfigDict(extra='forbid')

    writer_id: PeerIdField
    timestamp: TimestampField
    value: Any


class PresentModel(BaseModel):
    model_config = ConfigDict(extra='forbid')

    tag: Literal['present']
    value: Any


class AbsentModel(BaseModel):
    model_config = ConfigDict(extra='forbid')

    tag: Literal['absent']


OptionModel = Annotated[Union[PresentModel, AbsentModel], Field(discriminator='tag')]


class MapEntryModel(RegisterStateModel):
    value: OptionModel


_map_state_adapter = TypeAdapter(Dict[str, MapEntryModel])


def _malformed(what: str, error: ValidationError) -> MalformedStateError:
    errors = [
        {'loc': [str(part) for part in err['loc']], 'msg': err['msg'], 'type': err['type']}
        for err in error.errors()
    ]
    return MalformedStateError(
        f"malformed {what}: {error.error_count()} validation error(s)",
        errors
    )


def option_to_wire(option: Option) -> Dict[str, Any]:
    if isinstance(option, Present):
        return {'tag': 'present', 'value': option.value}
    return {'tag': 'absent'}


def register_state_to_wire(state: RegisterState) -> Dict[str, Any]:
    return {
        'writer_id': state.writer_id,
        'timestamp': state.timestamp,
        'value': state.value
    }


def register_state_from_wire(data: Any) -> RegisterState:
    """
    Validate and decode a register state.

    Raises:
        MalformedStateError: If ``data`` is not a well-formed register state
    """
    try:
        model = RegisterStateModel.model_validate(data)
    except ValidationError as e:
        raise _malformed("register state", e) from e
    return RegisterState(model.writer_id, model.timestamp, model.value)


def map_state_to_wire(state: Dict[str, RegisterState[Option]]) -> Dict[str, Any]:
    return {
        key: {
            'writer_id': register_state.writer_id,
            'timestamp': register_state.timestamp,
            'value': option_to_wire(register_state.value)
        }
        for key, register_state in state.items()
    }


def map_state_from_wire(data: Any) -> Dict[str, RegisterState[Option]]:
    """
    Validate and decode a map state, tombstones included.

    Raises:
        MalformedStateError: If ``data`` is not a well-formed map state
    """
    try:
        entries = _map_state_adapter.validate_python(data)
    except ValidationError as e:
        raise _malformed("map state", e) from e

    state = {}
    for key, entry in entries.items():
        if isinstance(entry.value, PresentModel):
            option = Present(entry.value.value)
        else:
            option = ABSENT
        state[key] = RegisterState(entry.writer_id, entry.timestamp, option)
    return state
