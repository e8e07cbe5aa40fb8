"""
Present/absent tag for LWW-Map values.

The absent variant is the tombstone: it records that a key was deleted
while the surrounding register keeps its writer and timestamp.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar('T')


@dataclass(frozen=True)
class Present(Generic[T]):
    """A value that is present."""
    value: T


class _Absent:
    """Type of the single ``ABSENT`` marker."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Absent, ())

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()

Option = Union[Present[T], _Absent]


def is_present(option: Any) -> bool:
    return isinstance(option, Present)


def unwrap(option: 'Option[T]', default: Any = None) -> Any:
    """Return the wrapped value, or ``default`` for ``ABSENT``."""
    if isinstance(option, Present):
        return option.value
    return default
