from __future__ import annotations

"""
Structural comparison of draft snapshots.

Design intent:
- Decide whether a snapshot differs from the last written one by value, never by identity.
- Stay pure so the persister can call it on every notification.
"""

from collections.abc import Mapping, Sequence, Set
from typing import Any

from pydantic import BaseModel


def _normalize(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump()
    return value


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def are_equal(a: Any, b: Any) -> bool:
    a = _normalize(a)
    b = _normalize(b)
    if a is b:
        return True

    if isinstance(a, Mapping) or isinstance(b, Mapping):
        if not (isinstance(a, Mapping) and isinstance(b, Mapping)):
            return False
        if a.keys() != b.keys():
            return False
        return all(are_equal(a[key], b[key]) for key in a)

    if _is_sequence(a) or _is_sequence(b):
        if not (_is_sequence(a) and _is_sequence(b)):
            return False
        if len(a) != len(b):
            return False
        return all(are_equal(left, right) for left, right in zip(a, b))

    if isinstance(a, Set) and isinstance(b, Set):
        return a == b

    # bool is an int subclass; a checkbox flipping to 1 is still a change.
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b

    return a == b
