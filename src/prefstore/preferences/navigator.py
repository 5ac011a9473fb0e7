"""
prefstore.preferences.navigator

Navigation helpers for JSON-shaped trees addressed by dotted sub-paths.

Responsibilities:
- Read a value at a sub-path (`lookup`, `get_value`).
- Build the minimal fragment that places a value at a sub-path (`build_fragment`).
- Combine a stored tree with a fragment at the top level (`shallow_merge`).

Absence:
`get_value` reports `MISSING` both for structural gaps (unknown key, descending into
a non-object) and for "empty" leaves: ``None``, ``False``, ``0``, ``0.0``, ``NaN`` and
``""``. Empty objects and empty lists count as present. A stored falsy leaf is
therefore indistinguishable from a missing one and gets back-filled on every read.
"""

from __future__ import annotations

import enum
import math
from typing import Any, Final, TypeAlias

from prefstore.preferences.paths import SEPARATOR

JSONValue: TypeAlias = dict[str, Any] | list[Any] | str | int | float | bool | None


class Missing(enum.Enum):
    token = "MISSING"

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Final = Missing.token


def is_absent(value: JSONValue | Missing) -> bool:
    if value is None or value is MISSING:
        return True
    # bool before int: False is an int.
    if isinstance(value, bool):
        return not value
    if isinstance(value, int | float):
        return value == 0 or math.isnan(value)
    if isinstance(value, str):
        return value == ""
    return False


def lookup(path: str, tree: JSONValue) -> JSONValue | Missing:
    """Walk `tree` one key per segment; only structural gaps yield `MISSING`."""

    node: Any = tree
    if not path:
        return node
    for segment in path.split(SEPARATOR):
        if not isinstance(node, dict) or segment not in node:
            return MISSING
        node = node[segment]
    return node


def get_value(path: str, tree: JSONValue) -> JSONValue | Missing:
    value = lookup(path, tree)
    return MISSING if is_absent(value) else value


def build_fragment(path: str, value: JSONValue) -> JSONValue:
    """
    build_fragment("b.c", 5) == {"b": {"c": 5}}

    An empty path returns `value` unchanged.
    """

    fragment: JSONValue = value
    if not path:
        return fragment
    for segment in reversed(path.split(SEPARATOR)):
        fragment = {segment: fragment}
    return fragment


def shallow_merge(stored: JSONValue, fragment: JSONValue) -> dict[str, Any]:
    # Depth-1 only: a colliding top-level branch is replaced wholesale by the fragment's.
    merged: dict[str, Any] = dict(stored) if isinstance(stored, dict) else {}
    if isinstance(fragment, dict):
        merged.update(fragment)
    return merged
