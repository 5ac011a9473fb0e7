"""
prefstore.preferences.defaults

Process-wide default preference tree.

Responsibilities:
- Hold the read-only default tree loaded once at startup.
- Serve default values/subtrees by dotted path.
- Load the tree from a JSON document, or fall back to the built-in tree.
"""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from prefstore.observability.logging import get_logger
from prefstore.preferences.navigator import MISSING, JSONValue, Missing, lookup

log = get_logger(__name__)

BUILTIN_DEFAULTS: dict[str, Any] = {
    "app": {
        "name": "prefstore",
        "locale": "en-US",
        "timezone": "UTC",
    },
    "theme": {
        "mode": "light",
        "color": "blue",
        "size": "m",
    },
    "notifications": {
        "email": {"enabled": True, "digest": "daily"},
        "push": {"enabled": True},
    },
    "pagination": {
        "per_page": 20,
        "max_per_page": 100,
    },
}


class DefaultTree:
    """
    Immutable view over a nested mapping of defaults.
    Values handed out are deep copies, so callers can never mutate the shared tree.
    """

    __slots__ = ("_tree",)

    def __init__(self, tree: Mapping[str, Any] | None = None) -> None:
        self._tree: dict[str, Any] = copy.deepcopy(dict(tree or {}))

    def get(self, path: str) -> JSONValue | Missing:
        if not path:
            return MISSING
        return copy.deepcopy(lookup(path, self._tree))

    def as_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._tree)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.get(path) is not MISSING


def load_default_tree(source: str | Path | None = None) -> DefaultTree:
    if source is None:
        return DefaultTree(BUILTIN_DEFAULTS)

    path = Path(source)
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"default preferences in {path} must be a JSON object")
    log.info("defaults.loaded", source=str(path), roots=sorted(data))
    return DefaultTree(data)


# --- Module Notes -----------------------------------------------------------
# Unlike `navigator.get_value`, `DefaultTree.get` only reports structural gaps as
# MISSING: a default of `false` or `0` is written back as-is.
