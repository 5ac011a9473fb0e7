"""
prefstore.preferences.engine

Preference resolution engine.

Responsibilities:
- Resolve a dotted path to a stored value, creating the backing record on first use.
- Back-fill missing sub-paths from the default tree and persist the repair.
- Look up records by id, single field, or OR-combined fields.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from prefstore.observability.logging import get_logger
from prefstore.preferences.defaults import DefaultTree
from prefstore.preferences.navigator import (
    MISSING,
    JSONValue,
    build_fragment,
    get_value,
    lookup,
    shallow_merge,
)
from prefstore.preferences.paths import PathExpression
from prefstore.preferences.store import (
    ID_FIELD,
    FieldMatch,
    PreferenceFilter,
    PreferenceRecord,
    PreferenceRecordStore,
)

log = get_logger(__name__)


def encode_value(tree: JSONValue) -> str:
    # Compact separators keep stored text identical to what JS clients would write.
    return json.dumps(tree, separators=(",", ":"))


class PreferenceResolutionEngine:
    def __init__(self, *, store: PreferenceRecordStore, defaults: DefaultTree) -> None:
        self._store = store
        self._defaults = defaults

    async def resolve(self, path: str) -> JSONValue:
        """
        Resolve `path` to its stored value.

        Store round trips: none extra when the record already holds the sub-path,
        one create when the record is absent, one update when the sub-path is absent,
        both when neither exists. A missing default resolves to None.
        """

        expr = PathExpression.parse(path)
        if not expr.root_key:
            return None

        record = await self._store.find_one(PreferenceFilter.single("key", expr.root_key))
        if record is None:
            fragment = self._default_fragment(expr)
            # Record values are always JSON objects.
            initial = fragment if isinstance(fragment, dict) else {}
            record = await self._store.create(key=expr.root_key, value=encode_value(initial))
            log.info("preference.created", key=expr.root_key, path=path)

        stored = self._decode(record)
        if get_value(expr.sub_path, stored) is MISSING:
            merged = shallow_merge(stored, self._default_fragment(expr))
            updated = await self._store.update(record.id, value=encode_value(merged))
            stored = self._decode(updated) if updated is not None else merged
            log.info("preference.merged", key=expr.root_key, path=path)

        value = lookup(expr.sub_path, stored)
        return None if value is MISSING else value

    async def search(
        self,
        options: Mapping[str, str],
        *,
        coincidence: bool = False,
        exact_match: bool = True,
    ) -> PreferenceRecord | None:
        fields = list(options)
        if not fields:
            return None

        if not coincidence or len(fields) == 1:
            field = fields[0]
            if field == ID_FIELD:
                return await self._store.find_by_id(options[field])
            return await self._store.find_one(
                PreferenceFilter.single(field, options[field], exact=exact_match)
            )

        clauses = tuple(FieldMatch(field=f, value=options[f], exact=exact_match) for f in fields)
        return await self._store.find_one(PreferenceFilter(clauses=clauses, any_of=True))

    def _default_fragment(self, expr: PathExpression) -> JSONValue:
        default = self._defaults.get(expr.full_path)
        return build_fragment(expr.sub_path, None if default is MISSING else default)

    @staticmethod
    def _decode(record: PreferenceRecord) -> JSONValue:
        try:
            return json.loads(record.value)
        except (TypeError, ValueError):
            # Unreadable text is treated as an empty tree; the next merge-back overwrites it.
            log.warning("preference.undecodable", key=record.key)
            return {}


def as_options(**fields: Any) -> dict[str, str]:
    # Drops unset fields while keeping the caller's ordering (first field wins in single lookups).
    return {name: str(value) for name, value in fields.items() if value is not None}
