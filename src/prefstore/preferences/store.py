"""
prefstore.preferences.store

Persistence contract used by the resolution engine.

Responsibilities:
- Describe the record shape and store operations the engine depends on.
- Describe lookup filters (exact or case-insensitive anchored, optionally OR-combined).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

ID_FIELD = "id"
SEARCHABLE_FIELDS: frozenset[str] = frozenset({ID_FIELD, "key", "value"})


class PreferenceRecord(Protocol):
    id: Any
    key: str
    value: str


@dataclass(frozen=True, slots=True)
class FieldMatch:
    # exact=False means a case-insensitive match on the whole value, not a substring match.
    field: str
    value: str
    exact: bool = True


@dataclass(frozen=True, slots=True)
class PreferenceFilter:
    clauses: tuple[FieldMatch, ...]
    any_of: bool = False

    @classmethod
    def single(cls, field: str, value: str, *, exact: bool = True) -> PreferenceFilter:
        return cls(clauses=(FieldMatch(field=field, value=value, exact=exact),))


class PreferenceRecordStore(Protocol):
    async def find_by_id(self, record_id: Any) -> PreferenceRecord | None: ...

    async def find_one(self, criteria: PreferenceFilter) -> PreferenceRecord | None: ...

    async def create(self, *, key: str, value: str) -> PreferenceRecord: ...

    async def update(
        self,
        record_id: Any,
        *,
        key: str | None = None,
        value: str | None = None,
    ) -> PreferenceRecord | None: ...
