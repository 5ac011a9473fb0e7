"""
prefstore.db.repositories.preferences

Repository for `Preference` entities; the SQLAlchemy implementation of
`PreferenceRecordStore`.

Responsibilities:
- Fetch by id and by exact / case-insensitive field filters, optionally OR-combined.
- Create and partially update records (flush only; the service commits).
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import ColumnElement, and_, false, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from prefstore.db.models import Preference, utcnow
from prefstore.preferences.store import ID_FIELD, SEARCHABLE_FIELDS, FieldMatch, PreferenceFilter


def _as_uuid(raw: Any) -> uuid.UUID | None:
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        return None


def _clause(match: FieldMatch) -> ColumnElement[bool]:
    if match.field not in SEARCHABLE_FIELDS:
        raise ValueError(f"unsupported preference field: {match.field!r}")

    if match.field == ID_FIELD:
        record_id = _as_uuid(match.value)
        return Preference.id == record_id if record_id is not None else false()

    column = getattr(Preference, match.field)
    if match.exact:
        return column == match.value
    # Anchored, case-insensitive: the whole value must match under case folding.
    return func.lower(column) == func.lower(match.value)


class PreferenceRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_id(self, record_id: Any) -> Preference | None:
        parsed = _as_uuid(record_id)
        if parsed is None:
            return None
        return await self._session.get(Preference, parsed)

    async def find_one(self, criteria: PreferenceFilter) -> Preference | None:
        if not criteria.clauses:
            return None
        clauses = [_clause(m) for m in criteria.clauses]
        where = or_(*clauses) if criteria.any_of else and_(*clauses)
        stmt = select(Preference).where(where).order_by(Preference.created_at).limit(1)
        return (await self._session.execute(stmt)).scalars().first()

    async def create(self, *, key: str, value: str) -> Preference:
        pref = Preference(key=key, value=value)
        self._session.add(pref)
        await self._session.flush()
        return pref

    async def update(
        self,
        record_id: Any,
        *,
        key: str | None = None,
        value: str | None = None,
    ) -> Preference | None:
        parsed = _as_uuid(record_id)
        if parsed is None:
            return None
        pref = await self._session.get(Preference, parsed, with_for_update=True)
        if pref is None:
            return None
        if key is not None:
            pref.key = key
        if value is not None:
            pref.value = value
        pref.updated_at = utcnow()
        await self._session.flush()
        return pref
