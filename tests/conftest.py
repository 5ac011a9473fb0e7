"""
tests.conftest

Shared fixtures.

Responsibilities:
- An in-memory `PreferenceRecordStore` that counts writes, for engine tests.
- A temporary SQLite database for repository/service/API tests.
"""

from __future__ import annotations

import json
import uuid
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from prefstore.db.init_db import init_db
from prefstore.db.session import create_engine, create_sessionmaker
from prefstore.preferences.defaults import DefaultTree
from prefstore.preferences.engine import PreferenceResolutionEngine
from prefstore.preferences.store import FieldMatch, PreferenceFilter
from prefstore.settings import Settings


@dataclass
class StoredPreference:
    key: str
    value: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


class InMemoryPreferenceStore:
    def __init__(self) -> None:
        self.records: dict[str, StoredPreference] = {}
        self.lookups: list[Any] = []
        self.creates = 0
        self.updates = 0

    @property
    def writes(self) -> int:
        return self.creates + self.updates

    def seed(self, key: str, tree: Any) -> StoredPreference:
        raw = tree if isinstance(tree, str) else json.dumps(tree)
        rec = StoredPreference(key=key, value=raw)
        self.records[rec.id] = rec
        return rec

    def by_key(self, key: str) -> StoredPreference | None:
        return next((r for r in self.records.values() if r.key == key), None)

    async def find_by_id(self, record_id: Any) -> StoredPreference | None:
        self.lookups.append(("id", record_id))
        return self.records.get(str(record_id))

    async def find_one(self, criteria: PreferenceFilter) -> StoredPreference | None:
        self.lookups.append(criteria)
        combine = any if criteria.any_of else all
        for rec in self.records.values():
            if criteria.clauses and combine(_matches(rec, c) for c in criteria.clauses):
                return rec
        return None

    async def create(self, *, key: str, value: str) -> StoredPreference:
        self.creates += 1
        rec = StoredPreference(key=key, value=value)
        self.records[rec.id] = rec
        return rec

    async def update(
        self,
        record_id: Any,
        *,
        key: str | None = None,
        value: str | None = None,
    ) -> StoredPreference | None:
        self.updates += 1
        rec = self.records.get(str(record_id))
        if rec is None:
            return None
        if key is not None:
            rec.key = key
        if value is not None:
            rec.value = value
        return rec


def _matches(rec: StoredPreference, clause: FieldMatch) -> bool:
    actual = str(getattr(rec, clause.field))
    if clause.exact:
        return actual == clause.value
    return actual.casefold() == clause.value.casefold()


@pytest.fixture
def store() -> InMemoryPreferenceStore:
    return InMemoryPreferenceStore()


@pytest.fixture
def defaults() -> DefaultTree:
    return DefaultTree({"theme": {"color": "blue", "size": "m"}})


@pytest.fixture
def engine(store: InMemoryPreferenceStore, defaults: DefaultTree) -> PreferenceResolutionEngine:
    return PreferenceResolutionEngine(store=store, defaults=defaults)


@pytest.fixture
def app_settings(tmp_path) -> Settings:
    return Settings(
        env="test",
        log_json=False,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'preferences.db'}",
    )


@pytest_asyncio.fixture
async def session_factory(
    app_settings: Settings,
) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    db_engine = create_engine(app_settings)
    await init_db(db_engine)
    try:
        yield create_sessionmaker(db_engine)
    finally:
        await db_engine.dispose()


@pytest_asyncio.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    async with session_factory() as s:
        yield s
