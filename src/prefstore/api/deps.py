"""
prefstore.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for DB sessions and the preference service.
- Encapsulate app.state access patterns (sessionmaker, default tree, resolution locks).
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from prefstore.preferences.defaults import DefaultTree
from prefstore.preferences.locks import KeyedLocks
from prefstore.services.preference_service import PreferenceService


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    # Created during app startup in `prefstore.api.app.create_app`.
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


def defaults_from_app(request: Request) -> DefaultTree:
    return request.app.state.defaults  # type: ignore[attr-defined]


def locks_from_app(request: Request) -> KeyedLocks:
    return request.app.state.resolution_locks  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Commit/rollback is managed explicitly by the service layer.
    async with session_factory() as session:
        yield session


def preference_service(
    session: AsyncSession = Depends(db_session),
    defaults: DefaultTree = Depends(defaults_from_app),
    locks: KeyedLocks = Depends(locks_from_app),
) -> PreferenceService:
    return PreferenceService(session=session, defaults=defaults, locks=locks)
