"""
prefstore.services.preference_service

Preference CRUD + resolution service (transaction + persistence owner).

Responsibilities:
- Validate create/update input before touching the store.
- Resolve dotted paths through the resolution engine under a per-key lock.
- Commit successful writes, roll back and map failed ones.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_200_OK, HTTP_201_CREATED, HTTP_404_NOT_FOUND

from prefstore.db.models import Preference
from prefstore.db.repositories.preferences import PreferenceRepo
from prefstore.observability.logging import get_logger
from prefstore.preferences.defaults import DefaultTree
from prefstore.preferences.engine import PreferenceResolutionEngine
from prefstore.preferences.locks import KeyedLocks
from prefstore.preferences.paths import PathExpression
from prefstore.schemas import PreferenceCreate, PreferenceOut, PreferenceUpdate, ServiceResult
from prefstore.services.errors import map_persistence_error, validate, validation_failure

log = get_logger(__name__)


def _preference_data(pref: Preference) -> dict[str, Any]:
    return {"preference": PreferenceOut.model_validate(pref).model_dump(mode="json")}


class PreferenceService:
    def __init__(
        self,
        *,
        session: AsyncSession,
        defaults: DefaultTree,
        locks: KeyedLocks | None = None,
    ) -> None:
        self._session = session
        self._repo = PreferenceRepo(session)
        self._engine = PreferenceResolutionEngine(store=self._repo, defaults=defaults)
        # KeyedLocks is falsy while empty; test identity, not truthiness.
        self._locks = locks if locks is not None else KeyedLocks()

    async def create_preference(self, payload: Any) -> ServiceResult:
        body, errors = validate(payload, PreferenceCreate)
        if body is None:
            return validation_failure(errors)

        try:
            pref = await self._repo.create(key=body.key, value=body.value)
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            return map_persistence_error(e)

        log.info("preference.stored", key=pref.key)
        return ServiceResult(
            status=HTTP_201_CREATED,
            message="Preference creation successful",
            data=_preference_data(pref),
        )

    async def update_preference(self, preference_id: Any, payload: Any) -> ServiceResult:
        body, errors = validate(payload, PreferenceUpdate)
        if body is None:
            return validation_failure(errors)

        try:
            pref = await self._repo.update(preference_id, key=body.key, value=body.value)
            if pref is None:
                return ServiceResult(status=HTTP_404_NOT_FOUND, message="Preference not found")
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            return map_persistence_error(e)

        return ServiceResult(
            status=HTTP_200_OK,
            message="Preference updated successful",
            data=_preference_data(pref),
        )

    async def get_preference(
        self,
        options: Mapping[str, str],
        coincidence: bool = False,
        exact_match: bool = True,
    ) -> Preference | None:
        return await self._engine.search(  # type: ignore[return-value]
            options, coincidence=coincidence, exact_match=exact_match
        )

    async def find_preference(
        self,
        options: Mapping[str, str],
        coincidence: bool = False,
        exact_match: bool = True,
    ) -> ServiceResult:
        try:
            pref = await self.get_preference(options, coincidence, exact_match)
        except SQLAlchemyError as e:
            await self._session.rollback()
            return map_persistence_error(e)
        if pref is None:
            return ServiceResult(status=HTTP_404_NOT_FOUND, message="Preference not found")
        return ServiceResult(
            status=HTTP_200_OK, message="Preference found", data=_preference_data(pref)
        )

    async def get_value(self, path: str) -> ServiceResult:
        root_key = PathExpression.parse(path).root_key
        try:
            async with self._locks.hold(root_key):
                value = await self._engine.resolve(path)
                # Commit inside the lock so the next resolver of this key sees the repair.
                await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            return map_persistence_error(e)

        return ServiceResult(
            status=HTTP_200_OK,
            message="Preference value resolved",
            data={"path": path, "value": value},
        )


# --- Module Notes -----------------------------------------------------------
# `get_preference` returns the raw record (or None) for in-process callers;
# `find_preference` wraps the same lookup in the envelope for the API layer.
