"""
prefstore.api.routers.preferences

Preference endpoints.

Responsibilities:
- Create, update, fetch and search stored preference records.
- Resolve dotted paths (`/values/{path}`), back-filling defaults as needed.
"""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse

from prefstore.api.deps import preference_service
from prefstore.preferences.engine import as_options
from prefstore.schemas import ServiceResult
from prefstore.services.preference_service import PreferenceService

router = APIRouter(prefix="/v1/preferences", tags=["preferences"])


def _respond(result: ServiceResult) -> JSONResponse:
    # The envelope status doubles as the HTTP status.
    return JSONResponse(
        status_code=result.status,
        content=result.model_dump(mode="json", exclude_none=True),
    )


@router.post("", response_model=ServiceResult)
async def create_preference(
    body: dict[str, Any] = Body(...),
    service: PreferenceService = Depends(preference_service),
) -> JSONResponse:
    # Raw body: validation failures come back in the envelope, not as FastAPI 422s.
    return _respond(await service.create_preference(body))


@router.get("", response_model=ServiceResult)
async def search_preferences(
    id: uuid.UUID | None = Query(default=None),
    key: str | None = Query(default=None),
    value: str | None = Query(default=None),
    coincidence: bool = Query(default=False),
    exact_match: bool = Query(default=True),
    service: PreferenceService = Depends(preference_service),
) -> JSONResponse:
    options = as_options(id=id, key=key, value=value)
    return _respond(await service.find_preference(options, coincidence, exact_match))


@router.get("/values/{path}", response_model=ServiceResult)
async def resolve_value(
    path: str,
    service: PreferenceService = Depends(preference_service),
) -> JSONResponse:
    return _respond(await service.get_value(path))


@router.get("/{preference_id}", response_model=ServiceResult)
async def get_preference(
    preference_id: uuid.UUID,
    service: PreferenceService = Depends(preference_service),
) -> JSONResponse:
    return _respond(await service.find_preference({"id": str(preference_id)}))


@router.patch("/{preference_id}", response_model=ServiceResult)
async def update_preference(
    preference_id: uuid.UUID,
    body: dict[str, Any] = Body(...),
    service: PreferenceService = Depends(preference_service),
) -> JSONResponse:
    return _respond(await service.update_preference(preference_id, body))
