"""
prefstore.schemas

Pydantic DTOs and the uniform result envelope.

Responsibilities:
- Validate preference create/update input (key shape, JSON-object value).
- Serialize stored preferences for API responses.
- Define the `{status, message, data?, error?}` envelope returned by services.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from prefstore.db.models import KEY_MAX_LENGTH

# Keys are root path segments, so they may not contain the separator.
KEY_PATTERN = r"^[^.]+$"


def _require_json_object(raw: str) -> str:
    try:
        decoded = json.loads(raw)
    except ValueError as e:
        raise ValueError(f"value must be valid JSON: {e.msg}") from e
    if not isinstance(decoded, dict):
        raise ValueError("value must encode a JSON object")
    return raw


class PreferenceCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    key: str = Field(min_length=1, max_length=KEY_MAX_LENGTH, pattern=KEY_PATTERN)
    value: str = Field(default="{}")

    @field_validator("value")
    @classmethod
    def _value_is_object(cls, v: str) -> str:
        return _require_json_object(v)


class PreferenceUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    key: str | None = Field(
        default=None, min_length=1, max_length=KEY_MAX_LENGTH, pattern=KEY_PATTERN
    )
    value: str | None = None

    @field_validator("value")
    @classmethod
    def _value_is_object(cls, v: str | None) -> str | None:
        return v if v is None else _require_json_object(v)


class PreferenceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    key: str
    value: str
    created_at: datetime
    updated_at: datetime


class ServiceResult(BaseModel):
    status: int
    message: str
    data: dict[str, Any] | None = None
    error: Any = None

    @property
    def ok(self) -> bool:
        return self.status < 400
