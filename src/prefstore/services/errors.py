"""
prefstore.services.errors

Validation gateway and persistence error mapping.

Responsibilities:
- Run a pydantic schema over raw input and flatten failures into field errors.
- Map SQLAlchemy failures onto the uniform failure envelope.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from starlette.status import (
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from prefstore.observability.logging import get_logger
from prefstore.schemas import ServiceResult

log = get_logger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

# Starlette renamed the 422 constant (ENTITY -> CONTENT) and warns on the old name.
HTTP_422_UNPROCESSABLE = 422


def validate(payload: Any, schema: type[SchemaT]) -> tuple[SchemaT | None, list[dict[str, str]]]:
    """
    Returns (model, []) on success and (None, field_errors) on failure.
    """

    if isinstance(payload, schema):
        return payload, []
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(exclude_unset=True)
    try:
        return schema.model_validate(payload), []
    except ValidationError as e:
        errors = [
            {
                "field": ".".join(str(p) for p in err["loc"]) or "__root__",
                "message": err["msg"],
                "type": err["type"],
            }
            for err in e.errors()
        ]
        return None, errors


def validation_failure(errors: list[dict[str, str]]) -> ServiceResult:
    return ServiceResult(
        status=HTTP_422_UNPROCESSABLE,
        message="Validation error",
        error=errors,
    )


def map_persistence_error(error: SQLAlchemyError) -> ServiceResult:
    if isinstance(error, IntegrityError):
        status, message = HTTP_409_CONFLICT, "Preference conflicts with an existing record"
    elif isinstance(error, OperationalError):
        status, message = HTTP_503_SERVICE_UNAVAILABLE, "Preference store unavailable"
    else:
        status, message = HTTP_500_INTERNAL_SERVER_ERROR, "Preference store error"

    log.warning("persistence.failed", status=status, error_type=type(error).__name__)
    # DBAPI messages can carry SQL and parameters; only the exception class is surfaced.
    return ServiceResult(status=status, message=message, error={"type": type(error).__name__})
