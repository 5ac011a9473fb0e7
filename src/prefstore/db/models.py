"""
prefstore.db.models

Persistence schema for stored preferences.

Responsibilities:
- Define the `Preference` record: a root key plus the JSON text of its settings tree.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import String, Text, Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column

from prefstore.db.base import Base

KEY_MAX_LENGTH = 128


def utcnow() -> datetime:
    # Naive UTC timestamps; SQLite has no tz-aware column type.
    return datetime.now(tz=UTC).replace(tzinfo=None)


class Preference(Base):
    __tablename__ = "preferences"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    # Root segment of a dotted path. Uniqueness is enforced here, not by the engine.
    key: Mapped[str] = mapped_column(
        String(KEY_MAX_LENGTH), nullable=False, unique=True, index=True
    )
    # Always JSON object text.
    value: Mapped[str] = mapped_column(Text, nullable=False, default="{}")

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"Preference(id={self.id!s}, key={self.key!r})"
