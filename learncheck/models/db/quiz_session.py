"""
QuizSessionRecord database model: one persisted quiz blob per (user, tutorial).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from learncheck.database import Base
from learncheck.utils.json_utils import json_load, ndjson_dump
from learncheck.utils.time_utils import utc_now


class QuizSessionRecord(Base):
    """
    Stored quiz session.
    The whole session is kept as a single JSON blob; only a few
    columns are broken out for maintenance queries.
    """

    __tablename__ = "quiz_sessions"

    # Composite identity
    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    tutorial_id: Mapped[str] = mapped_column(String(128), primary_key=True)

    schema_version: Mapped[int] = mapped_column(default=1, nullable=False)
    is_completed: Mapped[bool] = mapped_column(default=False, nullable=False)

    # Session blob (stored as JSON string)
    payload_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")

    # Timing
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
        index=True,
    )

    @property
    def payload(self) -> dict[str, Any] | None:
        """Parse session blob from JSON."""
        try:
            data = json_load(self.payload_json)
        except (ValueError, TypeError):
            return None
        return data if isinstance(data, dict) else None

    @payload.setter
    def payload(self, value: dict[str, Any]) -> None:
        """Serialize session blob to JSON."""
        self.payload_json = ndjson_dump(value)
