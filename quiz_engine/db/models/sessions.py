"""
Session persistence table.

One row per in-flight session. The state machine lives in the services; the
row only holds the serialized state blob plus timestamps used by sweeps.
"""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


def utcnow_naive() -> datetime:
    """Current UTC time without tzinfo (stored consistently across dialects)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SessionRecord(Base):
    """Serialized attempt, remediation or practice session."""

    __tablename__ = "engine_sessions"

    kind: Mapped[str] = mapped_column(String(32), primary_key=True)
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow_naive)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow_naive, onupdate=utcnow_naive, index=True
    )

    def __repr__(self) -> str:
        return f"<SessionRecord {self.kind}/{self.id}>"
