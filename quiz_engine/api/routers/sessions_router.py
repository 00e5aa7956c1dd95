"""
Scope listing and session housekeeping.

Sessions never expire on their own; these endpoints delete one session or
sweep every session older than the configured (or requested) age.
"""
from __future__ import annotations

from datetime import timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends
from loguru import logger
from pydantic import BaseModel, Field

from quiz_engine.api.deps import get_services
from quiz_engine.core.errors import SessionNotFound
from quiz_engine.quiz.models import ScopeInfo
from quiz_engine.services import EngineServices
from quiz_engine.sessions.state import SessionKind

router = APIRouter()


class DeleteSessionResponse(BaseModel):
    kind: SessionKind
    session_id: str
    deleted: bool


class SweepRequest(BaseModel):
    max_age_hours: Optional[int] = Field(
        None, ge=0, description="Override session_expiry_hours for this sweep"
    )


class SweepResponse(BaseModel):
    removed: int
    max_age_hours: int


@router.get("/scopes", response_model=List[ScopeInfo])
def list_scopes(services: EngineServices = Depends(get_services)):
    return services.repository.list_scopes()


@router.delete("/sessions/{kind}/{session_id}", response_model=DeleteSessionResponse)
def delete_session(
    kind: SessionKind,
    session_id: str,
    services: EngineServices = Depends(get_services),
):
    with services.locks.hold(kind, session_id):
        deleted = services.store.delete(kind, session_id)
    if not deleted:
        raise SessionNotFound(f"No {kind.value} session {session_id}")

    logger.info(f"Deleted {kind.value} session {session_id}")
    return DeleteSessionResponse(kind=kind, session_id=session_id, deleted=True)


@router.post("/sessions/sweep", response_model=SweepResponse)
def sweep_sessions(
    request: Optional[SweepRequest] = None,
    services: EngineServices = Depends(get_services),
):
    """Remove every session not saved within the expiry window."""
    hours = services.settings.session_expiry_hours
    if request is not None and request.max_age_hours is not None:
        hours = request.max_age_hours

    removed = services.store.sweep_expired(timedelta(hours=hours), locks=services.locks)
    return SweepResponse(removed=removed, max_age_hours=hours)
