"""
Session state, persistence and per-session locking.
"""

from .locks import SessionLockRegistry
from .state import (
    STATE_TYPES,
    AnswerRecord,
    Attempt,
    AttemptStatus,
    PracticeSession,
    RemediationSession,
    SessionKind,
    new_session_id,
)
from .store import (
    JsonFileSessionStore,
    MemorySessionStore,
    SessionStore,
    SqlSessionStore,
    build_session_store,
)

__all__ = [
    "STATE_TYPES",
    "AnswerRecord",
    "Attempt",
    "AttemptStatus",
    "PracticeSession",
    "RemediationSession",
    "SessionKind",
    "new_session_id",
    "SessionLockRegistry",
    "SessionStore",
    "MemorySessionStore",
    "JsonFileSessionStore",
    "SqlSessionStore",
    "build_session_store",
]
