"""
Session state persistence.

Every service reads a session, works on that copy, and writes it back only
after the call succeeded, so the store is the single source of truth for
in-flight attempts, remediation sessions and practice sessions.

Backends:
- MemorySessionStore: serialized payloads in a dict (tests, single process)
- JsonFileSessionStore: one JSON file per session under <dir>/<kind>/<id>.json
- SqlSessionStore: one row per session in the ``engine_sessions`` table

Sessions are never expired implicitly. ``sweep_expired`` is an explicit
policy run from the CLI or the API.
"""

from __future__ import annotations

import json
import re
import threading
from abc import ABC, abstractmethod
from contextlib import nullcontext
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional

from loguru import logger
from sqlalchemy import Engine, delete, select
from sqlalchemy.orm import sessionmaker

from config import Settings, get_settings
from quiz_engine.core.errors import SessionStoreError
from quiz_engine.db.database import create_db_engine, init_db, session_scope
from quiz_engine.db.models import SessionRecord
from quiz_engine.sessions.locks import SessionLockRegistry
from quiz_engine.sessions.state import STATE_TYPES, SessionKind, SessionState, utc_now

_SAFE_ID = re.compile(r"^[A-Za-z0-9_-]+$")


class SessionStore(ABC):
    """
    Keyed storage for session state.

    Reads always return a freshly deserialized object, so mutating a loaded
    state has no effect until ``update`` is called.
    """

    # ========================================
    # Public API
    # ========================================

    def create(self, state: SessionState) -> None:
        """Persist a new session. Fails if the id is already taken."""
        if self._read(state.kind, state.id) is not None:
            raise SessionStoreError(f"{state.kind.value} {state.id} already exists")
        state.last_saved_at = utc_now()
        self._write(state.kind, state.id, state.to_dict())

    def get(self, kind: SessionKind, session_id: str) -> Optional[SessionState]:
        """Load a session, or None if it does not exist."""
        payload = self._read(SessionKind(kind), session_id)
        if payload is None:
            return None
        return STATE_TYPES[SessionKind(kind)].from_dict(payload)

    def update(self, state: SessionState) -> None:
        """Persist changes to an existing session."""
        if self._read(state.kind, state.id) is None:
            raise SessionStoreError(f"{state.kind.value} {state.id} does not exist")
        state.last_saved_at = utc_now()
        self._write(state.kind, state.id, state.to_dict())

    def delete(self, kind: SessionKind, session_id: str) -> bool:
        """Delete a session. Returns False if it did not exist."""
        return self._remove(SessionKind(kind), session_id)

    def list_ids(self, kind: SessionKind) -> list[str]:
        return sorted(self._ids(SessionKind(kind)))

    def sweep_expired(
        self,
        max_age: timedelta,
        now: datetime | None = None,
        locks: SessionLockRegistry | None = None,
    ) -> int:
        """
        Remove every session not saved within ``max_age``.

        With ``locks``, each session is checked and removed under its write
        lock, so a sweep never deletes a session mid-answer.
        """
        now = now or datetime.now(timezone.utc)
        removed = 0
        for kind in SessionKind:
            for session_id in list(self._ids(kind)):
                guard = locks.hold(kind, session_id) if locks is not None else nullcontext()
                with guard:
                    state = self.get(kind, session_id)
                    if state is None or not state.is_expired(max_age, now):
                        continue
                    if self._remove(kind, session_id):
                        removed += 1
        if removed:
            logger.info(f"Swept {removed} expired sessions")
        return removed

    # ========================================
    # Backend hooks
    # ========================================

    @abstractmethod
    def _read(self, kind: SessionKind, session_id: str) -> Optional[dict[str, Any]]:
        ...

    @abstractmethod
    def _write(self, kind: SessionKind, session_id: str, payload: dict[str, Any]) -> None:
        ...

    @abstractmethod
    def _remove(self, kind: SessionKind, session_id: str) -> bool:
        ...

    @abstractmethod
    def _ids(self, kind: SessionKind) -> list[str]:
        ...


class MemorySessionStore(SessionStore):
    """In-process store keeping JSON-compatible payloads."""

    def __init__(self):
        self._data: dict[SessionKind, dict[str, str]] = {kind: {} for kind in SessionKind}
        self._guard = threading.Lock()

    def _read(self, kind, session_id):
        with self._guard:
            raw = self._data[kind].get(session_id)
        return json.loads(raw) if raw is not None else None

    def _write(self, kind, session_id, payload):
        raw = json.dumps(payload)
        with self._guard:
            self._data[kind][session_id] = raw

    def _remove(self, kind, session_id):
        with self._guard:
            return self._data[kind].pop(session_id, None) is not None

    def _ids(self, kind):
        with self._guard:
            return list(self._data[kind])


class JsonFileSessionStore(SessionStore):
    """
    Manages session persistence as JSON files.

    Sessions are stored with naming: {session_dir}/{kind}/{session_id}.json
    """

    def __init__(self, session_dir: Path):
        self.session_dir = Path(session_dir)
        for kind in SessionKind:
            (self.session_dir / kind.value).mkdir(parents=True, exist_ok=True)

    def _path(self, kind: SessionKind, session_id: str) -> Optional[Path]:
        if not _SAFE_ID.match(session_id):
            return None
        return self.session_dir / kind.value / f"{session_id}.json"

    def _read(self, kind, session_id):
        filepath = self._path(kind, session_id)
        if filepath is None or not filepath.exists():
            return None

        try:
            with open(filepath, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError:
            logger.warning(f"Unreadable session file: {filepath}")
            return None

    def _write(self, kind, session_id, payload):
        filepath = self._path(kind, session_id)
        if filepath is None:
            raise SessionStoreError(f"Invalid session id: {session_id!r}")

        # Write to a sibling file first so readers never see a half-written session
        tmp_path = filepath.with_suffix(".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        tmp_path.replace(filepath)

    def _remove(self, kind, session_id):
        filepath = self._path(kind, session_id)
        if filepath is not None and filepath.exists():
            filepath.unlink()
            return True
        return False

    def _ids(self, kind):
        return [path.stem for path in (self.session_dir / kind.value).glob("*.json")]


class SqlSessionStore(SessionStore):
    """Row-per-session store backed by SQLAlchemy."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
        init_db(engine)

    def _read(self, kind, session_id):
        with session_scope(self._factory) as session:
            record = session.get(SessionRecord, (kind.value, session_id))
            return dict(record.payload) if record is not None else None

    def _write(self, kind, session_id, payload):
        with session_scope(self._factory) as session:
            record = session.get(SessionRecord, (kind.value, session_id))
            if record is None:
                session.add(SessionRecord(kind=kind.value, id=session_id, payload=payload))
            else:
                record.payload = payload

    def _remove(self, kind, session_id):
        with session_scope(self._factory) as session:
            result = session.execute(
                delete(SessionRecord).where(
                    SessionRecord.kind == kind.value,
                    SessionRecord.id == session_id,
                )
            )
            return result.rowcount > 0

    def _ids(self, kind):
        with session_scope(self._factory) as session:
            return list(
                session.scalars(select(SessionRecord.id).where(SessionRecord.kind == kind.value))
            )


def build_session_store(settings: Settings | None = None) -> SessionStore:
    """Create the session store selected by ``session_backend``."""
    settings = settings or get_settings()

    if settings.session_backend == "json":
        store: SessionStore = JsonFileSessionStore(settings.session_dir)
    elif settings.session_backend == "sql":
        store = SqlSessionStore(create_db_engine(settings.database_url))
    else:
        store = MemorySessionStore()

    logger.info(f"Session store: {settings.session_backend}")
    return store
