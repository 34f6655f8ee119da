from __future__ import annotations  # Volatile session registry keyed by opaque id

from contextlib import contextmanager
from datetime import datetime, timedelta
from threading import Lock, RLock
from typing import ContextManager, Dict, Iterator, List, Optional, Protocol

from .models import InterviewSession


class SessionStore(Protocol):  # Session registry interface injected into the orchestrator
    def create(self, session_id: str, session: InterviewSession) -> None: ...

    def get(self, session_id: str) -> Optional[InterviewSession]: ...

    def delete(self, session_id: str) -> bool: ...

    def exists(self, session_id: str) -> bool: ...

    def hold(self, session_id: str) -> ContextManager[None]: ...

    def purge_idle(self, max_age: timedelta, *, now: Optional[datetime] = None) -> List[str]: ...


class InMemorySessionStore:  # Thread-safe in-memory store with per-session mutation locks
    def __init__(self) -> None:
        self._sessions: Dict[str, InterviewSession] = {}
        self._session_locks: Dict[str, Lock] = {}
        self._lock = RLock()

    def create(self, session_id: str, session: InterviewSession) -> None:  # Register a new session; ids are never reused
        with self._lock:
            if session_id in self._sessions:
                raise ValueError(f"Session id already registered: {session_id}")
            self._sessions[session_id] = session
            self._session_locks[session_id] = Lock()

    def get(self, session_id: str) -> Optional[InterviewSession]:  # None means "not found"
        with self._lock:
            return self._sessions.get(session_id)

    def delete(self, session_id: str) -> bool:  # Drop session state; False when already absent
        with self._lock:
            self._session_locks.pop(session_id, None)
            return self._sessions.pop(session_id, None) is not None

    def exists(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    @contextmanager
    def hold(self, session_id: str) -> Iterator[None]:  # Serialize mutation of one session
        with self._lock:
            lock = self._session_locks.get(session_id)
        if lock is None:
            # Absent id: nothing to serialize, callers re-check existence inside the block.
            yield
            return
        with lock:
            yield

    def purge_idle(self, max_age: timedelta, *, now: Optional[datetime] = None) -> List[str]:  # Reclaim sessions idle longer than max_age
        current = now or datetime.utcnow()
        with self._lock:
            stale = [
                session_id
                for session_id, session in self._sessions.items()
                if current - session.last_activity > max_age
            ]
            for session_id in stale:
                self._sessions.pop(session_id, None)
                self._session_locks.pop(session_id, None)
        return stale

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


__all__ = ["InMemorySessionStore", "SessionStore"]
