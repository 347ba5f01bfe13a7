"""Session storage behind a small interface.

`InMemorySessionStore` keeps sessions for the life of the process. Another
backend (e.g. a key-value store) only needs to implement `SessionStore`.
"""
from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from debate_ai.models.schemas import Session


class SessionStore(ABC):
    @abstractmethod
    def create(self, session: Session) -> Session:
        raise NotImplementedError

    @abstractmethod
    def get(self, session_id: str) -> Optional[Session]:
        raise NotImplementedError

    @abstractmethod
    def update(self, session: Session) -> Session:
        raise NotImplementedError

    @abstractmethod
    def expire(self, session_id: str) -> bool:
        """Drop a session; returns False when it did not exist."""
        raise NotImplementedError

    @abstractmethod
    def list(self) -> List[Session]:
        raise NotImplementedError


class InMemorySessionStore(SessionStore):
    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def create(self, session: Session) -> Session:
        with self._lock:
            if session.id in self._sessions:
                raise KeyError(f"Session {session.id} already exists")
            self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(session_id)

    def update(self, session: Session) -> Session:
        with self._lock:
            self._sessions[session.id] = session
        return session

    def expire(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def list(self) -> List[Session]:
        with self._lock:
            return list(self._sessions.values())
