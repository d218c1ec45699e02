"""Session-scoped conversation history.

A store maps session ids to ordered message lists. Stores hand out one lock
per session id; a chat turn holds it across its read-append-write cycle so
concurrent turns of the same session are serialized while different
sessions proceed independently.
"""

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, Generator, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from vira.ai.schemas import ChatMessage
from vira.core.exceptions import RepositoryError
from vira.core.logging import get_logger
from vira.db.models import ChatMessageRecord
from vira.db.session import session_scope

logger = get_logger("chat.session_store")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore(ABC):
    """Conversation store with per-session serialization."""

    def __init__(self):
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def lock(self, session_id: str) -> Generator[None, None, None]:
        """Hold the lock of one session.

        Eviction retires a session's lock while holding it; a waiter that
        wakes up on a retired lock starts over with the current one.
        """
        while True:
            with self._locks_guard:
                session_lock = self._locks.setdefault(session_id, threading.Lock())
            session_lock.acquire()
            with self._locks_guard:
                if self._locks.get(session_id) is session_lock:
                    break
            session_lock.release()
        try:
            yield
        finally:
            session_lock.release()

    def evict(self, session_id: str) -> bool:
        """Drop a session. Returns True if it existed.

        Waits for a running turn of the session to finish first.
        """
        return self._evict(session_id, None)

    def _evict(self, session_id: str, cutoff: Optional[datetime]) -> bool:
        with self.lock(session_id):
            dropped = self._drop(session_id, cutoff)
            with self._locks_guard:
                self._locks.pop(session_id, None)
        return dropped

    @abstractmethod
    def _drop(self, session_id: str, cutoff: Optional[datetime]) -> bool:
        """Delete a session's history, only if idle since cutoff when given."""

    @abstractmethod
    def get(self, session_id: str) -> List[ChatMessage]:
        """Full history of a session, oldest first (empty if unknown)."""

    @abstractmethod
    def append(self, session_id: str, message: ChatMessage) -> None:
        """Append a message, creating the session on first use."""

    @abstractmethod
    def replace(self, session_id: str, messages: List[ChatMessage]) -> None:
        """Replace the whole history of a session."""

    @abstractmethod
    def evict_idle(self, max_idle: timedelta, now: Optional[datetime] = None) -> int:
        """Drop sessions without activity for max_idle. Returns the count."""


@dataclass
class _SessionState:
    messages: List[ChatMessage] = field(default_factory=list)
    last_activity: datetime = field(default_factory=_utcnow)


class InMemorySessionStore(SessionStore):
    """Process-wide in-memory store; history lives as long as the process."""

    def __init__(self):
        super().__init__()
        self._sessions: Dict[str, _SessionState] = {}
        self._guard = threading.RLock()

    def get(self, session_id: str) -> List[ChatMessage]:
        with self._guard:
            state = self._sessions.get(session_id)
            return list(state.messages) if state else []

    def append(self, session_id: str, message: ChatMessage) -> None:
        with self._guard:
            state = self._sessions.setdefault(session_id, _SessionState())
            state.messages.append(message)
            state.last_activity = _utcnow()

    def replace(self, session_id: str, messages: List[ChatMessage]) -> None:
        with self._guard:
            self._sessions[session_id] = _SessionState(messages=list(messages))

    def _drop(self, session_id: str, cutoff: Optional[datetime]) -> bool:
        with self._guard:
            state = self._sessions.get(session_id)
            if state is None or (cutoff is not None and state.last_activity >= cutoff):
                return False
            del self._sessions[session_id]
            return True

    def evict_idle(self, max_idle: timedelta, now: Optional[datetime] = None) -> int:
        cutoff = (now or _utcnow()) - max_idle
        with self._guard:
            idle = [sid for sid, s in self._sessions.items() if s.last_activity < cutoff]
        evicted = sum(1 for sid in idle if self._evict(sid, cutoff))
        if evicted:
            logger.info("Evicted %d idle chat sessions", evicted)
        return evicted


class SqlAlchemySessionStore(SessionStore):
    """Durable store keeping messages in the chat_messages table."""

    def __init__(self, session_factory: sessionmaker):
        super().__init__()
        self._session_factory = session_factory

    def _wrap(self, operation: str, error: SQLAlchemyError) -> RepositoryError:
        logger.error("Chat history %s failed: %s", operation, type(error).__name__)
        return RepositoryError("Conversation store unavailable", operation=operation)

    def get(self, session_id: str) -> List[ChatMessage]:
        stmt = (
            select(ChatMessageRecord)
            .where(ChatMessageRecord.session_id == session_id)
            .order_by(ChatMessageRecord.created_at, ChatMessageRecord.id)
        )
        try:
            with session_scope(self._session_factory) as session:
                return [
                    ChatMessage(role=r.role, content=r.content, timestamp=r.created_at)
                    for r in session.execute(stmt).scalars()
                ]
        except SQLAlchemyError as e:
            raise self._wrap("get", e) from e

    def append(self, session_id: str, message: ChatMessage) -> None:
        try:
            with session_scope(self._session_factory) as session:
                session.add(self._to_record(session_id, message))
        except SQLAlchemyError as e:
            raise self._wrap("append", e) from e

    def replace(self, session_id: str, messages: List[ChatMessage]) -> None:
        try:
            with session_scope(self._session_factory) as session:
                session.execute(
                    delete(ChatMessageRecord).where(ChatMessageRecord.session_id == session_id)
                )
                session.add_all(self._to_record(session_id, m) for m in messages)
        except SQLAlchemyError as e:
            raise self._wrap("replace", e) from e

    def _drop(self, session_id: str, cutoff: Optional[datetime]) -> bool:
        condition = ChatMessageRecord.session_id == session_id
        try:
            with session_scope(self._session_factory) as session:
                if cutoff is not None and session.execute(
                    self._idle_sessions(cutoff).where(condition)
                ).scalar() is None:
                    return False
                result = session.execute(delete(ChatMessageRecord).where(condition))
                return result.rowcount > 0
        except SQLAlchemyError as e:
            raise self._wrap("evict", e) from e

    def evict_idle(self, max_idle: timedelta, now: Optional[datetime] = None) -> int:
        cutoff = (now or _utcnow()) - max_idle
        try:
            with session_scope(self._session_factory) as session:
                idle = list(session.execute(self._idle_sessions(cutoff)).scalars())
        except SQLAlchemyError as e:
            raise self._wrap("evict_idle", e) from e
        evicted = sum(1 for sid in idle if self._evict(sid, cutoff))
        if evicted:
            logger.info("Evicted %d idle chat sessions", evicted)
        return evicted

    @staticmethod
    def _idle_sessions(cutoff: datetime):
        return (
            select(ChatMessageRecord.session_id)
            .group_by(ChatMessageRecord.session_id)
            .having(func.max(ChatMessageRecord.created_at) < cutoff)
        )

    @staticmethod
    def _to_record(session_id: str, message: ChatMessage) -> ChatMessageRecord:
        return ChatMessageRecord(
            session_id=session_id,
            role=message.role,
            content=message.content,
            created_at=message.timestamp,
        )
