"""Chat assistant - conversation store and turn handling."""

from vira.chat.session_store import InMemorySessionStore, SessionStore, SqlAlchemySessionStore
from vira.chat.service import ChatService

__all__ = [
    "SessionStore",
    "InMemorySessionStore",
    "SqlAlchemySessionStore",
    "ChatService",
]
