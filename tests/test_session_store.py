"""Tests for the in-memory and SQLAlchemy conversation stores."""

import threading
import time
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.orm import sessionmaker

from vira.ai.schemas import ChatMessage
from vira.chat.session_store import InMemorySessionStore, SqlAlchemySessionStore
from vira.db.models import Base
from vira.db.session import build_engine


@pytest.fixture
def sqlite_factory():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture(params=["memory", "database"])
def store(request, sqlite_factory):
    if request.param == "memory":
        return InMemorySessionStore()
    return SqlAlchemySessionStore(sqlite_factory)


def _msg(role, content, minutes_ago=0):
    return ChatMessage(
        role=role,
        content=content,
        timestamp=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
    )


class TestSessionStore:
    """Contract tests run against both store implementations."""

    def test_unknown_session_is_empty(self, store):
        """Test unknown sessions have no history."""
        assert store.get("missing") == []

    def test_append_preserves_order(self, store):
        """Test appended messages come back oldest first."""
        store.append("s1", _msg("user", "hi"))
        store.append("s1", _msg("assistant", "hello"))
        store.append("s1", _msg("user", "bye"))
        history = store.get("s1")
        assert [m.content for m in history] == ["hi", "hello", "bye"]
        assert [m.role for m in history] == ["user", "assistant", "user"]

    def test_sessions_isolated(self, store):
        """Test sessions do not see each other's messages."""
        store.append("a", _msg("user", "from a"))
        store.append("b", _msg("user", "from b"))
        assert [m.content for m in store.get("a")] == ["from a"]
        assert [m.content for m in store.get("b")] == ["from b"]

    def test_replace(self, store):
        """Test replace overwrites the whole history."""
        store.append("s1", _msg("user", "old"))
        store.replace("s1", [_msg("user", "new 1"), _msg("assistant", "new 2")])
        assert [m.content for m in store.get("s1")] == ["new 1", "new 2"]
        store.replace("s1", [])
        assert store.get("s1") == []

    def test_evict(self, store):
        """Test eviction drops a session."""
        store.append("s1", _msg("user", "hi"))
        assert store.evict("s1") is True
        assert store.get("s1") == []
        assert store.evict("s1") is False

    def test_evict_idle_keeps_active(self, store):
        """Test recently active sessions survive idle eviction."""
        store.append("s1", _msg("user", "hi"))
        assert store.evict_idle(timedelta(minutes=10)) == 0
        assert len(store.get("s1")) == 1

    def test_evict_idle_drops_expired(self, store):
        """Test sessions idle past the limit are evicted."""
        store.append("s1", _msg("user", "hi"))
        later = datetime.now(timezone.utc) + timedelta(minutes=11)
        assert store.evict_idle(timedelta(minutes=10), now=later) == 1
        assert store.get("s1") == []

    def test_lock_serializes_turns(self, store):
        """Test read-append cycles under the session lock lose no messages."""

        def worker(prefix):
            for i in range(20):
                with store.lock("shared"):
                    store.get("shared")
                    store.append("shared", _msg("user", f"{prefix}-{i}"))

        threads = [threading.Thread(target=worker, args=(p,)) for p in ("a", "b")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(store.get("shared")) == 40


class TestSqlAlchemySessionStore:
    """Tests specific to the durable store."""

    def test_idle_measured_by_last_message(self, sqlite_factory):
        """Test idleness is measured from the newest stored message."""
        store = SqlAlchemySessionStore(sqlite_factory)
        store.append("stale", _msg("user", "old", minutes_ago=30))
        store.append("fresh", _msg("user", "old", minutes_ago=30))
        store.append("fresh", _msg("assistant", "new"))
        assert store.evict_idle(timedelta(minutes=10)) == 1
        assert store.get("stale") == []
        assert len(store.get("fresh")) == 2

    def test_history_survives_new_store(self, sqlite_factory):
        """Test history is shared by store instances on the same database."""
        SqlAlchemySessionStore(sqlite_factory).append("s1", _msg("user", "hi"))
        assert [m.content for m in SqlAlchemySessionStore(sqlite_factory).get("s1")] == ["hi"]


class TestSessionLocks:
    """Tests for per-session lock handout."""

    def test_different_sessions_do_not_block(self):
        """Test holding one session's lock does not block another session."""
        store = InMemorySessionStore()
        acquired = threading.Event()

        def other():
            with store.lock("b"):
                acquired.set()

        with store.lock("a"):
            t = threading.Thread(target=other)
            t.start()
            assert acquired.wait(timeout=2)
            t.join()

    def test_same_session_blocks(self):
        """Test a second turn of the same session waits for the first."""
        store = InMemorySessionStore()
        acquired = threading.Event()

        def other():
            with store.lock("a"):
                acquired.set()

        with store.lock("a"):
            t = threading.Thread(target=other)
            t.start()
            assert not acquired.wait(timeout=0.2)
        t.join(timeout=2)
        assert acquired.is_set()

    def test_evict_waits_for_running_turn(self, store):
        """Test eviction blocks until the session's current turn releases its lock."""
        store.append("s1", _msg("user", "hi"))
        done = threading.Event()

        def evictor():
            store.evict("s1")
            done.set()

        with store.lock("s1"):
            t = threading.Thread(target=evictor)
            t.start()
            assert not done.wait(timeout=0.2)
            store.append("s1", _msg("assistant", "hello"))
            assert len(store.get("s1")) == 2
        t.join(timeout=2)
        assert done.is_set()
        assert store.get("s1") == []

    def test_waiter_on_evicted_session_stays_serialized(self, store):
        """Test a turn queued behind eviction still excludes later turns."""
        store.append("s1", _msg("user", "hi"))
        waiter_in = threading.Event()
        release_waiter = threading.Event()
        late_in = threading.Event()

        def waiter():
            with store.lock("s1"):
                waiter_in.set()
                release_waiter.wait(timeout=2)

        def late():
            with store.lock("s1"):
                late_in.set()

        threads = [threading.Thread(target=waiter), threading.Thread(target=store.evict, args=("s1",))]
        with store.lock("s1"):
            for t in threads:
                t.start()
            time.sleep(0.1)
        assert waiter_in.wait(timeout=2)

        late_thread = threading.Thread(target=late)
        late_thread.start()
        assert not late_in.wait(timeout=0.2)
        release_waiter.set()
        for t in threads + [late_thread]:
            t.join(timeout=2)
        assert late_in.is_set()

    def test_idle_eviction_spares_session_resumed_meanwhile(self):
        """Test a session that becomes active while eviction waits is kept."""
        store = InMemorySessionStore()
        store.append("s1", _msg("user", "hi"))
        store._sessions["s1"].last_activity -= timedelta(minutes=30)
        evicted = []

        with store.lock("s1"):
            t = threading.Thread(
                target=lambda: evicted.append(store.evict_idle(timedelta(minutes=10)))
            )
            t.start()
            time.sleep(0.1)
            store.append("s1", _msg("assistant", "hello"))
        t.join(timeout=2)
        assert evicted == [0]
        assert len(store.get("s1")) == 2
