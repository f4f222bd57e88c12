import os
import uuid

import pytest

from session import add_expense, new_session
from session_store import SessionNotFoundError, SessionStore, SessionStoreError, default_store_dir


@pytest.fixture
def store(tmp_path):
    return SessionStore(str(tmp_path / "sessions"))


@pytest.fixture
def trip():
    s = new_session(["Alice", "Bob"])
    return add_expense(s, "Hotel", 1000, "2025-01-01", 0, [0, 1])


def test_new_session_is_empty(store):
    sid = store.create_session()

    s = store.load_session(sid)
    assert s.members == ()
    assert s.expenses == ()
    assert s.next_member_id == 0
    assert store.exists(sid)


def test_save_then_load(store, trip):
    sid = store.create_session()

    store.save_session(sid, trip)

    assert store.load_session(sid) == trip


def test_save_replaces_whole_snapshot(store, trip):
    sid = store.create_session()
    store.save_session(sid, trip)
    store.save_session(sid, new_session(["Carol"]))

    s = store.load_session(sid)
    assert [m.name for m in s.members] == ["Carol"]
    assert s.expenses == ()
    assert [n for n in os.listdir(store.base_dir) if n.endswith(".tmp")] == []


def test_unknown_session_loads_as_none(store):
    assert store.load_session(str(uuid.uuid4())) is None


def test_save_requires_existing_session(store, trip):
    with pytest.raises(SessionNotFoundError):
        store.save_session(str(uuid.uuid4()), trip)


@pytest.mark.parametrize("bad_id", ["", "../etc/passwd", "not-a-uuid"])
def test_invalid_ids_are_rejected(store, bad_id):
    with pytest.raises(SessionStoreError):
        store.load_session(bad_id)


def test_delete_session(store):
    sid = store.create_session()

    store.delete_session(sid)

    assert not store.exists(sid)
    with pytest.raises(SessionNotFoundError):
        store.delete_session(sid)


def test_list_sessions_newest_first(store):
    first = store.create_session()
    second = store.create_session()
    path = os.path.join(store.base_dir, f"{first}.json")
    os.utime(path, (1, 1))

    assert store.list_sessions() == [second, first]


def test_default_store_lives_in_app_dir(isolated_home):
    store = SessionStore()

    assert store.base_dir == default_store_dir()
    assert store.base_dir.startswith(str(isolated_home))
