"""Tests for session identity persistence."""

import re

import pytest

from serverflow.session import (
    SESSION_ID_KEY,
    WORKFLOW_ID_KEY,
    InMemoryKeyValueStore,
    SessionStore,
    SQLiteKeyValueStore,
    get_key_value_store,
)

UUID4 = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$")


def test_generated_session_id_is_uuid4_and_stable():
    store = InMemoryKeyValueStore()
    sessions = SessionStore(store)

    assert not sessions.has_active_session()
    session_id = sessions.get_session_id()

    assert UUID4.match(session_id)
    assert sessions.get_session_id() == session_id
    assert sessions.has_active_session()
    assert store.snapshot() == {SESSION_ID_KEY: session_id}


def test_update_and_clear_session():
    sessions = SessionStore(InMemoryKeyValueStore())
    sessions.get_session_id()

    sessions.update_session_id("server-session")
    assert sessions.get_session_id() == "server-session"

    sessions.clear_session()
    assert not sessions.has_active_session()


def test_workflow_id_is_independent_of_session():
    sessions = SessionStore(InMemoryKeyValueStore())
    sessions.save_workflow_id("wf-1")
    sessions.clear_session()

    assert sessions.get_workflow_id() == "wf-1"
    sessions.clear_workflow_id()
    assert sessions.get_workflow_id() is None


def test_sqlite_store_survives_reopen(tmp_path):
    db_path = tmp_path / "session.db"
    store = SQLiteKeyValueStore(db_path)
    sessions = SessionStore(store)
    session_id = sessions.get_session_id()
    sessions.save_workflow_id("wf-1")
    store.put(WORKFLOW_ID_KEY, "wf-2")
    store.close()

    reopened = SessionStore(SQLiteKeyValueStore(db_path))
    assert reopened.get_session_id() == session_id
    assert reopened.get_workflow_id() == "wf-2"


def test_sqlite_remove_missing_key_is_noop(tmp_path):
    store = SQLiteKeyValueStore(tmp_path / "session.db")
    store.remove("absent")
    assert store.get("absent") is None


def test_get_key_value_store_backends(tmp_path, monkeypatch):
    monkeypatch.delenv("SERVERFLOW_SESSION_STORE", raising=False)
    monkeypatch.setenv("SERVERFLOW_CONFIG", str(tmp_path / "missing.yaml"))

    assert isinstance(get_key_value_store(), InMemoryKeyValueStore)
    sqlite_store = get_key_value_store(f"sqlite://{tmp_path / 'kv.db'}")
    assert isinstance(sqlite_store, SQLiteKeyValueStore)
    assert sqlite_store.db_path == str(tmp_path / "kv.db")

    monkeypatch.setenv("SERVERFLOW_SESSION_STORE", f"sqlite://{tmp_path / 'env.db'}")
    assert isinstance(get_key_value_store(), SQLiteKeyValueStore)

    with pytest.raises(ValueError):
        get_key_value_store("redis://localhost")
