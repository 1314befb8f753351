from __future__ import annotations

import pytest

from intake_core import IntakeEngine, IntakeSession
from session_store import SessionBusyError, SessionNotFoundError


def test_create_get_and_save(store):
    session = IntakeEngine().start_session(locale="en-GB", age_years=40)
    store.create(session)

    loaded = store.get(session.session_id)
    assert loaded == session

    loaded.free_text = "cough"
    loaded.candidates = ["Cold/Flu"]
    loaded.step = 2
    store.save(loaded)
    assert store.get(session.session_id).candidates == ["Cold/Flu"]

    with store._db.connection() as conn:
        row = conn.execute("SELECT step FROM intake_sessions WHERE id = ?", (session.session_id,)).fetchone()
    assert row["step"] == 2


def test_missing_session(store):
    with pytest.raises(SessionNotFoundError) as excinfo:
        store.get("missing")
    assert str(excinfo.value) == "missing"
    with pytest.raises(SessionNotFoundError):
        store.save(IntakeSession(session_id="missing", locale="en-US"))
    assert store.delete("missing") is False


def test_transitions_are_listed_in_order_and_removed_with_session(store):
    session = store.create(IntakeEngine().start_session())
    store.record_transition(
        session_id=session.session_id, transition="submit_concern_text", from_step=1, to_step=2, outcome="ok"
    )
    store.record_transition(
        session_id=session.session_id,
        transition="generate_assessment",
        from_step=2,
        to_step=2,
        outcome="rejected",
        detail="generate_assessment is not allowed at step 2 (allowed: 3)",
    )

    rows = store.list_transitions(session.session_id)
    assert [row["transition"] for row in rows] == ["submit_concern_text", "generate_assessment"]
    assert rows[0]["detail"] is None
    assert rows[1]["outcome"] == "rejected"
    assert len(store.list_transitions(session.session_id, limit=1)) == 1

    assert store.delete(session.session_id) is True
    assert store.list_transitions(session.session_id) == []


def test_unknown_outcome_is_rejected(store):
    session = store.create(IntakeEngine().start_session())
    with pytest.raises(ValueError):
        store.record_transition(
            session_id=session.session_id, transition="reset", from_step=1, to_step=1, outcome="maybe"
        )


def test_exclusive_blocks_concurrent_use(store):
    with store.exclusive("s-1"):
        assert store.is_busy("s-1")
        with pytest.raises(SessionBusyError):
            with store.exclusive("s-1"):
                pass
        with store.exclusive("s-2"):
            assert store.is_busy("s-2")
    assert not store.is_busy("s-1")
    assert not store.is_busy("s-2")


def test_exclusive_releases_on_error(store):
    with pytest.raises(RuntimeError):
        with store.exclusive("s-1"):
            raise RuntimeError("boom")
    assert not store.is_busy("s-1")


def test_schema_init_is_repeatable(tmp_path):
    from session_store import SessionStore, SQLiteSessionDB

    path = str(tmp_path / "reopen.sqlite")
    session = SessionStore(SQLiteSessionDB(path)).create(IntakeEngine().start_session())
    reopened = SessionStore(SQLiteSessionDB(path))
    assert reopened.get(session.session_id) == session
