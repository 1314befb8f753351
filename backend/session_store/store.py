from __future__ import annotations

import json
import threading
import uuid
from contextlib import contextmanager
from typing import Any, Iterator

from intake_core import IntakeSession

from .database import SQLiteSessionDB
from .time_utils import to_iso, utc_now

TRANSITION_OUTCOMES = {"ok", "rejected", "failed"}


class SessionNotFoundError(LookupError):
    pass


class SessionBusyError(Exception):
    pass


def _json_dumps(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


class SessionStore:
    def __init__(self, db: SQLiteSessionDB) -> None:
        self._db = db
        self._lock = threading.Lock()
        self._in_flight: set[str] = set()

    def create(self, session: IntakeSession) -> IntakeSession:
        now = to_iso(utc_now())
        with self._db.connection() as conn:
            conn.execute(
                """
                INSERT INTO intake_sessions (id, step, state_json, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (session.session_id, session.step, _json_dumps(session.to_dict()), now, now),
            )
        return session

    def get(self, session_id: str) -> IntakeSession:
        with self._db.connection() as conn:
            row = conn.execute(
                "SELECT state_json FROM intake_sessions WHERE id = ?",
                (session_id,),
            ).fetchone()
        if not row:
            raise SessionNotFoundError(session_id)
        return IntakeSession.from_dict(json.loads(row["state_json"]))

    def save(self, session: IntakeSession) -> None:
        now = to_iso(utc_now())
        with self._db.connection() as conn:
            updated = conn.execute(
                """
                UPDATE intake_sessions
                SET step = ?, state_json = ?, updated_at = ?
                WHERE id = ?
                """,
                (session.step, _json_dumps(session.to_dict()), now, session.session_id),
            ).rowcount
        if not updated:
            raise SessionNotFoundError(session.session_id)

    def delete(self, session_id: str) -> bool:
        with self._db.connection() as conn:
            deleted = conn.execute("DELETE FROM intake_sessions WHERE id = ?", (session_id,)).rowcount
        return bool(deleted)

    def record_transition(
        self,
        *,
        session_id: str,
        transition: str,
        from_step: int,
        to_step: int,
        outcome: str,
        detail: str | None = None,
    ) -> None:
        if outcome not in TRANSITION_OUTCOMES:
            raise ValueError(f"Unknown transition outcome: {outcome}")
        with self._db.connection() as conn:
            conn.execute(
                """
                INSERT INTO intake_transitions (
                  id, session_id, transition, from_step, to_step, outcome, detail, created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    uuid.uuid4().hex,
                    session_id,
                    transition,
                    from_step,
                    to_step,
                    outcome,
                    (detail or "")[:300] or None,
                    to_iso(utc_now()),
                ),
            )

    def list_transitions(self, session_id: str, limit: int = 50) -> list[dict[str, Any]]:
        with self._db.connection() as conn:
            rows = conn.execute(
                """
                SELECT transition, from_step, to_step, outcome, detail, created_at
                FROM intake_transitions
                WHERE session_id = ?
                ORDER BY created_at ASC, rowid ASC
                LIMIT ?
                """,
                (session_id, max(1, limit)),
            ).fetchall()
        return [dict(row) for row in rows]

    def is_busy(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._in_flight

    @contextmanager
    def exclusive(self, session_id: str) -> Iterator[None]:
        with self._lock:
            if session_id in self._in_flight:
                raise SessionBusyError(session_id)
            self._in_flight.add(session_id)
        try:
            yield
        finally:
            with self._lock:
                self._in_flight.discard(session_id)
