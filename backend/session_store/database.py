from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator


class SQLiteSessionDB:
    def __init__(self, db_path: str) -> None:
        self._path = Path(db_path).expanduser().resolve()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @property
    def path(self) -> str:
        return str(self._path)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._path), timeout=30.0, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        conn = self._connect()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self.connection() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS intake_sessions (
                  id TEXT PRIMARY KEY,
                  step INTEGER NOT NULL,
                  state_json TEXT NOT NULL,
                  created_at TEXT NOT NULL,
                  updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS intake_transitions (
                  id TEXT PRIMARY KEY,
                  session_id TEXT NOT NULL,
                  transition TEXT NOT NULL,
                  from_step INTEGER NOT NULL,
                  to_step INTEGER NOT NULL,
                  outcome TEXT NOT NULL,
                  detail TEXT,
                  created_at TEXT NOT NULL,
                  FOREIGN KEY (session_id) REFERENCES intake_sessions(id) ON DELETE CASCADE
                );

                CREATE INDEX IF NOT EXISTS idx_intake_transitions_session_time
                  ON intake_transitions(session_id, created_at);
                """
            )
