from __future__ import annotations

import importlib
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))


@pytest.fixture
def backend_module(tmp_path, monkeypatch):
    db_path = tmp_path / "intake-test.sqlite"
    monkeypatch.setenv("INTAKE_DB_PATH", str(db_path))
    # Local classification only; remote tests swap in a mocked client.
    monkeypatch.setenv("INTAKE_API_BASE_URL", "")

    if "main" in sys.modules:
        module = importlib.reload(sys.modules["main"])
    else:
        module = importlib.import_module("main")
    return module


@pytest.fixture
def client(backend_module):
    with TestClient(backend_module.app) as test_client:
        yield test_client


@pytest.fixture
def store(tmp_path):
    from session_store import SessionStore, SQLiteSessionDB

    return SessionStore(SQLiteSessionDB(str(tmp_path / "store-test.sqlite")))
