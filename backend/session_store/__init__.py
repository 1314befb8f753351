from .database import SQLiteSessionDB
from .store import SessionBusyError, SessionNotFoundError, SessionStore

__all__ = [
    "SQLiteSessionDB",
    "SessionBusyError",
    "SessionNotFoundError",
    "SessionStore",
]
