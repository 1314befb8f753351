from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _backend_root() -> Path:
    # backend/intake_core/config.py -> backend
    return Path(__file__).resolve().parents[1]


def _getenv_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return default if value is None else value.strip()


def _getenv_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class IntakeSettings:
    api_base_url: str
    api_key: str
    remote_timeout_seconds: float
    remote_connect_timeout_seconds: float
    default_locale: str
    db_path: str
    log_level: str
    allowed_origins: tuple[str, ...]

    @property
    def remote_enabled(self) -> bool:
        return bool(self.api_base_url)


def load_settings() -> IntakeSettings:
    origins = _getenv_str("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
    return IntakeSettings(
        api_base_url=_getenv_str("INTAKE_API_BASE_URL", "").rstrip("/"),
        api_key=_getenv_str("INTAKE_API_KEY", ""),
        remote_timeout_seconds=max(1.0, _getenv_float("INTAKE_REMOTE_TIMEOUT_SECONDS", 25.0)),
        remote_connect_timeout_seconds=max(0.5, _getenv_float("INTAKE_REMOTE_CONNECT_TIMEOUT_SECONDS", 8.0)),
        default_locale=_getenv_str("INTAKE_DEFAULT_LOCALE", "en-US") or "en-US",
        db_path=_getenv_str("INTAKE_DB_PATH", str(_backend_root() / "intake.sqlite")),
        log_level=_getenv_str("INTAKE_LOG_LEVEL", "INFO").upper() or "INFO",
        allowed_origins=tuple(origin.strip() for origin in origins if origin.strip()),
    )
