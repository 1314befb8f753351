from __future__ import annotations

import inspect
import logging
import os
import re
from pathlib import Path
from typing import Any, Awaitable, Callable

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from intake_core import (
    ClassificationFailure,
    IntakeEngine,
    IntakeSession,
    IntakeValidationError,
    InvalidTransitionError,
    load_settings,
)
from intake_remote import EnrichmentClient
from session_store import SessionBusyError, SessionNotFoundError, SessionStore, SQLiteSessionDB

_ENV_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _load_local_env_file(path: Path) -> None:
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError:
        return
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if not _ENV_KEY_RE.fullmatch(key):
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]
        os.environ.setdefault(key, value)


def _bootstrap_local_env() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    for candidate in [repo_root / ".env", repo_root / "backend/.env"]:
        if candidate.exists():
            _load_local_env_file(candidate)


_bootstrap_local_env()
settings = load_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


class SessionCreateRequest(BaseModel):
    locale: str | None = None
    age_years: float | None = None
    sex_at_birth: str | None = None
    pregnancy_status: str | None = None


class ConcernTextRequest(BaseModel):
    text: str


class SelectConcernRequest(BaseModel):
    concern: str


class SeverityUpdateRequest(BaseModel):
    index: int
    severity: int


class IntakeApp:
    def __init__(self) -> None:
        self.settings = settings
        self.db = SQLiteSessionDB(settings.db_path)
        self.store = SessionStore(self.db)
        remote = None
        if settings.remote_enabled:
            remote = EnrichmentClient(
                base_url=settings.api_base_url,
                api_key=settings.api_key,
                timeout_seconds=settings.remote_timeout_seconds,
                connect_timeout_seconds=settings.remote_connect_timeout_seconds,
            )
        self.engine = IntakeEngine(remote=remote, default_locale=settings.default_locale)
        logger.info("intake service ready remote_enabled=%s db=%s", remote is not None, self.db.path)


container = IntakeApp()
app = FastAPI(title="Intake Triage Service")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.allowed_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _session_view(session: IntakeSession) -> dict[str, Any]:
    view = session.to_dict()
    view["busy"] = container.store.is_busy(session.session_id)
    return view


def _load_session(session_id: str) -> IntakeSession:
    try:
        return container.store.get(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Unknown intake session") from exc


async def _run_transition(
    session_id: str,
    transition: str,
    action: Callable[[IntakeSession], IntakeSession | Awaitable[IntakeSession]],
) -> dict[str, Any]:
    try:
        with container.store.exclusive(session_id):
            session = _load_session(session_id)
            from_step = session.step
            try:
                outcome = action(session)
                if inspect.isawaitable(outcome):
                    outcome = await outcome
            except InvalidTransitionError as exc:
                container.store.record_transition(
                    session_id=session_id,
                    transition=transition,
                    from_step=from_step,
                    to_step=from_step,
                    outcome="rejected",
                    detail=str(exc),
                )
                raise HTTPException(status_code=409, detail=str(exc)) from exc
            except IntakeValidationError as exc:
                container.store.record_transition(
                    session_id=session_id,
                    transition=transition,
                    from_step=from_step,
                    to_step=from_step,
                    outcome="rejected",
                    detail=str(exc),
                )
                raise HTTPException(status_code=400, detail=str(exc)) from exc
            except ClassificationFailure as exc:
                logger.warning("classification failed session=%s reason=%s", session_id, exc.reason)
                container.store.record_transition(
                    session_id=session_id,
                    transition=transition,
                    from_step=from_step,
                    to_step=from_step,
                    outcome="failed",
                    detail=exc.reason,
                )
                raise HTTPException(
                    status_code=502,
                    detail="Could not analyze the concern right now. Please try again.",
                ) from exc

            container.store.save(outcome)
            container.store.record_transition(
                session_id=session_id,
                transition=transition,
                from_step=from_step,
                to_step=outcome.step,
                outcome="ok",
            )
    except SessionBusyError as exc:
        raise HTTPException(status_code=409, detail="Another action is still in progress for this session") from exc
    return _session_view(outcome)


@app.get("/health")
def health():
    return {"ok": True, "remote_enabled": container.engine.remote_enabled}


@app.get("/intake/catalog")
def catalog_lookup(concern: str | None = Query(default=None, min_length=1)):
    engine = container.engine
    if concern is None:
        return {"concerns": engine.catalog.list_concerns()}
    return {
        "concern": concern,
        "known": engine.catalog.knows(concern),
        "symptoms": list(engine.catalog.symptoms_for(concern)),
    }


@app.post("/intake/sessions", status_code=201)
def create_session(payload: SessionCreateRequest | None = None):
    payload = payload or SessionCreateRequest()
    try:
        session = container.engine.start_session(
            locale=payload.locale,
            age_years=payload.age_years,
            sex_at_birth=payload.sex_at_birth,
            pregnancy_status=payload.pregnancy_status,
        )
    except IntakeValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    container.store.create(session)
    return _session_view(session)


@app.get("/intake/sessions/{session_id}")
def get_session(session_id: str):
    return _session_view(_load_session(session_id))


@app.delete("/intake/sessions/{session_id}")
def delete_session(session_id: str):
    if container.store.is_busy(session_id):
        raise HTTPException(status_code=409, detail="Another action is still in progress for this session")
    if not container.store.delete(session_id):
        raise HTTPException(status_code=404, detail="Unknown intake session")
    return {"ok": True}


@app.get("/intake/sessions/{session_id}/transitions")
def list_transitions(session_id: str, limit: int = Query(default=50, ge=1, le=500)):
    _load_session(session_id)
    return {"items": container.store.list_transitions(session_id, limit)}


@app.post("/intake/sessions/{session_id}/concern")
async def submit_concern(session_id: str, payload: ConcernTextRequest):
    return await _run_transition(
        session_id,
        "submit_concern_text",
        lambda session: container.engine.submit_concern_text(session, payload.text),
    )


@app.post("/intake/sessions/{session_id}/select")
async def select_concern(session_id: str, payload: SelectConcernRequest):
    return await _run_transition(
        session_id,
        "select_concern",
        lambda session: container.engine.select_concern(session, payload.concern),
    )


@app.post("/intake/sessions/{session_id}/severity")
async def update_severity(session_id: str, payload: SeverityUpdateRequest):
    return await _run_transition(
        session_id,
        "update_severity",
        lambda session: container.engine.update_severity(session, payload.index, payload.severity),
    )


@app.post("/intake/sessions/{session_id}/assessment")
async def generate_assessment(session_id: str):
    return await _run_transition(session_id, "generate_assessment", container.engine.generate_assessment)


@app.post("/intake/sessions/{session_id}/back")
async def go_back(session_id: str):
    return await _run_transition(session_id, "go_back", container.engine.go_back)


@app.post("/intake/sessions/{session_id}/reset")
async def reset_session(session_id: str):
    return await _run_transition(session_id, "reset", container.engine.reset)
