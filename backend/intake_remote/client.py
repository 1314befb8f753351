from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from .schemas import (
    ConcernAnalyzeRequest,
    ConcernAnalyzeResponse,
    FinalReportRequest,
    FinalReportResponse,
    GenerateQuestionsRequest,
    GenerateQuestionsResponse,
    WireModel,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

CONCERN_ANALYZE_PATH = "/v1/intake/concern-analyze"
FINAL_REPORT_PATH = "/v1/intake/final-report"
GENERATE_QUESTIONS_PATH = "/v1/intake/generate-questions"


@dataclass(frozen=True)
class RemoteCallResult(Generic[T]):
    ok: bool
    data: T | None = None
    error: str | None = None
    status_code: int = 0
    elapsed_ms: float = 0.0

    def as_envelope(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "error": self.error,
            "status_code": self.status_code,
            "elapsed_ms": round(self.elapsed_ms, 1),
        }


def _provider_error_message(response: httpx.Response) -> str:
    message = response.text.strip()
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        err = payload.get("error")
        if isinstance(err, dict):
            msg = err.get("message")
            if isinstance(msg, str) and msg.strip():
                return msg.strip()
        if isinstance(err, str) and err.strip():
            return err.strip()
        msg = payload.get("message")
        if isinstance(msg, str) and msg.strip():
            return msg.strip()
    return message[:300] or f"HTTP {response.status_code}"


class EnrichmentClient:
    """Async client for the intake enrichment service.

    Every call resolves to a ``RemoteCallResult``; transport errors, timeouts,
    non-2xx statuses and malformed bodies all come back as ``ok=False``.
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str | None = None,
        timeout_seconds: float = 25.0,
        connect_timeout_seconds: float = 8.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._api_key = (api_key or "").strip()
        self._timeout = httpx.Timeout(timeout_seconds, connect=connect_timeout_seconds)
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def _post(self, path: str, request: WireModel, response_model: type[T]) -> RemoteCallResult[T]:
        started = time.perf_counter()
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(f"{self.base_url}{path}", headers=self._headers(), json=request.to_wire())
        except httpx.TimeoutException:
            elapsed = (time.perf_counter() - started) * 1000
            logger.warning("enrichment call timed out path=%s elapsed_ms=%.0f", path, elapsed)
            return RemoteCallResult(ok=False, error="timeout", elapsed_ms=elapsed)
        except httpx.HTTPError as exc:
            elapsed = (time.perf_counter() - started) * 1000
            logger.warning("enrichment call failed path=%s error=%s", path, exc)
            return RemoteCallResult(ok=False, error=f"network_error: {exc}", elapsed_ms=elapsed)

        elapsed = (time.perf_counter() - started) * 1000
        if response.status_code >= 300:
            message = _provider_error_message(response)
            logger.warning(
                "enrichment call rejected path=%s status=%s message=%s",
                path,
                response.status_code,
                message,
            )
            return RemoteCallResult(
                ok=False,
                error=f"http_{response.status_code}: {message}",
                status_code=response.status_code,
                elapsed_ms=elapsed,
            )

        try:
            payload = response_model.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            logger.warning("enrichment call returned invalid payload path=%s error=%s", path, exc)
            return RemoteCallResult(
                ok=False,
                error="invalid_payload",
                status_code=response.status_code,
                elapsed_ms=elapsed,
            )
        logger.debug("enrichment call ok path=%s elapsed_ms=%.0f", path, elapsed)
        return RemoteCallResult(ok=True, data=payload, status_code=response.status_code, elapsed_ms=elapsed)

    async def analyze_concern(self, request: ConcernAnalyzeRequest) -> RemoteCallResult[ConcernAnalyzeResponse]:
        return await self._post(CONCERN_ANALYZE_PATH, request, ConcernAnalyzeResponse)

    async def final_report(self, request: FinalReportRequest) -> RemoteCallResult[FinalReportResponse]:
        return await self._post(FINAL_REPORT_PATH, request, FinalReportResponse)

    async def generate_questions(
        self, request: GenerateQuestionsRequest
    ) -> RemoteCallResult[GenerateQuestionsResponse]:
        return await self._post(GENERATE_QUESTIONS_PATH, request, GenerateQuestionsResponse)
