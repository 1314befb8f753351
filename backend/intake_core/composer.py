from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from typing import Any

from intake_remote import (
    EnrichmentClient,
    FinalReportRequest,
    FinalReportResponse,
    GenerateQuestionsRequest,
    RemoteCallResult,
)

from .errors import EnrichmentFailure
from .models import RiskAssessment, SymptomRating
from .scoring import symptom_summary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComposedReport:
    assessment: RiskAssessment
    enrichment_applied: bool = False
    disclaimer: str | None = None
    safety_notes: tuple[str, ...] = ()


def _clean_lines(values: Iterable[Any] | None) -> list[str]:
    cleaned: list[str] = []
    for value in values or []:
        if not isinstance(value, str):
            continue
        text = re.sub(r"\s+", " ", value).strip()
        if text:
            cleaned.append(text)
    return cleaned


def _unwrap(call: str, result: RemoteCallResult) -> Any:
    if not result.ok or result.data is None:
        raise EnrichmentFailure(call, result.error or "unknown_error")
    return result.data


class ReportComposer:
    def compose(self, local: RiskAssessment, remote: FinalReportResponse | None) -> RiskAssessment:
        # level, red_flags and concern_type are never taken from the remote report.
        if remote is None:
            return local
        summary = (remote.summary or "").strip()
        analysis = (remote.analysis or "").strip()
        recommendations = _clean_lines(remote.recommendations)
        return replace(
            local,
            brief=summary or local.brief,
            analysis=analysis or local.analysis,
            recommendations=tuple(recommendations) if recommendations else local.recommendations,
        )

    async def enrich(
        self,
        local: RiskAssessment,
        ratings: Sequence[SymptomRating],
        client: EnrichmentClient | None,
    ) -> ComposedReport:
        if client is None:
            return ComposedReport(assessment=local)

        request = FinalReportRequest(
            risk_level=local.level,
            concern_type=local.concern_type,
            symptom_summary=symptom_summary(ratings),
            red_flags=list(local.red_flags),
            recommendations=list(local.recommendations),
        )
        try:
            report: FinalReportResponse = _unwrap("final-report", await client.final_report(request))
        except EnrichmentFailure as exc:
            logger.warning("using local assessment: %s", exc)
            return ComposedReport(assessment=local)

        if report.risk_level and report.risk_level != local.level:
            logger.info(
                "ignoring remote risk level remote=%s local=%s",
                report.risk_level,
                local.level,
            )
        disclaimer = (report.disclaimer or "").strip()
        return ComposedReport(
            assessment=self.compose(local, report),
            enrichment_applied=True,
            disclaimer=disclaimer or None,
            safety_notes=tuple(_clean_lines(report.safety_notes)),
        )

    async def fetch_clinician_questions(
        self,
        concern: str,
        clinical_summary: str | None,
        client: EnrichmentClient | None,
    ) -> list[str]:
        if client is None or not (clinical_summary or "").strip():
            return []
        request = GenerateQuestionsRequest(concern_type=concern, clinical_summary=clinical_summary.strip())
        try:
            response = _unwrap("generate-questions", await client.generate_questions(request))
        except EnrichmentFailure as exc:
            logger.warning("no clinician questions: %s", exc)
            return []
        return _clean_lines(response.questions)
