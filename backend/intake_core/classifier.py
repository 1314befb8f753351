from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from intake_remote import ConcernAnalyzeRequest, EnrichmentClient

from .errors import ClassificationFailure
from .models import ConcernClassification

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConcernRule:
    name: str
    pattern: re.Pattern[str] | None
    categories: tuple[str, ...]

    def matches(self, lowered: str) -> bool:
        return self.pattern is None or bool(self.pattern.search(lowered))


# Substring matches on purpose: "headache" hits the head rule.
DEFAULT_RULES: tuple[ConcernRule, ...] = (
    ConcernRule(
        "cardiac",
        re.compile(r"chest|heart|pressure|tight"),
        ("Heart-related issue", "Anxiety/Panic Attack", "Respiratory Issue"),
    ),
    ConcernRule(
        "respiratory_infection",
        re.compile(r"fever|cough|cold|throat"),
        ("Cold/Flu", "COVID-19", "Strep Throat", "Allergies"),
    ),
    ConcernRule(
        "gastrointestinal",
        re.compile(r"stomach|nausea|vomit|diarrhea"),
        ("Food Poisoning", "Stomach Flu", "IBS", "Gastritis"),
    ),
    ConcernRule(
        "headache",
        re.compile(r"head|migraine"),
        ("Migraine", "Tension Headache", "Sinus Issue"),
    ),
    ConcernRule("catch_all", None, ("General Malaise", "Viral Infection", "Stress/Anxiety")),
)


def merge_remote_categories(primary: str | None, candidates: Iterable[str] | None) -> list[str]:
    merged: list[str] = []
    seen: set[str] = set()
    for value in [primary, *(candidates or [])]:
        if not isinstance(value, str):
            continue
        cleaned = value.strip()
        if not cleaned or cleaned in seen:
            continue
        seen.add(cleaned)
        merged.append(cleaned)
    return merged


class ConcernClassifier:
    def __init__(self, rules: Sequence[ConcernRule] = DEFAULT_RULES) -> None:
        if not rules or rules[-1].pattern is not None:
            raise ValueError("Concern rules must end with a catch-all rule.")
        self.rules = tuple(rules)

    def matching_rule(self, free_text: str) -> ConcernRule:
        lowered = (free_text or "").lower()
        for rule in self.rules:
            if rule.matches(lowered):
                return rule
        return self.rules[-1]

    def classify(self, free_text: str) -> list[str]:
        return list(self.matching_rule(free_text).categories)

    async def classify_remote(
        self,
        client: EnrichmentClient,
        request: ConcernAnalyzeRequest,
    ) -> ConcernClassification:
        result = await client.analyze_concern(request)
        if not result.ok or result.data is None:
            raise ClassificationFailure(result.error or "unknown_error", status_code=result.status_code)

        response = result.data
        categories = merge_remote_categories(response.primary_category, response.candidate_categories)
        if not categories:
            raise ClassificationFailure("empty_categories", status_code=result.status_code)
        logger.info(
            "remote classification ok categories=%d elapsed_ms=%.0f",
            len(categories),
            result.elapsed_ms,
        )
        summary = (response.clinical_summary or "").strip()
        return ConcernClassification(
            categories=tuple(categories),
            source="remote",
            clinical_summary=summary or None,
            remote_session_id=response.session_id,
            safety_notes=tuple(note for note in response.safety_notes or [] if note.strip()),
        )
