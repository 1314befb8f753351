from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .models import RiskAssessment, RiskLevel, SymptomRating

HEART_CONCERN = "Heart-related issue"
COVID_CONCERN = "COVID-19"

HEART_RED_FLAGS = (
    "Severe chest symptoms require immediate medical attention",
    "Call 911 if symptoms worsen or include arm/jaw pain",
)
BREATHING_RED_FLAG = "Difficulty breathing requires immediate medical evaluation"
HIGH_RISK_RED_FLAG = "Multiple severe symptoms present - seek immediate care"

RECOMMENDATIONS: dict[str, tuple[str, ...]] = {
    "High": (
        "Seek immediate medical attention",
        "Visit ER or urgent care",
        "Call 911 if symptoms worsen",
        "Do not drive yourself",
    ),
    "Moderate": (
        "Schedule appointment with doctor within 24-48 hours",
        "Monitor symptoms closely",
        "Rest and stay hydrated",
        "Seek immediate care if symptoms worsen",
    ),
    "Low": (
        "Rest and monitor symptoms",
        "Stay hydrated",
        "Use over-the-counter medications if appropriate",
        "Contact doctor if symptoms persist beyond 3-5 days",
    ),
}

_LEVEL_CLAUSES = {
    "High": "requires immediate medical attention",
    "Moderate": "should be evaluated by a healthcare provider soon",
    "Low": "can likely be managed with self-care, but monitor for changes",
}

NO_SYMPTOMS_TEXT = "no significant symptoms"
NO_SYMPTOMS_SUMMARY = "No significant symptoms were rated."


@dataclass(frozen=True)
class ScoreBreakdown:
    severe_count: int
    moderate_count: int
    total_score: int
    level: RiskLevel


def rated_symptoms_text(ratings: Sequence[SymptomRating]) -> str:
    return ", ".join(f"{rating.symptom} ({rating.label})" for rating in ratings if rating.severity > 0)


def symptom_summary(ratings: Sequence[SymptomRating]) -> str:
    return rated_symptoms_text(ratings) or NO_SYMPTOMS_SUMMARY


class RiskScorer:
    """Deterministic risk scoring over per-symptom severity ratings.

    Level thresholds, in precedence order:
    - two or more severe ratings, or a total of 12+  -> High
    - one severe rating, or a total of 6+            -> Moderate
    - anything else                                  -> Low
    """

    def breakdown(self, ratings: Sequence[SymptomRating]) -> ScoreBreakdown:
        severe_count = sum(1 for rating in ratings if rating.severity == 3)
        moderate_count = sum(1 for rating in ratings if rating.severity == 2)
        total_score = sum(rating.severity for rating in ratings)

        level: RiskLevel = "Low"
        if severe_count >= 2 or total_score >= 12:
            level = "High"
        elif severe_count >= 1 or total_score >= 6:
            level = "Moderate"
        return ScoreBreakdown(
            severe_count=severe_count,
            moderate_count=moderate_count,
            total_score=total_score,
            level=level,
        )

    def red_flags(self, concern: str, ratings: Sequence[SymptomRating], breakdown: ScoreBreakdown) -> list[str]:
        flags: list[str] = []
        if concern == HEART_CONCERN and breakdown.severe_count > 0:
            flags.extend(HEART_RED_FLAGS)
        # Keyword match against catalog symptom names ("Shortness of breath").
        if concern == COVID_CONCERN and any(
            "breath" in rating.symptom and rating.severity >= 2 for rating in ratings
        ):
            flags.append(BREATHING_RED_FLAG)
        if breakdown.level == "High":
            flags.append(HIGH_RISK_RED_FLAG)
        return flags

    def score(self, concern: str, ratings: Sequence[SymptomRating]) -> RiskAssessment:
        breakdown = self.breakdown(ratings)
        level = breakdown.level
        concern_text = concern.lower()
        symptoms_text = rated_symptoms_text(ratings) or NO_SYMPTOMS_TEXT

        brief = (
            f"Patient reports {concern_text} with {len(ratings)} assessed symptoms. "
            f"Overall risk level: {level}."
        )
        analysis = (
            f"Based on your reported symptoms ({symptoms_text}), you are experiencing "
            f"{level.lower()}-level concern. The symptom pattern suggests {concern_text}, "
            f"which {_LEVEL_CLAUSES[level]}."
        )
        return RiskAssessment(
            level=level,
            concern_type=concern,
            brief=brief,
            red_flags=tuple(self.red_flags(concern, ratings, breakdown)),
            analysis=analysis,
            recommendations=RECOMMENDATIONS[level],
        )
