from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

RiskLevel = Literal["Low", "Moderate", "High"]

SEVERITY_LABELS = ("None", "Mild", "Moderate", "Severe")
SEVERITY_VALUES = {0, 1, 2, 3}

STEP_CONCERN_TEXT = 1
STEP_CONCERN_SELECTION = 2
STEP_SYMPTOM_RATINGS = 3
STEP_ASSESSMENT_READY = 4

STEP_NAMES = {
    STEP_CONCERN_TEXT: "AwaitingConcernText",
    STEP_CONCERN_SELECTION: "AwaitingConcernSelection",
    STEP_SYMPTOM_RATINGS: "AwaitingSymptomRatings",
    STEP_ASSESSMENT_READY: "AssessmentReady",
}


@dataclass
class SymptomRating:
    symptom: str
    severity: int = 0

    @property
    def label(self) -> str:
        return SEVERITY_LABELS[self.severity]

    def as_dict(self) -> dict[str, Any]:
        return {"symptom": self.symptom, "severity": self.severity, "label": self.label}


@dataclass(frozen=True)
class RiskAssessment:
    level: RiskLevel
    concern_type: str
    brief: str
    red_flags: tuple[str, ...] = ()
    analysis: str = ""
    recommendations: tuple[str, ...] = ()

    def as_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "concern_type": self.concern_type,
            "brief": self.brief,
            "red_flags": list(self.red_flags),
            "analysis": self.analysis,
            "recommendations": list(self.recommendations),
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "RiskAssessment":
        return cls(
            level=payload["level"],
            concern_type=payload["concern_type"],
            brief=payload.get("brief", ""),
            red_flags=tuple(payload.get("red_flags") or ()),
            analysis=payload.get("analysis", ""),
            recommendations=tuple(payload.get("recommendations") or ()),
        )


@dataclass
class PatientContext:
    age_years: float | None = None
    sex_at_birth: str | None = None
    pregnancy_status: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "age_years": self.age_years,
            "sex_at_birth": self.sex_at_birth,
            "pregnancy_status": self.pregnancy_status,
        }


@dataclass(frozen=True)
class ConcernClassification:
    categories: tuple[str, ...]
    source: Literal["local", "remote"] = "local"
    clinical_summary: str | None = None
    remote_session_id: str | None = None
    safety_notes: tuple[str, ...] = field(default_factory=tuple)
