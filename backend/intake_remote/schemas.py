from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SexAtBirth = Literal["female", "male", "intersex", "unknown"]
PregnancyStatus = Literal["pregnant", "possibly_pregnant", "not_pregnant", "unknown"]
RiskLevelWire = Literal["Low", "Moderate", "High"]

SEX_AT_BIRTH_VALUES = {"female", "male", "intersex", "unknown"}
PREGNANCY_STATUS_VALUES = {"pregnant", "possibly_pregnant", "not_pregnant", "unknown"}


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ConcernAnalyzeRequest(WireModel):
    free_text_concern: str
    locale: str | None = None
    session_id: str | None = None
    age_years: float | None = None
    sex_at_birth: SexAtBirth | None = None
    current_pregnancy_status: PregnancyStatus | None = None


# Replies may carry null for any field; callers fall back field by field.
class ConcernAnalyzeResponse(WireModel):
    session_id: str | None = None
    primary_category: str | None = None
    candidate_categories: list[str] | None = None
    clinical_summary: str | None = None
    psychosocial_factors_mentioned: bool | None = None
    duration_text: str | None = None
    body_locations: list[str] | None = None
    safety_notes: list[str] | None = None


class FinalReportRequest(WireModel):
    risk_level: RiskLevelWire
    concern_type: str
    symptom_summary: str
    red_flags: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class FinalReportResponse(WireModel):
    risk_level: str | None = None
    concern_type: str | None = None
    summary: str | None = None
    analysis: str | None = None
    recommendations: list[str] | None = None
    disclaimer: str | None = None
    safety_notes: list[str] | None = None


class GenerateQuestionsRequest(WireModel):
    concern_type: str
    clinical_summary: str


class GenerateQuestionsResponse(WireModel):
    concern_type: str | None = None
    questions: list[str] | None = None
    rationale_notes: list[str] | None = None
    safety_notes: list[str] | None = None
