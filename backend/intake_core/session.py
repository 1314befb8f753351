from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any

from intake_remote import (
    PREGNANCY_STATUS_VALUES,
    SEX_AT_BIRTH_VALUES,
    ConcernAnalyzeRequest,
    EnrichmentClient,
)

from .catalog import SymptomCatalog
from .classifier import ConcernClassifier
from .composer import ReportComposer
from .errors import IntakeValidationError, InvalidTransitionError
from .models import (
    SEVERITY_VALUES,
    STEP_ASSESSMENT_READY,
    STEP_CONCERN_SELECTION,
    STEP_CONCERN_TEXT,
    STEP_NAMES,
    STEP_SYMPTOM_RATINGS,
    ConcernClassification,
    PatientContext,
    RiskAssessment,
    SymptomRating,
)
from .scoring import RiskScorer

logger = logging.getLogger(__name__)

MAX_AGE_YEARS = 130


@dataclass
class IntakeSession:
    session_id: str
    locale: str
    patient: PatientContext = field(default_factory=PatientContext)
    step: int = STEP_CONCERN_TEXT
    free_text: str = ""
    candidates: list[str] = field(default_factory=list)
    selected_concern: str | None = None
    ratings: list[SymptomRating] = field(default_factory=list)
    assessment: RiskAssessment | None = None
    clinician_questions: list[str] = field(default_factory=list)
    classification_source: str | None = None
    clinical_summary: str | None = None
    remote_session_id: str | None = None
    concern_safety_notes: list[str] = field(default_factory=list)
    report_disclaimer: str | None = None
    report_safety_notes: list[str] = field(default_factory=list)
    enrichment_applied: bool = False

    @property
    def state(self) -> str:
        return STEP_NAMES[self.step]

    def clear_classification(self) -> None:
        self.candidates = []
        self.classification_source = None
        self.clinical_summary = None
        self.concern_safety_notes = []

    def clear_selection(self) -> None:
        self.selected_concern = None
        self.ratings = []

    def clear_report(self) -> None:
        self.assessment = None
        self.clinician_questions = []
        self.report_disclaimer = None
        self.report_safety_notes = []
        self.enrichment_applied = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "locale": self.locale,
            "patient": self.patient.as_dict(),
            "step": self.step,
            "state": self.state,
            "free_text": self.free_text,
            "candidates": list(self.candidates),
            "selected_concern": self.selected_concern,
            "ratings": [rating.as_dict() for rating in self.ratings],
            "assessment": self.assessment.as_dict() if self.assessment else None,
            "clinician_questions": list(self.clinician_questions),
            "classification_source": self.classification_source,
            "clinical_summary": self.clinical_summary,
            "remote_session_id": self.remote_session_id,
            "concern_safety_notes": list(self.concern_safety_notes),
            "report_disclaimer": self.report_disclaimer,
            "report_safety_notes": list(self.report_safety_notes),
            "enrichment_applied": self.enrichment_applied,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "IntakeSession":
        patient = payload.get("patient") or {}
        assessment = payload.get("assessment")
        return cls(
            session_id=payload["session_id"],
            locale=payload.get("locale") or "en-US",
            patient=PatientContext(
                age_years=patient.get("age_years"),
                sex_at_birth=patient.get("sex_at_birth"),
                pregnancy_status=patient.get("pregnancy_status"),
            ),
            step=int(payload.get("step", STEP_CONCERN_TEXT)),
            free_text=payload.get("free_text") or "",
            candidates=list(payload.get("candidates") or []),
            selected_concern=payload.get("selected_concern"),
            ratings=[
                SymptomRating(symptom=row["symptom"], severity=int(row.get("severity", 0)))
                for row in payload.get("ratings") or []
            ],
            assessment=RiskAssessment.from_dict(assessment) if assessment else None,
            clinician_questions=list(payload.get("clinician_questions") or []),
            classification_source=payload.get("classification_source"),
            clinical_summary=payload.get("clinical_summary"),
            remote_session_id=payload.get("remote_session_id"),
            concern_safety_notes=list(payload.get("concern_safety_notes") or []),
            report_disclaimer=payload.get("report_disclaimer"),
            report_safety_notes=list(payload.get("report_safety_notes") or []),
            enrichment_applied=bool(payload.get("enrichment_applied", False)),
        )


def _validate_patient(
    age_years: float | None,
    sex_at_birth: str | None,
    pregnancy_status: str | None,
) -> PatientContext:
    if age_years is not None:
        if isinstance(age_years, bool) or not isinstance(age_years, (int, float)):
            raise IntakeValidationError("age_years must be a number.")
        if age_years < 0 or age_years > MAX_AGE_YEARS:
            raise IntakeValidationError(f"age_years must be between 0 and {MAX_AGE_YEARS}.")
    if sex_at_birth is not None and sex_at_birth not in SEX_AT_BIRTH_VALUES:
        raise IntakeValidationError(f"Unsupported sex_at_birth: {sex_at_birth}")
    if pregnancy_status is not None and pregnancy_status not in PREGNANCY_STATUS_VALUES:
        raise IntakeValidationError(f"Unsupported pregnancy_status: {pregnancy_status}")
    return PatientContext(age_years=age_years, sex_at_birth=sex_at_birth, pregnancy_status=pregnancy_status)


class IntakeEngine:
    """Drives an ``IntakeSession`` through the four-step intake flow.

    Each transition validates against the session first and only then
    mutates it, so a rejected call leaves the session exactly as it was.
    Remote calls are awaited before any field is written.
    """

    _ALLOWED_STEPS = {
        "submit_concern_text": {STEP_CONCERN_TEXT},
        "select_concern": {STEP_CONCERN_SELECTION},
        "update_severity": {STEP_SYMPTOM_RATINGS},
        "generate_assessment": {STEP_SYMPTOM_RATINGS},
        "go_back": {STEP_CONCERN_SELECTION, STEP_SYMPTOM_RATINGS},
        "reset": {STEP_CONCERN_TEXT, STEP_CONCERN_SELECTION, STEP_SYMPTOM_RATINGS, STEP_ASSESSMENT_READY},
    }

    def __init__(
        self,
        *,
        catalog: SymptomCatalog | None = None,
        classifier: ConcernClassifier | None = None,
        scorer: RiskScorer | None = None,
        composer: ReportComposer | None = None,
        remote: EnrichmentClient | None = None,
        default_locale: str = "en-US",
    ) -> None:
        self.catalog = catalog or SymptomCatalog()
        self.classifier = classifier or ConcernClassifier()
        self.scorer = scorer or RiskScorer()
        self.composer = composer or ReportComposer()
        self.remote = remote
        self.default_locale = default_locale

    @property
    def remote_enabled(self) -> bool:
        return self.remote is not None

    def start_session(
        self,
        *,
        locale: str | None = None,
        age_years: float | None = None,
        sex_at_birth: str | None = None,
        pregnancy_status: str | None = None,
        session_id: str | None = None,
    ) -> IntakeSession:
        patient = _validate_patient(age_years, sex_at_birth, pregnancy_status)
        return IntakeSession(
            session_id=session_id or uuid.uuid4().hex,
            locale=(locale or "").strip() or self.default_locale,
            patient=patient,
        )

    def _guard(self, session: IntakeSession, transition: str) -> None:
        allowed = self._ALLOWED_STEPS[transition]
        if session.step not in allowed:
            raise InvalidTransitionError(transition, session.step, allowed)

    def _advance(self, session: IntakeSession, transition: str, next_step: int) -> None:
        logger.info(
            "intake transition=%s session=%s step=%s->%s",
            transition,
            session.session_id,
            session.step,
            next_step,
        )
        session.step = next_step

    async def submit_concern_text(self, session: IntakeSession, text: str) -> IntakeSession:
        self._guard(session, "submit_concern_text")
        cleaned = (text or "").strip() if isinstance(text, str) else ""
        if not cleaned:
            raise IntakeValidationError("Concern text must not be empty.")

        if self.remote is None:
            classification = ConcernClassification(categories=tuple(self.classifier.classify(cleaned)))
        else:
            request = ConcernAnalyzeRequest(
                free_text_concern=cleaned,
                locale=session.locale,
                session_id=session.remote_session_id,
                age_years=session.patient.age_years,
                sex_at_birth=session.patient.sex_at_birth,
                current_pregnancy_status=session.patient.pregnancy_status,
            )
            logger.debug("classifying concern remotely session=%s chars=%d", session.session_id, len(cleaned))
            # Raises ClassificationFailure; nothing below runs on failure.
            classification = await self.classifier.classify_remote(self.remote, request)

        session.free_text = cleaned
        session.candidates = list(classification.categories)
        session.classification_source = classification.source
        session.clinical_summary = classification.clinical_summary
        session.concern_safety_notes = list(classification.safety_notes)
        if classification.remote_session_id:
            session.remote_session_id = classification.remote_session_id
        self._advance(session, "submit_concern_text", STEP_CONCERN_SELECTION)
        return session

    def select_concern(self, session: IntakeSession, concern: str) -> IntakeSession:
        self._guard(session, "select_concern")
        if not session.candidates:
            raise IntakeValidationError("No candidate concerns are available to select from.")
        cleaned = concern.strip() if isinstance(concern, str) else ""
        if not cleaned:
            raise IntakeValidationError("Concern must not be empty.")
        if cleaned not in session.candidates:
            logger.info("selected concern outside candidate list session=%s", session.session_id)

        symptoms = self.catalog.symptoms_for(cleaned)
        session.selected_concern = cleaned
        session.ratings = [SymptomRating(symptom=symptom, severity=0) for symptom in symptoms]
        self._advance(session, "select_concern", STEP_SYMPTOM_RATINGS)
        return session

    def update_severity(self, session: IntakeSession, index: int, severity: int) -> IntakeSession:
        self._guard(session, "update_severity")
        if isinstance(index, bool) or not isinstance(index, int):
            raise IntakeValidationError("Rating index must be an integer.")
        if index < 0 or index >= len(session.ratings):
            raise IntakeValidationError(f"Rating index {index} is out of range.")
        if isinstance(severity, bool) or not isinstance(severity, int) or severity not in SEVERITY_VALUES:
            raise IntakeValidationError("Severity must be one of 0, 1, 2, 3.")

        session.ratings[index].severity = severity
        return session

    async def generate_assessment(self, session: IntakeSession) -> IntakeSession:
        self._guard(session, "generate_assessment")
        if not session.ratings or not session.selected_concern:
            raise IntakeValidationError("At least one symptom rating is required.")

        concern = session.selected_concern
        local = self.scorer.score(concern, session.ratings)
        report = await self.composer.enrich(local, session.ratings, self.remote)
        questions = await self.composer.fetch_clinician_questions(concern, session.clinical_summary, self.remote)

        session.assessment = report.assessment
        session.enrichment_applied = report.enrichment_applied
        session.report_disclaimer = report.disclaimer
        session.report_safety_notes = list(report.safety_notes)
        session.clinician_questions = questions
        self._advance(session, "generate_assessment", STEP_ASSESSMENT_READY)
        return session

    def go_back(self, session: IntakeSession) -> IntakeSession:
        self._guard(session, "go_back")
        if session.step == STEP_SYMPTOM_RATINGS:
            session.clear_selection()
            self._advance(session, "go_back", STEP_CONCERN_SELECTION)
        else:
            session.clear_classification()
            self._advance(session, "go_back", STEP_CONCERN_TEXT)
        return session

    def reset(self, session: IntakeSession) -> IntakeSession:
        self._guard(session, "reset")
        session.free_text = ""
        session.remote_session_id = None
        session.clear_classification()
        session.clear_selection()
        session.clear_report()
        self._advance(session, "reset", STEP_CONCERN_TEXT)
        return session
