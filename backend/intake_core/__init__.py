from .catalog import GENERIC_SYMPTOMS, SymptomCatalog
from .classifier import DEFAULT_RULES, ConcernClassifier, ConcernRule, merge_remote_categories
from .composer import ComposedReport, ReportComposer
from .config import IntakeSettings, load_settings
from .errors import (
    ClassificationFailure,
    EnrichmentFailure,
    IntakeError,
    IntakeValidationError,
    InvalidTransitionError,
)
from .models import SEVERITY_LABELS, STEP_NAMES, ConcernClassification, PatientContext, RiskAssessment, SymptomRating
from .scoring import RiskScorer, symptom_summary
from .session import IntakeEngine, IntakeSession

__all__ = [
    "DEFAULT_RULES",
    "GENERIC_SYMPTOMS",
    "SEVERITY_LABELS",
    "STEP_NAMES",
    "ClassificationFailure",
    "ComposedReport",
    "ConcernClassification",
    "ConcernClassifier",
    "ConcernRule",
    "EnrichmentFailure",
    "IntakeEngine",
    "IntakeError",
    "IntakeSession",
    "IntakeSettings",
    "IntakeValidationError",
    "InvalidTransitionError",
    "PatientContext",
    "ReportComposer",
    "RiskAssessment",
    "RiskScorer",
    "SymptomCatalog",
    "SymptomRating",
    "load_settings",
    "merge_remote_categories",
    "symptom_summary",
]
