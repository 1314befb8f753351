from .client import EnrichmentClient, RemoteCallResult
from .schemas import (
    PREGNANCY_STATUS_VALUES,
    SEX_AT_BIRTH_VALUES,
    ConcernAnalyzeRequest,
    ConcernAnalyzeResponse,
    FinalReportRequest,
    FinalReportResponse,
    GenerateQuestionsRequest,
    GenerateQuestionsResponse,
)

__all__ = [
    "PREGNANCY_STATUS_VALUES",
    "SEX_AT_BIRTH_VALUES",
    "ConcernAnalyzeRequest",
    "ConcernAnalyzeResponse",
    "EnrichmentClient",
    "FinalReportRequest",
    "FinalReportResponse",
    "GenerateQuestionsRequest",
    "GenerateQuestionsResponse",
    "RemoteCallResult",
]
