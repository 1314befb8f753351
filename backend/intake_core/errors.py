from __future__ import annotations


class IntakeError(Exception):
    pass


class IntakeValidationError(IntakeError):
    """Rejected input; the session was not touched."""


class InvalidTransitionError(IntakeValidationError):
    def __init__(self, transition: str, step: int, allowed: set[int]) -> None:
        self.transition = transition
        self.step = step
        self.allowed = allowed
        allowed_text = ", ".join(str(value) for value in sorted(allowed))
        super().__init__(f"{transition} is not allowed at step {step} (allowed: {allowed_text})")


class ClassificationFailure(IntakeError):
    def __init__(self, reason: str, status_code: int = 0) -> None:
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Concern classification failed: {reason}")


class EnrichmentFailure(IntakeError):
    def __init__(self, call: str, reason: str) -> None:
        self.call = call
        self.reason = reason
        super().__init__(f"{call} enrichment failed: {reason}")
