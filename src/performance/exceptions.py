"""Typed failures raised by the performance engine and the visit recorder.

All of them are recoverable: callers re-render with the current state.
Storage errors are never wrapped here and propagate as-is.
"""


class PerformanceError(Exception):
    """Base exception for performance engine errors."""

    code = "performance_error"
    default_message = "Erreur de calcul des indicateurs."

    def __init__(self, message: str | None = None, **context):
        self.context = context
        super().__init__(message or self.default_message)


class InvalidInput(PerformanceError, ValueError):
    """Raised for malformed or inconsistent records, before any computation."""

    code = "invalid_input"
    default_message = "Donnees invalides."


class DuplicateVisit(PerformanceError):
    """Raised when a visit already exists for the assignment on that date."""

    code = "duplicate_visit"
    default_message = "Visite deja enregistree pour ce jour."

    def __init__(self, assignment_id=None, visit_date=None):
        super().__init__(
            assignment_id=assignment_id,
            visit_date=visit_date,
        )


class QuotaExceeded(PerformanceError):
    """Raised when the monthly visit quota of the assignment is already reached."""

    code = "quota_exceeded"
    default_message = "Objectif mensuel de visites deja atteint."

    def __init__(self, assignment_id=None, month_visits: int = 0, monthly_frequency: int = 0):
        self.month_visits = month_visits
        self.monthly_frequency = monthly_frequency
        super().__init__(
            f"Objectif mensuel deja atteint ({month_visits}/{monthly_frequency}).",
            assignment_id=assignment_id,
        )


class NotFound(PerformanceError):
    """Raised when a referenced assignment, delegate or node does not exist."""

    code = "not_found"
    default_message = "Element introuvable."
