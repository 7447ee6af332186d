"""Domain error taxonomy.

Every error carries a stable ``code`` so the HTTP layer can map it to a
status code and clients can branch on it without parsing messages.
"""

from __future__ import annotations


class AutoCRMError(Exception):
    code = "autocrm_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ── Resolution ──────────────────────────────────────────────────────


class ResolutionError(AutoCRMError):
    code = "resolution_error"


class CustomerNotFoundError(ResolutionError):
    code = "customer_not_found"


class TicketNotFoundError(ResolutionError):
    code = "ticket_not_found"


class AmbiguousMatchError(ResolutionError):
    code = "ambiguous_match"

    def __init__(self, message: str, candidates: list[str] | None = None):
        super().__init__(message)
        self.candidates = candidates or []


# ── Interpretation / validation ────────────────────────────────────


class InterpretationError(AutoCRMError):
    code = "interpretation_error"


class ActionValidationError(AutoCRMError):
    code = "validation_error"


class TranscriptionError(AutoCRMError):
    code = "transcription_error"


# ── Authorization / lookup ─────────────────────────────────────────


class AuthorizationError(AutoCRMError):
    code = "unauthorized"


class UserNotFoundError(AutoCRMError):
    code = "user_not_found"


class ActionNotFoundError(AutoCRMError):
    code = "action_not_found"


# ── Lifecycle / execution ──────────────────────────────────────────


class InvalidTransitionError(AutoCRMError):
    code = "invalid_transition"


class ActionNotPendingError(InvalidTransitionError):
    code = "action_not_pending"


class ExecutionError(AutoCRMError):
    code = "execution_error"
