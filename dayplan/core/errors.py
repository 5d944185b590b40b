"""
Error taxonomy for the plan pipeline.

Every failure raised below the route layer is one of these. The app-level
exception handler in ``dayplan.main`` renders them as ``{"error": code}`` plus
an optional ``detail`` string, using ``status_code`` as the HTTP status.
"""
from typing import Optional


class PlanServiceError(Exception):
    code = "server_error"
    status_code = 500

    def __init__(self, detail: Optional[str] = None, code: Optional[str] = None):
        super().__init__(detail or code or self.code)
        self.detail = detail
        if code:
            self.code = code

    def to_body(self) -> dict:
        body = {"error": self.code}
        if self.detail:
            body["detail"] = self.detail
        return body


class AuthError(PlanServiceError):
    """Missing or invalid bearer credential."""
    code = "unauthorized"
    status_code = 401


class ValidationError(PlanServiceError):
    """Bad request shape or size."""
    code = "invalid_prompt"
    status_code = 400


class EngineError(PlanServiceError):
    """Generation failed or produced output that does not fit the plan schema."""
    code = "invalid_ai_response"
    status_code = 500


class QuotaError(PlanServiceError):
    """Entitlement exhausted. A business outcome, not a fault."""
    code = "usage_limit_reached"
    status_code = 402


class PersistenceError(PlanServiceError):
    code = "rpc_failed"
    status_code = 400


class ServerError(PlanServiceError):
    code = "server_error"
    status_code = 500


def is_usage_limit_message(message: str) -> bool:
    msg = (message or "").lower()
    return "usage_limit_reached" in msg or ("usage" in msg and "limit" in msg)


def classify_store_error(message: str) -> PlanServiceError:
    """Map a storage failure message to QuotaError or PersistenceError."""
    if is_usage_limit_message(message):
        return QuotaError(detail=message)
    return PersistenceError(detail=message)
