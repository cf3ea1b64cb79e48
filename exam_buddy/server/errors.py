# server/errors.py
"""
Error kinds raised by the Exam Buddy backend.

Every error knows the HTTP status it maps to and the message the browser
should show. `detail` is for server logs only; `raw` (model output) is
echoed back to the caller where the endpoint allows it.
"""

from typing import Any, Dict, List, Optional


class ExamBuddyError(Exception):
    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        detail: Optional[str] = None,
        raw: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.detail = detail
        self.raw = raw

    def __str__(self) -> str:
        return self.message

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.raw is not None:
            body["raw"] = self.raw
        return body


class InputValidationError(ExamBuddyError):
    """User-correctable problem with the request body."""

    status_code = 400


class ConfigurationError(ExamBuddyError):
    """Server is missing required configuration. Never user-correctable."""

    status_code = 500


# ---------------------------------------------------------------------------
# Gateway
# ---------------------------------------------------------------------------


class GatewayError(ExamBuddyError):
    status_code = 500


class RateLimited(GatewayError):
    status_code = 429


class QuotaExhausted(GatewayError):
    status_code = 402


class UpstreamFailure(GatewayError):
    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        super().__init__(message, detail=detail)
        self.status = status


class TransportFailure(UpstreamFailure):
    """Network-level failure: timeout, DNS, connection reset."""


# ---------------------------------------------------------------------------
# Normalizer
# ---------------------------------------------------------------------------


class NormalizeError(ExamBuddyError):
    status_code = 500


class EmptyResponse(NormalizeError):
    pass


class ParseFailure(NormalizeError):
    pass


class SchemaViolation(NormalizeError):
    def __init__(
        self,
        message: str,
        *,
        raw: Optional[str] = None,
        problems: Optional[List[str]] = None,
    ):
        super().__init__(message, raw=raw, detail="; ".join(problems or []))
        self.problems = problems or []
