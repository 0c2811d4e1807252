"""Domain error taxonomy.

Every error raised by the domain layer is a DomainError subclass carrying a
stable machine-readable ``code`` and the HTTP status the API boundary maps it
to.  Handlers in src/api/errors.py render them into the ``{error, code}``
envelope; nothing inside the domain catches them except the criteria
evaluator, which converts unexpected failures into skipped results.
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base class for all typed domain failures."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


# ------------------------------------------------------------------------- #
# 400                                                                        #
# ------------------------------------------------------------------------- #


class ValidationError(DomainError):
    status_code = 400
    code = "VALIDATION_INVALID_INPUT"
    message = "Invalid input"


class InvalidDecimal(ValidationError):
    code = "VALIDATION_INVALID_NUMBER"
    message = "Invalid decimal value"


class DivisionByZero(ValidationError):
    code = "VALIDATION_DIVISION_BY_ZERO"
    message = "Division by zero"


class UnsupportedCurrency(ValidationError):
    code = "VALIDATION_INVALID_CURRENCY"
    message = "Unsupported currency"


class Expired(ValidationError):
    """The recommendation's expires_at has passed."""

    code = "RECOMMENDATION_EXPIRED"
    message = "Recommendation has expired"


# ------------------------------------------------------------------------- #
# 404                                                                        #
# ------------------------------------------------------------------------- #


class NotFoundError(DomainError):
    status_code = 404
    code = "NOT_FOUND_RESOURCE"
    message = "Resource not found"


class CriteriaNotFound(NotFoundError):
    code = "NOT_FOUND_CRITERIA"
    message = "Criteria set not found"


class NoCriteriaFound(NotFoundError):
    """The user has no active criteria set (optionally for a target market)."""

    code = "NOT_FOUND_ACTIVE_CRITERIA"
    message = "No active criteria set found"


class PortfolioNotFound(NotFoundError):
    code = "NOT_FOUND_PORTFOLIO"
    message = "Portfolio not found"


class RecommendationNotFound(NotFoundError):
    code = "NOT_FOUND_RECOMMENDATION"
    message = "Recommendation not found"


class RateNotFoundError(NotFoundError):
    code = "RATE_NOT_FOUND"
    message = "Exchange rate not found"


# ------------------------------------------------------------------------- #
# 409                                                                        #
# ------------------------------------------------------------------------- #


class LimitExceededError(DomainError):
    status_code = 409
    code = "LIMIT_EXCEEDED"
    message = "Resource limit exceeded"


class ConflictError(DomainError):
    status_code = 409
    code = "CONFLICT_RESOURCE"
    message = "Resource conflict"


class AlreadyConfirmed(ConflictError):
    code = "CONFLICT_ALREADY_CONFIRMED"
    message = "Recommendation has already been confirmed"


# ------------------------------------------------------------------------- #
# 5xx                                                                        #
# ------------------------------------------------------------------------- #


class InternalError(DomainError):
    status_code = 500
    code = "INTERNAL_ERROR"
    message = "An unexpected error occurred"


class DatabaseUnavailable(InternalError):
    """Connection-level failure; the client may retry."""

    status_code = 503
    code = "DATABASE_CONNECTION_ERROR"
    message = "Database is unavailable"


class DatabaseTimeout(InternalError):
    status_code = 503
    code = "DATABASE_TIMEOUT"
    message = "Database operation timed out"
