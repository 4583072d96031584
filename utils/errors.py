"""
Custom Exception Hierarchy

Error types raised by the patient API client and the assessment job.
Per-field data problems are never raised; they become ScoreResult.is_invalid.
"""

from typing import Any, Optional


class AssessmentError(Exception):
    """Base exception for all assessment run errors."""

    def __init__(
        self,
        message: str,
        code: str = "ASSESSMENT_ERROR",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(AssessmentError):
    """A required setting is missing or unusable."""

    def __init__(self, message: str, setting: str) -> None:
        super().__init__(message, code="CONFIGURATION_ERROR", details={"setting": setting})
        self.setting = setting


class RetryableStatusError(AssessmentError):
    """Server answered with a status worth retrying (429, 500, 503)."""

    def __init__(self, status_code: int, body: str = "") -> None:
        super().__init__(
            f"Retryable HTTP status {status_code}",
            code="RETRYABLE_STATUS",
            details={"status_code": status_code},
        )
        self.status_code = status_code
        self.body = body


class NonRetryableHTTPError(AssessmentError):
    """Server answered with a non-success status that must not be retried."""

    def __init__(self, status_code: int, body: str = "", description: str = "") -> None:
        super().__init__(
            f"Non-retryable HTTP error {status_code} from {description}: {body[:500]}",
            code="HTTP_ERROR",
            details={"status_code": status_code, "request": description},
        )
        self.status_code = status_code
        self.body = body


class MalformedResponseError(AssessmentError):
    """Response body could not be decoded or has an unexpected shape."""

    def __init__(self, message: str, description: str = "") -> None:
        super().__init__(message, code="MALFORMED_RESPONSE", details={"request": description})


class RetriesExhaustedError(AssessmentError):
    """Every attempt of a request failed."""

    def __init__(self, description: str, attempts: int, last_error: Optional[BaseException]) -> None:
        super().__init__(
            f"Failed to fetch from {description} after {attempts} attempts: {last_error}",
            code="RETRIES_EXHAUSTED",
            details={"request": description, "attempts": attempts},
        )
        self.description = description
        self.attempts = attempts
        self.last_error = last_error


class PaginationLimitError(AssessmentError):
    """Source still reports more pages after the configured page cap."""

    def __init__(self, max_pages: int, records_fetched: int) -> None:
        super().__init__(
            f"Source still reports hasNext after {max_pages} pages",
            code="PAGINATION_LIMIT",
            details={"max_pages": max_pages, "records_fetched": records_fetched},
        )
        self.max_pages = max_pages
        self.records_fetched = records_fetched
