"""
Validation-specific exceptions.

Validation outcomes are reported as data (see violations.py). Exceptions are
reserved for:
- Stage 1 input that is not a JSON object (converted to a violation by the pipeline)
- A JSON Schema document that cannot be loaded (configuration error)
- Callers that want a failed report as an exception (the HTTP layer)
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .pipeline import ValidationReport


class ValidationError(Exception):
    """
    Base exception for all validation errors.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """
        Initialize validation error.

        Args:
            message: Human-readable error description
            details: Structured error data for logging/metrics
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class JSONParseError(ValidationError):
    """
    Stage 1: JSON parsing failed.

    Raised when the submitted document is not a JSON object.
    """

    def __init__(
        self,
        message: str,
        raw_content: str | None = None,
        parse_error: str | None = None,
        error_type: str = "json_decode_error",
    ):
        """
        Initialize JSON parse error.

        Args:
            message: Error description
            raw_content: First 500 chars of malformed content (for debugging)
            parse_error: Original json.JSONDecodeError message
            error_type: Short machine-readable reason (empty_content, not_json_object, ...)
        """
        details = {}
        if raw_content:
            details["content_snippet"] = raw_content[:500]
        if parse_error:
            details["parse_error"] = parse_error

        super().__init__(message, details)
        self.error_type = error_type


class SchemaValidationError(ValidationError):
    """
    Stage 2: the JSON Schema document itself is unusable.

    Raised when a configured schema file cannot be found or parsed.
    """

    def __init__(self, message: str, schema_path: str | None = None):
        details = {}
        if schema_path:
            details["schema_path"] = schema_path

        super().__init__(message, details)


class ExamPackageRejected(ValidationError):
    """
    A validation report with violations, raised as an exception.

    Carries the full report so the HTTP layer can return every violation.
    """

    def __init__(self, report: "ValidationReport"):
        structural = len(report.structural_violations)
        business = len(report.business_violations)
        super().__init__(
            f"Exam package rejected: {structural} structural and "
            f"{business} business rule violation(s)",
            details={
                "structural_violations": structural,
                "business_violations": business,
            },
        )
        self.report = report
