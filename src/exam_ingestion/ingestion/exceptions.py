"""
Ingestion exceptions.

- TransformationDefect: an internal invariant broke while building rows.
  Never expected for a validated package; propagated as a 500.
- AuthorizationError / TransactionError: returned inside InsertFailure,
  raised only by callers that choose to (the HTTP layer).
"""

from enum import Enum
from typing import Any, Optional


class InsertStage(str, Enum):
    """Where in the insert sequence a failure happened."""

    AUTHORIZATION = "authorization"
    PACKAGE = "exam_packages"
    MEDIA_ASSETS = "exam_media_assets"
    QUESTIONS = "exam_questions"
    QUESTION_OPTIONS = "exam_question_options"
    CORRECT_ANSWERS = "exam_correct_answers"
    COMMIT = "commit"


class IngestionError(Exception):
    """
    Base exception for ingestion failures.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """
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


class TransformationDefect(IngestionError):
    """A validated package could not be mapped to rows (programming error)."""


class _StageError(IngestionError):
    def __init__(
        self,
        message: str,
        stage: InsertStage,
        cause: Optional[BaseException] = None,
        details: dict[str, Any] | None = None,
    ):
        details = dict(details or {})
        details["stage"] = stage.value
        if cause is not None:
            details["cause"] = type(cause).__name__
        super().__init__(message, details)
        self.stage = stage
        self.cause = cause


class AuthorizationError(_StageError):
    """
    The credential was missing, or the store's access control denied the write.

    No rows are committed.
    """


class TransactionError(_StageError):
    """
    A statement or the commit failed; the whole package was rolled back.

    Attributes:
        conflict: True when a uniqueness constraint rejected the package
            (e.g. the package id was already ingested)
    """

    def __init__(
        self,
        message: str,
        stage: InsertStage,
        cause: Optional[BaseException] = None,
        conflict: bool = False,
    ):
        super().__init__(message, stage, cause, details={"conflict": conflict})
        self.conflict = conflict
