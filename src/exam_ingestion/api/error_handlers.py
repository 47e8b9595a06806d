"""
FastAPI exception handlers for structured error responses.

Maps domain exceptions to appropriate HTTP status codes and formats.
"""

from datetime import datetime, timezone

import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse

from exam_ingestion.ingestion.exceptions import (
    AuthorizationError,
    IngestionError,
    InsertStage,
    TransactionError,
    TransformationDefect,
)
from exam_ingestion.validation.exceptions import (
    ExamPackageRejected,
    SchemaValidationError,
)

logger = structlog.get_logger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


async def exam_package_rejected_handler(request: Request, exc: ExamPackageRejected) -> JSONResponse:
    """
    Handle a validation report with violations.

    Maps to 422 Unprocessable Entity and returns every violation.
    """
    logger.info("Exam package rejected", **exc.details)

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_failed",
            "message": exc.message,
            "details": exc.report.to_dict(),
            "timestamp": _timestamp(),
        },
    )


async def authorization_error_handler(request: Request, exc: AuthorizationError) -> JSONResponse:
    """
    Handle missing credentials (401) and store denials (403).
    """
    if exc.stage == InsertStage.AUTHORIZATION and exc.cause is None:
        status_code = status.HTTP_401_UNAUTHORIZED
        error = "unauthorized"
    else:
        status_code = status.HTTP_403_FORBIDDEN
        error = "forbidden"

    logger.warning("Authorization failed", error=error, **exc.details)

    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": exc.message,
            "details": exc.details,
            "timestamp": _timestamp(),
        },
        headers=headers,
    )


async def transaction_error_handler(request: Request, exc: TransactionError) -> JSONResponse:
    """
    Handle rolled-back transactions.

    Uniqueness conflicts (package already ingested) map to 409, anything else
    to 500.
    """
    if exc.conflict:
        logger.info("Exam package conflict", **exc.details)
        status_code = status.HTTP_409_CONFLICT
        error = "conflict"
    else:
        logger.error("Exam package transaction failed", message=exc.message, **exc.details)
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        error = "transaction_failed"

    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": exc.message,
            "details": exc.details,
            "timestamp": _timestamp(),
        },
    )


async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle internal defects and unexpected errors.

    Maps to 500 Internal Server Error.
    """
    logger.error("Unexpected error", error_type=type(exc).__name__, exc_info=exc)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred",
            "timestamp": _timestamp(),
        },
    )


# Exception handler mapping for FastAPI app.add_exception_handler()
EXCEPTION_HANDLERS = {
    ExamPackageRejected: exam_package_rejected_handler,
    AuthorizationError: authorization_error_handler,
    TransactionError: transaction_error_handler,
    TransformationDefect: internal_error_handler,
    SchemaValidationError: internal_error_handler,
    IngestionError: internal_error_handler,
    Exception: internal_error_handler,
}
