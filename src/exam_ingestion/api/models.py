"""
API-specific response models for FastAPI endpoints.

Request bodies are exam package documents, read raw and handed to the
validation pipeline, so there are no request models here.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class IngestResponse(CamelModel):
    """Response for a committed exam package."""

    success: bool = Field(
        default=True,
        description="Always true for a 201 response"
    )
    exam_package_id: str = Field(
        description="Id of the committed package (metadata.id)"
    )
    row_counts: dict[str, int] = Field(
        description="Rows written per table",
        examples=[{"exam_packages": 1, "exam_questions": 5, "exam_correct_answers": 5}]
    )


class ValidationResponse(CamelModel):
    """Response for the dry-run validation endpoint (and the body of a 422)."""

    valid: bool = Field(
        description="True when the document has no violations"
    )
    exam_package_id: Optional[str] = Field(
        default=None,
        description="metadata.id when the document is structurally valid"
    )
    structural_violations: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Shape/type/cardinality violations"
    )
    business_violations: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Cross-field rule violations"
    )


class HealthResponse(BaseModel):
    """Response for health check endpoint."""

    status: str = Field(
        description="Overall health status",
        examples=["healthy", "unhealthy"]
    )
    version: str = Field(
        description="Service version",
        examples=["0.1.0"]
    )
    contract_schema_version: str = Field(
        description="Exam package contract version accepted",
        examples=["1.0.0"]
    )
    services: dict[str, str] = Field(
        description="Service-specific health status",
        examples=[{"database": "ok"}]
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="Health check timestamp (UTC)"
    )


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: str = Field(
        description="Error code or type",
        examples=["validation_failed", "unauthorized", "forbidden", "conflict", "internal_error"]
    )
    message: str = Field(
        description="Human-readable error message"
    )
    details: Optional[dict] = Field(
        default=None,
        description="Additional error details (e.g., violations, failing stage)"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="Error timestamp (UTC)"
    )
