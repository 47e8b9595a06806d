"""
API routes: exam package ingestion, dry-run validation, schema and health.
"""

from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from exam_ingestion.api.dependencies import (
    get_credential,
    get_ingestor,
    get_settings,
    get_store,
    get_validation_pipeline,
)
from exam_ingestion.api.models import HealthResponse, IngestResponse, ValidationResponse
from exam_ingestion.config import Settings
from exam_ingestion.contract.json_schema import get_json_schema
from exam_ingestion.credentials import AccessCredential
from exam_ingestion.ingestion.inserter import InsertFailure
from exam_ingestion.ingestion.service import ExamPackageIngestor
from exam_ingestion.persistence.store import ExamPackageStore
from exam_ingestion.validation.pipeline import ValidationPipeline

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post(
    "/exam-packages",
    response_model=IngestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Ingest an exam package",
    description="""
    Validate an exam package document, transform it to relational rows and
    commit all rows in a single transaction.

    The bearer token is forwarded to the database, whose access control
    decides whether the caller may write exam content.
    """,
    responses={
        201: {"description": "Package committed"},
        401: {"description": "Missing or unknown bearer token"},
        403: {"description": "Store denied the write"},
        409: {"description": "Package (or one of its ids) already exists"},
        422: {"description": "Structural or business rule violations"},
        500: {"description": "Transaction failed"},
    },
)
async def ingest_exam_package(
    request: Request,
    ingestor: ExamPackageIngestor = Depends(get_ingestor),
    credential: Optional[AccessCredential] = Depends(get_credential),
) -> IngestResponse:
    """
    Ingest one exam package.

    Validation failures raise ExamPackageRejected and insert failures raise
    their AuthorizationError/TransactionError; the exception handlers turn
    them into 422/401/403/409/500 responses.
    """
    body = await request.body()
    result = await run_in_threadpool(ingestor.ingest, body, credential)

    if result.insert_result is None:
        result.report.raise_for_violations()

    if isinstance(result.insert_result, InsertFailure):
        raise result.insert_result.error

    return IngestResponse(
        exam_package_id=result.insert_result.exam_package_id,
        row_counts=result.insert_result.row_counts,
    )


@router.post(
    "/exam-packages/validate",
    response_model=ValidationResponse,
    summary="Validate an exam package (dry run)",
    description="""
    Run structural and business rule validation without writing anything.
    Always returns 200; inspect `valid` and the violation lists.
    """,
)
async def validate_exam_package(
    request: Request,
    pipeline: ValidationPipeline = Depends(get_validation_pipeline),
) -> ValidationResponse:
    body = await request.body()
    report = await run_in_threadpool(pipeline.validate, body)
    return ValidationResponse.model_validate(report.to_dict())


@router.get(
    "/schema",
    summary="Get the exam package JSON Schema",
    description="""
    Returns the portable JSON Schema document (draft 2020-12) generated from
    the contract models, for enforcement outside this service.
    """,
    responses={
        200: {
            "description": "JSON Schema",
            "content": {"application/json": {}},
        },
    },
)
async def get_schema():
    return get_json_schema()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={
        200: {"description": "Database reachable"},
        503: {"description": "Database unreachable"},
    },
)
def health_check(
    store: ExamPackageStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """
    Check database connectivity.
    """
    services = {}
    try:
        store.check_connection()
        services["database"] = "ok"
    except SQLAlchemyError as e:
        services["database"] = f"unreachable ({type(e).__name__})"

    healthy = services["database"] == "ok"
    response = HealthResponse(
        status="healthy" if healthy else "unhealthy",
        version=settings.APP_VERSION,
        contract_schema_version=settings.CONTRACT_SCHEMA_VERSION,
        services=services,
        timestamp=datetime.now(timezone.utc),
    )

    logger.info("Health check", status=response.status, services=services)

    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=response.model_dump(mode="json"),
    )
