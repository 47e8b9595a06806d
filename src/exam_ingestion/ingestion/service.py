"""
Exam package ingestion: validate -> transform -> insert for one document.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

import structlog

from exam_ingestion.credentials import AccessCredential
from exam_ingestion.monitoring.metrics import ingestions_total
from exam_ingestion.validation.pipeline import ValidationPipeline, ValidationReport
from .exceptions import AuthorizationError, InsertStage, TransformationDefect
from .inserter import InsertFailure, InsertResult, TransactionalInserter
from .transformer import transform_exam_package

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class IngestionResult:
    """
    Outcome of one ingestion.

    Attributes:
        report: Validation report (always present)
        insert_result: None when validation rejected the document
    """

    report: ValidationReport
    insert_result: Optional[InsertResult] = None

    @property
    def committed(self) -> bool:
        return self.insert_result is not None and self.insert_result.success

    @property
    def outcome(self) -> str:
        """Short label: committed, rejected, unauthorized, forbidden, conflict, failed."""
        if self.insert_result is None:
            return "rejected"
        if self.insert_result.success:
            return "committed"
        error = self.insert_result.error
        if isinstance(error, AuthorizationError):
            return "unauthorized" if error.stage == InsertStage.AUTHORIZATION else "forbidden"
        return "conflict" if error.conflict else "failed"


class ExamPackageIngestor:
    """
    Single entry point for ingesting one exam package document.
    """

    def __init__(self, pipeline: ValidationPipeline, inserter: TransactionalInserter):
        self.pipeline = pipeline
        self.inserter = inserter

    def ingest(
        self,
        document: bytes | str | Mapping[str, Any],
        credential: Optional[AccessCredential],
    ) -> IngestionResult:
        """
        Validate, transform and insert one document.

        Stops after validation when the report has violations.

        Raises:
            TransformationDefect: If a validated package cannot be mapped to rows
        """
        report = self.pipeline.validate(document)
        if not report.is_valid:
            result = IngestionResult(report=report)
            self._record(result)
            logger.info(
                "Exam package rejected",
                exam_package_id=report.package.metadata.id if report.package else None,
                structural_violations=len(report.structural_violations),
                business_violations=len(report.business_violations),
            )
            return result

        package = report.package
        try:
            bundle = transform_exam_package(package)
        except TransformationDefect:
            logger.exception("Transformation defect", exam_package_id=package.metadata.id)
            ingestions_total.labels(outcome="defect").inc()
            raise

        logger.debug(
            "Exam package transformed",
            exam_package_id=bundle.exam_package_id,
            row_counts=bundle.row_counts(),
        )

        result = IngestionResult(report=report, insert_result=self.inserter.insert(bundle, credential))
        self._record(result)
        if isinstance(result.insert_result, InsertFailure):
            logger.warning(
                "Exam package not committed",
                exam_package_id=bundle.exam_package_id,
                outcome=result.outcome,
                error=result.insert_result.error.message,
            )
        return result

    @staticmethod
    def _record(result: IngestionResult) -> None:
        ingestions_total.labels(outcome=result.outcome).inc()
