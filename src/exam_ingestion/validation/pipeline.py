"""
Validation Pipeline: Multi-stage validation orchestrator.

Coordinates the validation stages:
- Stage 1: JSON Parse (bytes/str to dict)
- Stage 2: Structural validation against the contract
- Stage 3: Business rules (only on a structurally valid document)

Failures are collected into a ValidationReport rather than raised; callers
that want an exception use ValidationReport.raise_for_violations().
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from ..config import Settings
from ..contract.models import ExamPackage
from .exceptions import ExamPackageRejected, JSONParseError
from .stage1_json_parse import Stage1JSONParse
from .stage2_schema import Stage2SchemaValidation
from .stage3_business_rules import Stage3BusinessRules
from .violations import BusinessRuleViolation, StructuralViolation

logger = logging.getLogger(__name__)


@dataclass
class ValidationReport:
    """
    Complete outcome of validating one document.

    Attributes:
        package: Typed package when structurally valid, else None
        structural_violations: Stage 1/2 violations
        business_violations: Stage 3 violations
    """

    package: Optional[ExamPackage] = None
    structural_violations: list[StructuralViolation] = field(default_factory=list)
    business_violations: list[BusinessRuleViolation] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return (
            self.package is not None
            and not self.structural_violations
            and not self.business_violations
        )

    def raise_for_violations(self) -> ExamPackage:
        """
        Return the validated package, or raise if any violation was found.

        Raises:
            ExamPackageRejected: If the report is not valid
        """
        if not self.is_valid:
            raise ExamPackageRejected(self)
        return self.package

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.is_valid,
            "examPackageId": self.package.metadata.id if self.package else None,
            "structuralViolations": [v.to_dict() for v in self.structural_violations],
            "businessViolations": [v.to_dict() for v in self.business_violations],
        }


class ValidationPipeline:
    """
    Multi-stage validation pipeline orchestrator.
    """

    def __init__(self, settings: Settings):
        """
        Initialize validation pipeline.

        Args:
            settings: Application settings with validation config
        """
        self.settings = settings

        self.stage1 = Stage1JSONParse()
        self.stage2 = Stage2SchemaValidation(
            engine=settings.STRUCTURAL_ENGINE,
            schema_path=settings.JSON_SCHEMA_PATH,
        )
        self.stage3 = Stage3BusinessRules(
            require_contiguous_sequence=settings.REQUIRE_CONTIGUOUS_SEQUENCE
        )

        logger.info(
            f"ValidationPipeline initialized (engine: {settings.STRUCTURAL_ENGINE}, "
            f"contiguous sequence: {settings.REQUIRE_CONTIGUOUS_SEQUENCE})"
        )

    def validate(self, document: bytes | str | Mapping[str, Any]) -> ValidationReport:
        """
        Run the full validation pipeline on one document.

        Args:
            document: Raw body (bytes/str) or decoded JSON mapping

        Returns:
            ValidationReport with every violation found
        """
        report = ValidationReport()

        try:
            parsed = self.stage1.validate(document)
        except JSONParseError as e:
            report.structural_violations.append(
                StructuralViolation(field_path="root", violation_kind=e.error_type, message=e.message)
            )
            logger.info(f"Validation stopped at stage 1: {e.error_type}")
            return report

        package, structural = self.stage2.validate(parsed)
        if structural:
            report.structural_violations.extend(structural)
            return report

        report.package = package
        report.business_violations.extend(self.stage3.validate(package))

        if report.is_valid:
            logger.info(f"Validation passed for exam package {package.metadata.id}")
        else:
            logger.info(
                f"Validation failed for exam package {package.metadata.id}: "
                f"{len(report.business_violations)} business rule violation(s)"
            )
        return report
