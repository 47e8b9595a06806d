"""
Multi-stage validation pipeline.

- pipeline.py: Orchestrator, produces a ValidationReport
- stage1_json_parse.py: JSON parsing
- stage2_schema.py: Structural validation (Pydantic models or JSON Schema)
- stage3_business_rules.py: Cross-field rules (answer type, MCQ options, media, marks, ids)
- violations.py: StructuralViolation / BusinessRuleViolation records
"""

from .exceptions import (
    ValidationError,
    JSONParseError,
    SchemaValidationError,
    ExamPackageRejected,
)
from .pipeline import ValidationPipeline, ValidationReport
from .violations import BusinessRuleViolation, StructuralViolation

__all__ = [
    # Main pipeline
    "ValidationPipeline",
    "ValidationReport",
    # Violation records
    "StructuralViolation",
    "BusinessRuleViolation",
    # Exceptions (for API error handling)
    "ValidationError",
    "JSONParseError",
    "SchemaValidationError",
    "ExamPackageRejected",
]
