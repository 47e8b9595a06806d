"""
Stage 2: Structural Validation.

Check a parsed document against the exam package contract and return every
violation found. Two interchangeable engines:

- "model" (default): the Pydantic models, errors taken from ValidationError.errors()
- "json_schema": the generated (or exported) JSON Schema document via jsonschema,
  followed by parsing into the typed model
"""

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator
from pydantic import ValidationError as PydanticValidationError

from exam_ingestion.contract.json_schema import get_json_schema
from exam_ingestion.contract.models import ExamPackage
from exam_ingestion.monitoring.metrics import validation_failures_total
from .exceptions import SchemaValidationError
from .violations import StructuralViolation

logger = logging.getLogger(__name__)

STRUCTURAL_ENGINES = ("model", "json_schema")


def format_path(path: Any) -> str:
    """Render an error location as a dotted path ("root" when empty)."""
    return ".".join(str(p) for p in path) if path else "root"


def document_path(loc: Sequence[Any], data: Any) -> list[Any]:
    """
    Map a Pydantic error location onto the document.

    Pydantic inserts the tag of a discriminated union into the location
    (questions.3.correctAnswer.numeric.exactValue). The tag is not a property
    of the document, so it is dropped to give the same path the JSON Schema
    engine and the business rules report.
    """
    path: list[Any] = []
    node = data
    for part in loc:
        if (
            isinstance(node, dict)
            and isinstance(part, str)
            and part not in node
            and node.get("type") == part
        ):
            continue
        path.append(part)
        if isinstance(node, dict):
            node = node.get(part)
        elif isinstance(node, list) and isinstance(part, int) and 0 <= part < len(node):
            node = node[part]
        else:
            node = None
    return path


def violations_from_pydantic(
    error: PydanticValidationError, data: Any = None
) -> list[StructuralViolation]:
    """Convert a Pydantic ValidationError into structural violations, in error order."""
    return [
        StructuralViolation(
            field_path=format_path(document_path(err["loc"], data)),
            violation_kind=err["type"],
            message=err["msg"],
        )
        for err in error.errors(include_url=False)
    ]


class Stage2SchemaValidation:
    """
    Stage 2 validator: structural conformance to the contract.

    Returns (package, violations); package is None when violations is non-empty.
    """

    def __init__(self, engine: str = "model", schema_path: str | None = None):
        """
        Initialize structural validator.

        Args:
            engine: "model" or "json_schema"
            schema_path: Optional exported JSON Schema file for the json_schema
                engine. When omitted the document is generated from the models.
        """
        if engine not in STRUCTURAL_ENGINES:
            raise ValueError(
                f"Unknown structural engine '{engine}' (expected one of {STRUCTURAL_ENGINES})"
            )
        self.engine = engine
        self.schema_path = schema_path
        self._schema: dict | None = None
        self._validator: Draft202012Validator | None = None

    def _load_schema(self) -> dict:
        """
        Load and cache the JSON Schema document.

        Raises:
            SchemaValidationError: If a configured schema file cannot be loaded
        """
        if self._schema is not None:
            return self._schema

        if not self.schema_path:
            self._schema = get_json_schema()
            return self._schema

        schema_file = Path(self.schema_path)
        if not schema_file.exists():
            raise SchemaValidationError(
                f"JSON Schema file not found: {self.schema_path}",
                schema_path=self.schema_path,
            )

        try:
            with open(schema_file, "r", encoding="utf-8") as f:
                self._schema = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise SchemaValidationError(
                f"Failed to load JSON Schema: {str(e)}",
                schema_path=self.schema_path,
            ) from e

        logger.info(f"Loaded JSON Schema from {self.schema_path}")
        return self._schema

    def _get_validator(self) -> Draft202012Validator:
        if self._validator is None:
            schema = self._load_schema()
            self._validator = Draft202012Validator(
                schema, format_checker=Draft202012Validator.FORMAT_CHECKER
            )
        return self._validator

    def validate(self, data: dict[str, Any]) -> tuple[ExamPackage | None, list[StructuralViolation]]:
        """
        Validate a parsed document.

        Args:
            data: Parsed JSON dict

        Returns:
            Tuple of (typed ExamPackage or None, list of violations)
        """
        violations: list[StructuralViolation] = []

        if self.engine == "json_schema":
            violations = self._json_schema_violations(data)
            if violations:
                self._record(violations)
                return None, violations

        try:
            package = ExamPackage.model_validate(data)
        except PydanticValidationError as e:
            violations = violations_from_pydantic(e, data)
            self._record(violations)
            return None, violations

        logger.debug(f"Stage 2: document conforms to the contract ({self.engine} engine)")
        return package, []

    def _json_schema_violations(self, data: dict[str, Any]) -> list[StructuralViolation]:
        validator = self._get_validator()
        return [
            StructuralViolation(
                field_path=format_path(error.absolute_path),
                violation_kind=str(error.validator),
                message=error.message,
            )
            for error in validator.iter_errors(data)
        ]

    @staticmethod
    def _record(violations: list[StructuralViolation]) -> None:
        for violation in violations:
            validation_failures_total.labels(
                stage="stage2", error_type=violation.violation_kind
            ).inc()
        logger.info(f"Stage 2: {len(violations)} structural violation(s)")
