"""
Stage 1: JSON Parse Validation.

Parse a raw request body (bytes or string) into a Python dict.
Already-decoded mappings pass straight through.
"""

import json
from collections.abc import Mapping
from typing import Any

import structlog

from exam_ingestion.monitoring.metrics import validation_failures_total
from .exceptions import JSONParseError

logger = structlog.get_logger(__name__)


class Stage1JSONParse:
    """
    Stage 1 validator: Parse JSON text to dict.

    Raises JSONParseError on malformed JSON or a non-object top level.
    """

    def validate(self, content: bytes | str | Mapping[str, Any]) -> dict[str, Any]:
        """
        Parse the submitted document.

        Args:
            content: Raw body (bytes/str) or an already-decoded mapping

        Returns:
            Parsed dict representation

        Raises:
            JSONParseError: If content is not a JSON object
        """
        if isinstance(content, Mapping):
            return dict(content)

        if isinstance(content, (bytes, bytearray)):
            try:
                content = bytes(content).decode("utf-8")
            except UnicodeDecodeError as e:
                self._fail("invalid_encoding")
                raise JSONParseError(
                    "Exam package body is not valid UTF-8",
                    parse_error=str(e),
                    error_type="invalid_encoding",
                ) from e

        if not isinstance(content, str):
            self._fail("unsupported_input")
            raise JSONParseError(
                f"Unsupported document type: {type(content).__name__}",
                error_type="unsupported_input",
            )

        if not content.strip():
            self._fail("empty_content")
            raise JSONParseError(
                "Exam package body is empty or whitespace-only",
                raw_content=content,
                parse_error="Empty content",
                error_type="empty_content",
            )

        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as e:
            self._fail("json_decode_error")
            raise JSONParseError(
                f"Failed to parse exam package as JSON: {e.msg}",
                raw_content=content,
                parse_error=f"{e.msg} at line {e.lineno} col {e.colno}",
            ) from e

        if not isinstance(parsed, dict):
            self._fail("not_json_object")
            raise JSONParseError(
                f"Exam package is not a JSON object (got {type(parsed).__name__})",
                raw_content=content,
                parse_error=f"Expected dict, got {type(parsed).__name__}",
                error_type="not_json_object",
            )

        logger.debug("Stage 1: parsed JSON", top_level_keys=len(parsed))
        return parsed

    @staticmethod
    def _fail(error_type: str) -> None:
        validation_failures_total.labels(stage="stage1", error_type=error_type).inc()
