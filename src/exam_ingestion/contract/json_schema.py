"""
Portable JSON Schema document for the exam package contract.

The document is generated from the Pydantic models, never edited by hand.
Export it with:

    python -m exam_ingestion.contract.json_schema config/schema/exam_package_v1.json
"""

import json
import sys
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic.json_schema import GenerateJsonSchema, JsonSchemaValue
from pydantic_core import core_schema

from exam_ingestion.contract.models import EXAM_PACKAGE_SCHEMA_VERSION, ExamPackage

JSON_SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"
JSON_SCHEMA_ID = f"urn:exam-package:schema:{EXAM_PACKAGE_SCHEMA_VERSION}"


class ContractJsonSchema(GenerateJsonSchema):
    """
    Schema generator matching the contract models' handling of optionals.

    Optional properties may be omitted but are never null, so the
    `anyOf [T, null]` branch and the `"default": null` annotation are dropped.
    """

    def nullable_schema(self, schema: core_schema.NullableSchema) -> JsonSchemaValue:
        return self.generate_inner(schema["schema"])

    def default_schema(self, schema: core_schema.WithDefaultSchema) -> JsonSchemaValue:
        if "default" in schema and schema["default"] is None:
            return self.generate_inner(schema["schema"])
        return super().default_schema(schema)


def build_json_schema() -> dict[str, Any]:
    """
    Derive the draft 2020-12 document from the ExamPackage model.

    Returns:
        A fresh dict; callers may mutate it.
    """
    schema = ExamPackage.model_json_schema(
        by_alias=True, mode="validation", schema_generator=ContractJsonSchema
    )
    return {
        "$schema": JSON_SCHEMA_DIALECT,
        "$id": JSON_SCHEMA_ID,
        **schema,
        "description": (
            f"Exam package contract v{EXAM_PACKAGE_SCHEMA_VERSION}: metadata, "
            "questions and media for one assessment"
        ),
    }


@lru_cache(maxsize=1)
def _cached_json_schema() -> str:
    return json.dumps(build_json_schema())


def get_json_schema() -> dict[str, Any]:
    """Return the generated document (built once per process, copied per call)."""
    return json.loads(_cached_json_schema())


def write_json_schema(path: str | Path) -> Path:
    """
    Write the generated document to disk for remote enforcement.

    Args:
        path: Destination file; parent directories are created.

    Returns:
        The resolved destination path
    """
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    with open(destination, "w", encoding="utf-8") as f:
        json.dump(build_json_schema(), f, indent=2)
        f.write("\n")
    return destination


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else "config/schema/exam_package_v1.json"
    written = write_json_schema(target)
    print(f"Wrote {written}")
