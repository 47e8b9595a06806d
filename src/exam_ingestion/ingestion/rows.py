"""
Relational row models produced by the transformer.

One model per table in persistence/tables.py; field names are column names.
Rows carry only ids declared in the package (surrogate keys of the option
and correct-answer tables are assigned by the database).
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class Row(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class ExamPackageRow(Row):
    """Row for exam_packages."""

    id: str
    title: str
    year_level: int
    subject: str
    assessment_type: str
    duration_minutes: int
    total_marks: int
    version: str
    schema_version: str
    status: str
    instructions: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class ExamMediaAssetRow(Row):
    """Row for exam_media_assets."""

    id: str
    exam_package_id: str
    type: str
    filename: str
    mime_type: str
    width: Optional[int] = None
    height: Optional[int] = None
    size_bytes: Optional[int] = None


class ExamQuestionRow(Row):
    """Row for exam_questions. prompt_blocks keeps the authored block order."""

    id: str
    exam_package_id: str
    sequence_number: int
    difficulty: str
    response_type: str
    marks: int
    prompt_blocks: list[dict[str, Any]]
    media_references: list[dict[str, Any]] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    hint: Optional[str] = None


class ExamQuestionOptionRow(Row):
    """Row for exam_question_options (MCQ questions only)."""

    question_id: str
    option_id: str
    content: str
    media_reference: Optional[dict[str, Any]] = None


class ExamCorrectAnswerRow(Row):
    """
    Row for exam_correct_answers.

    answer_type selects which of the nullable columns are populated:
    - mcq: correct_option_id
    - short: accepted_answers, case_sensitive
    - numeric: exact_value or range_min/range_max, tolerance, unit
    - extended: rubric, sample_response
    """

    question_id: str
    answer_type: str
    correct_option_id: Optional[str] = None
    accepted_answers: Optional[list[str]] = None
    case_sensitive: Optional[bool] = None
    exact_value: Optional[float] = None
    range_min: Optional[float] = None
    range_max: Optional[float] = None
    tolerance: Optional[float] = None
    unit: Optional[str] = None
    rubric: Optional[list[dict[str, Any]]] = None
    sample_response: Optional[str] = None


class RowBundle(Row):
    """
    Every row needed to persist one exam package, in insert order.
    """

    exam_package: ExamPackageRow
    media_assets: list[ExamMediaAssetRow] = Field(default_factory=list)
    questions: list[ExamQuestionRow]
    question_options: list[ExamQuestionOptionRow] = Field(default_factory=list)
    correct_answers: list[ExamCorrectAnswerRow]

    @property
    def exam_package_id(self) -> str:
        return self.exam_package.id

    def row_counts(self) -> dict[str, int]:
        """Rows per table, keyed by table name."""
        return {
            "exam_packages": 1,
            "exam_media_assets": len(self.media_assets),
            "exam_questions": len(self.questions),
            "exam_question_options": len(self.question_options),
            "exam_correct_answers": len(self.correct_answers),
        }
