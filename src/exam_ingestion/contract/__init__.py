"""
Exam package contract.

- enums.py: closed taxonomies (subject, difficulty, response type, ...)
- models.py: Pydantic models, the authoritative definition of a valid package
- json_schema.py: portable JSON Schema document generated from the models
"""

from .enums import (
    MCQ_OPTION_IDS,
    AssessmentType,
    Difficulty,
    ExamStatus,
    MediaPlacement,
    MediaType,
    ResponseType,
    Subject,
)
from .json_schema import build_json_schema, get_json_schema, write_json_schema
from .models import (
    EXAM_PACKAGE_SCHEMA_VERSION,
    CorrectAnswer,
    ExamMetadata,
    ExamPackage,
    ExtendedAnswer,
    HeadingBlock,
    InstructionBlock,
    ListBlock,
    McqAnswer,
    McqOption,
    MediaAsset,
    MediaReference,
    NumericAnswer,
    NumericRange,
    PromptBlock,
    Question,
    QuoteBlock,
    RubricCriterion,
    ShortAnswer,
    TextBlock,
)

__all__ = [
    "MCQ_OPTION_IDS",
    "EXAM_PACKAGE_SCHEMA_VERSION",
    # Enums
    "AssessmentType",
    "Difficulty",
    "ExamStatus",
    "MediaPlacement",
    "MediaType",
    "ResponseType",
    "Subject",
    # Models
    "ExamPackage",
    "ExamMetadata",
    "Question",
    "MediaAsset",
    "MediaReference",
    "McqOption",
    "PromptBlock",
    "TextBlock",
    "HeadingBlock",
    "ListBlock",
    "QuoteBlock",
    "InstructionBlock",
    "CorrectAnswer",
    "McqAnswer",
    "ShortAnswer",
    "NumericAnswer",
    "NumericRange",
    "ExtendedAnswer",
    "RubricCriterion",
    # JSON Schema
    "build_json_schema",
    "get_json_schema",
    "write_json_schema",
]
