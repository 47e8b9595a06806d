"""
Exam package contract models.

These models are the authoritative definition of a valid exam package. The
portable JSON Schema document (see json_schema.py) is generated from them, so
any constraint added here reaches both the in-process validator and remote
enforcement.

Conventions:
- Every object is closed (extra="forbid"); undeclared properties are rejected.
- Wire names are camelCase (alias_generator), Python attributes are snake_case.
- Scalars are strict so that the model and the JSON Schema agree on what a
  number, boolean or string is. Integral floats such as 2.0 count as integers
  on both sides.
- Optional properties may be omitted but never sent as null; the generated
  schema has no null branch either.
- Ids and timestamps stay strings and are passed through verbatim.
"""

from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from exam_ingestion.contract.enums import (
    AssessmentType,
    Difficulty,
    ExamStatus,
    MediaPlacement,
    MediaType,
    ResponseType,
    Subject,
)

EXAM_PACKAGE_SCHEMA_VERSION = "1.0.0"

UUID_PATTERN = r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
TIMESTAMP_PATTERN = r"^[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}(\.[0-9]+)?(Z|[+-][0-9]{2}:[0-9]{2})$"
SEMVER_PATTERN = r"^[0-9]+\.[0-9]+\.[0-9]+$"
OPTION_ID_PATTERN = r"^[A-D]$"
MIME_TYPE_PATTERN = r"^image/(png|jpeg|svg\+xml|webp)$"


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp string (with Z or numeric offset)."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _check_timestamp(value: str) -> str:
    # The pattern accepts impossible dates such as month 13.
    parse_timestamp(value)
    return value


UuidStr = Annotated[str, Field(pattern=UUID_PATTERN, json_schema_extra={"format": "uuid"})]
Timestamp = Annotated[
    str,
    Field(pattern=TIMESTAMP_PATTERN, json_schema_extra={"format": "date-time"}),
    AfterValidator(_check_timestamp),
]
OptionId = Annotated[str, Field(pattern=OPTION_ID_PATTERN)]

# Properties that may be omitted but never set to null.
OMITTABLE_FIELDS = (
    "caption",
    "width",
    "height",
    "size_bytes",
    "attribution",
    "media_reference",
    "exact_value",
    "range",
    "tolerance",
    "unit",
    "sample_response",
    "media_references",
    "options",
    "hint",
    "instructions",
)

# Integer properties. JSON Schema "integer" admits 2.0, so the models do too.
WHOLE_NUMBER_FIELDS = (
    "width",
    "height",
    "size_bytes",
    "level",
    "max_marks",
    "sequence_number",
    "marks",
    "year_level",
    "duration_minutes",
    "total_marks",
)


class ContractModel(BaseModel):
    """Base for every contract object: closed, camelCase on the wire."""

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        frozen=True,
    )

    @field_validator(*OMITTABLE_FIELDS, mode="before", check_fields=False)
    @classmethod
    def _reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("null is not allowed; omit the property instead")
        return value

    @field_validator(*WHOLE_NUMBER_FIELDS, mode="before", check_fields=False)
    @classmethod
    def _integral_float_to_int(cls, value: Any) -> Any:
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value


# =============================================================================
# Media
# =============================================================================


class MediaReference(ContractModel):
    """A pointer from a question or option to a package-level media asset."""

    media_id: UuidStr = Field(..., description="Must resolve to an entry in mediaAssets")
    type: MediaType
    placement: MediaPlacement
    alt_text: str = Field(..., min_length=1, max_length=500)
    caption: Optional[str] = Field(default=None, max_length=200)


class MediaAsset(ContractModel):
    """An entry of the package-level media manifest."""

    id: UuidStr
    type: MediaType
    filename: str = Field(..., min_length=1, max_length=200)
    mime_type: str = Field(..., pattern=MIME_TYPE_PATTERN)
    width: Optional[StrictInt] = Field(default=None, ge=1)
    height: Optional[StrictInt] = Field(default=None, ge=1)
    size_bytes: Optional[StrictInt] = Field(default=None, ge=1)


# =============================================================================
# Prompt blocks (discriminated on "type")
# =============================================================================


class TextBlock(ContractModel):
    type: Literal["text"]
    content: str = Field(..., min_length=1)


class HeadingBlock(ContractModel):
    type: Literal["heading"]
    level: Literal[1, 2, 3]
    content: str = Field(..., min_length=1, max_length=200)


class ListBlock(ContractModel):
    type: Literal["list"]
    ordered: StrictBool
    items: list[Annotated[str, Field(min_length=1)]] = Field(..., min_length=1, max_length=20)


class QuoteBlock(ContractModel):
    type: Literal["quote"]
    content: str = Field(..., min_length=1)
    attribution: Optional[str] = Field(default=None, max_length=100)


class InstructionBlock(ContractModel):
    type: Literal["instruction"]
    content: str = Field(..., min_length=1, max_length=500)


PromptBlock = Annotated[
    Union[TextBlock, HeadingBlock, ListBlock, QuoteBlock, InstructionBlock],
    Field(discriminator="type"),
]


# =============================================================================
# MCQ options
# =============================================================================


class McqOption(ContractModel):
    id: OptionId
    content: str = Field(..., min_length=1, max_length=500)
    media_reference: Optional[MediaReference] = None


# =============================================================================
# Correct answers (closed sum type, one variant per response type)
# =============================================================================


class McqAnswer(ContractModel):
    type: Literal["mcq"]
    correct_option_id: OptionId


class ShortAnswer(ContractModel):
    type: Literal["short"]
    accepted_answers: list[Annotated[str, Field(min_length=1)]] = Field(
        ..., min_length=1, max_length=10
    )
    case_sensitive: StrictBool = False


class NumericRange(ContractModel):
    min: StrictFloat
    max: StrictFloat


class NumericAnswer(ContractModel):
    """
    Numeric answer: either an exact value or an accepted range, never both.

    The exclusivity is declared twice below (validator + json_schema_extra)
    because Pydantic cannot derive a oneOf over presence from field types.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "oneOf": [
                {"required": ["exactValue"], "not": {"required": ["range"]}},
                {"required": ["range"], "not": {"required": ["exactValue"]}},
            ]
        }
    )

    type: Literal["numeric"]
    exact_value: Optional[StrictFloat] = None
    range: Optional[NumericRange] = None
    tolerance: Optional[StrictFloat] = Field(default=None, ge=0)
    unit: Optional[str] = Field(default=None, max_length=20)

    @model_validator(mode="after")
    def _exact_value_xor_range(self) -> "NumericAnswer":
        has_exact = self.exact_value is not None
        has_range = self.range is not None
        if has_exact == has_range:
            raise ValueError("Numeric answers must define either exactValue or range (not both)")
        return self


class RubricCriterion(ContractModel):
    criterion: str = Field(..., min_length=1)
    max_marks: StrictInt = Field(..., ge=1, le=10)


class ExtendedAnswer(ContractModel):
    type: Literal["extended"]
    rubric: list[RubricCriterion] = Field(..., min_length=1, max_length=10)
    sample_response: Optional[str] = None


CorrectAnswer = Annotated[
    Union[McqAnswer, ShortAnswer, NumericAnswer, ExtendedAnswer],
    Field(discriminator="type"),
]


# =============================================================================
# Question
# =============================================================================


class Question(ContractModel):
    """
    A single exam question.

    Cross-field rules (answer type vs responseType, options only for MCQ,
    correct option declared) are business rules, checked in stage 3.
    """

    id: UuidStr
    sequence_number: StrictInt = Field(..., ge=1)
    difficulty: Difficulty
    response_type: ResponseType
    marks: StrictInt = Field(default=1, ge=1, le=10)
    prompt_blocks: list[PromptBlock] = Field(..., min_length=1, max_length=20)
    media_references: Optional[list[MediaReference]] = Field(default=None, max_length=5)
    options: Optional[list[McqOption]] = Field(default=None, min_length=4, max_length=4)
    correct_answer: CorrectAnswer
    tags: list[Annotated[str, Field(min_length=1, max_length=50)]] = Field(
        default_factory=list, max_length=10
    )
    hint: Optional[str] = Field(default=None, max_length=500)


# =============================================================================
# Package
# =============================================================================


class ExamMetadata(ContractModel):
    id: UuidStr
    title: str = Field(..., min_length=1, max_length=200)
    year_level: StrictInt = Field(..., ge=1, le=9)
    subject: Subject
    assessment_type: AssessmentType
    duration_minutes: StrictInt = Field(..., ge=5, le=180)
    total_marks: StrictInt = Field(..., ge=1)
    version: str = Field(..., pattern=SEMVER_PATTERN)
    schema_version: Literal["1.0.0"]
    status: ExamStatus
    created_at: Timestamp
    updated_at: Timestamp
    instructions: Optional[list[Annotated[str, Field(min_length=1, max_length=500)]]] = Field(
        default=None, max_length=10
    )


class ExamPackage(ContractModel):
    """Top-level contract document: metadata, questions and media for one assessment."""

    model_config = ConfigDict(title="ExamPackage")

    metadata: ExamMetadata
    questions: list[Question] = Field(..., min_length=1, max_length=100)
    media_assets: list[MediaAsset] = Field(default_factory=list, max_length=50)
