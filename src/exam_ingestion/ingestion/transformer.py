"""
Exam package transformation.

Maps a validated ExamPackage onto relational rows (see rows.py):

    metadata           -> exam_packages (1)
    mediaAssets        -> exam_media_assets (0..n)
    questions          -> exam_questions (1..n)
    questions[].options -> exam_question_options (4 per mcq question)
    questions[].correctAnswer -> exam_correct_answers (1 per question)

Pure and deterministic: the same package always yields an equal bundle, and
every id in the bundle is an id declared in the package.
"""

from typing import Any

from pydantic import BaseModel

from exam_ingestion.contract.enums import ResponseType
from exam_ingestion.contract.models import (
    CorrectAnswer,
    ExamPackage,
    ExtendedAnswer,
    McqAnswer,
    NumericAnswer,
    Question,
    ShortAnswer,
    parse_timestamp,
)
from .exceptions import TransformationDefect
from .rows import (
    ExamCorrectAnswerRow,
    ExamMediaAssetRow,
    ExamPackageRow,
    ExamQuestionOptionRow,
    ExamQuestionRow,
    RowBundle,
)


def _document(model: BaseModel) -> dict[str, Any]:
    """JSON column value: wire (camelCase) names, absent optionals omitted."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def transform_metadata(package: ExamPackage) -> ExamPackageRow:
    meta = package.metadata
    return ExamPackageRow(
        id=meta.id,
        title=meta.title,
        year_level=meta.year_level,
        subject=meta.subject.value,
        assessment_type=meta.assessment_type.value,
        duration_minutes=meta.duration_minutes,
        total_marks=meta.total_marks,
        version=meta.version,
        schema_version=meta.schema_version,
        status=meta.status.value,
        instructions=list(meta.instructions or []),
        created_at=parse_timestamp(meta.created_at),
        updated_at=parse_timestamp(meta.updated_at),
    )


def transform_media_assets(package: ExamPackage) -> list[ExamMediaAssetRow]:
    return [
        ExamMediaAssetRow(
            id=asset.id,
            exam_package_id=package.metadata.id,
            type=asset.type.value,
            filename=asset.filename,
            mime_type=asset.mime_type,
            width=asset.width,
            height=asset.height,
            size_bytes=asset.size_bytes,
        )
        for asset in package.media_assets
    ]


def transform_question(package_id: str, question: Question) -> ExamQuestionRow:
    return ExamQuestionRow(
        id=question.id,
        exam_package_id=package_id,
        sequence_number=question.sequence_number,
        difficulty=question.difficulty.value,
        response_type=question.response_type.value,
        marks=question.marks,
        prompt_blocks=[_document(block) for block in question.prompt_blocks],
        media_references=[_document(ref) for ref in question.media_references or []],
        tags=list(question.tags),
        hint=question.hint,
    )


def transform_question_options(question: Question) -> list[ExamQuestionOptionRow]:
    """Option rows for an MCQ question, in authored order; none for other types."""
    if question.response_type != ResponseType.MCQ or not question.options:
        return []
    return [
        ExamQuestionOptionRow(
            question_id=question.id,
            option_id=option.id,
            content=option.content,
            media_reference=_document(option.media_reference) if option.media_reference else None,
        )
        for option in question.options
    ]


def transform_correct_answer(question_id: str, answer: CorrectAnswer) -> ExamCorrectAnswerRow:
    """
    Flatten one answer variant into the correct-answer columns.

    Raises:
        TransformationDefect: If the answer is not a known variant
    """
    if isinstance(answer, McqAnswer):
        return ExamCorrectAnswerRow(
            question_id=question_id,
            answer_type=answer.type,
            correct_option_id=answer.correct_option_id,
        )
    if isinstance(answer, ShortAnswer):
        return ExamCorrectAnswerRow(
            question_id=question_id,
            answer_type=answer.type,
            accepted_answers=list(answer.accepted_answers),
            case_sensitive=answer.case_sensitive,
        )
    if isinstance(answer, NumericAnswer):
        return ExamCorrectAnswerRow(
            question_id=question_id,
            answer_type=answer.type,
            exact_value=answer.exact_value,
            range_min=answer.range.min if answer.range else None,
            range_max=answer.range.max if answer.range else None,
            tolerance=answer.tolerance,
            unit=answer.unit,
        )
    if isinstance(answer, ExtendedAnswer):
        return ExamCorrectAnswerRow(
            question_id=question_id,
            answer_type=answer.type,
            rubric=[_document(criterion) for criterion in answer.rubric],
            sample_response=answer.sample_response,
        )
    raise TransformationDefect(
        f"Unsupported correct answer variant for question {question_id}",
        details={"question_id": question_id, "answer_class": type(answer).__name__},
    )


def transform_exam_package(package: ExamPackage) -> RowBundle:
    """
    Transform a validated exam package into database rows.

    Args:
        package: ExamPackage that passed structural and business validation

    Returns:
        RowBundle with all five relations, in insert order

    Raises:
        TransformationDefect: If an internal invariant does not hold
    """
    package_id = package.metadata.id
    questions: list[ExamQuestionRow] = []
    options: list[ExamQuestionOptionRow] = []
    answers: list[ExamCorrectAnswerRow] = []

    for question in package.questions:
        questions.append(transform_question(package_id, question))
        options.extend(transform_question_options(question))
        answers.append(transform_correct_answer(question.id, question.correct_answer))

    return RowBundle(
        exam_package=transform_metadata(package),
        media_assets=transform_media_assets(package),
        questions=questions,
        question_options=options,
        correct_answers=answers,
    )
