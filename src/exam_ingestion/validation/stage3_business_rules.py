"""
Stage 3: Business Rules Validation.

Cross-field invariants that a structural schema cannot express:
- correctAnswer.type must equal responseType
- MCQ questions carry options A-D and a correct option that is one of them;
  non-MCQ questions carry no options
- every media reference (question and option level) resolves to a media asset
- the sum of question marks equals metadata.totalMarks
- question ids, media asset ids and sequence numbers are unique
- sequence numbers run 1..n without gaps (optional)

Every rule runs; violations are aggregated and returned, never raised.
"""

from collections import Counter

import structlog

from exam_ingestion.contract.enums import MCQ_OPTION_IDS, ResponseType
from exam_ingestion.contract.models import ExamPackage, McqAnswer, Question
from exam_ingestion.monitoring.metrics import validation_failures_total
from .violations import BusinessRuleViolation

logger = structlog.get_logger(__name__)


class Stage3BusinessRules:
    """
    Stage 3 validator: business rules over a structurally valid package.
    """

    def __init__(self, require_contiguous_sequence: bool = False):
        """
        Args:
            require_contiguous_sequence: Also require sequence numbers 1..n
        """
        self.require_contiguous_sequence = require_contiguous_sequence

    def validate(self, package: ExamPackage) -> list[BusinessRuleViolation]:
        """
        Check every business rule against the package.

        Args:
            package: Structurally valid ExamPackage (not modified)

        Returns:
            All violations found, in rule order (empty when the package is valid)
        """
        violations: list[BusinessRuleViolation] = []

        for index, question in enumerate(package.questions):
            violations.extend(self._validate_answer_type(index, question))
            violations.extend(self._validate_options(index, question))

        violations.extend(self._validate_media_references(package))
        violations.extend(self._validate_total_marks(package))
        violations.extend(self._validate_unique_ids(package))

        if self.require_contiguous_sequence:
            violations.extend(self._validate_contiguous_sequence(package))

        for violation in violations:
            validation_failures_total.labels(stage="stage3", error_type=violation.rule).inc()

        if violations:
            logger.info(
                "Stage 3: business rule violations",
                exam_package_id=package.metadata.id,
                count=len(violations),
                rules=sorted({v.rule for v in violations}),
            )
        else:
            logger.debug("Stage 3: all business rules satisfied", exam_package_id=package.metadata.id)

        return violations

    def _validate_answer_type(self, index: int, question: Question) -> list[BusinessRuleViolation]:
        """The answer variant must be the one selected by responseType."""
        expected = question.response_type.value
        actual = question.correct_answer.type
        if actual == expected:
            return []
        return [
            BusinessRuleViolation(
                rule="answer_type_matches_response_type",
                message=(
                    f"Question {question.id}: correctAnswer.type ({actual}) "
                    f"does not match responseType ({expected})"
                ),
                field_path=f"questions.{index}.correctAnswer.type",
                question_id=question.id,
                expected=expected,
                actual=actual,
            )
        ]

    def _validate_options(self, index: int, question: Question) -> list[BusinessRuleViolation]:
        """
        MCQ questions need options A-D and a declared correct option.

        The correct-option check only applies when the answer is itself an MCQ
        answer; a mismatched variant is already reported by the answer-type rule.
        """
        path = f"questions.{index}.options"

        if question.response_type != ResponseType.MCQ:
            if question.options is None:
                return []
            return [
                BusinessRuleViolation(
                    rule="options_only_for_mcq",
                    message=(
                        f"Question {question.id}: options are only allowed for mcq questions "
                        f"(responseType is {question.response_type.value})"
                    ),
                    field_path=path,
                    question_id=question.id,
                )
            ]

        if not question.options:
            return [
                BusinessRuleViolation(
                    rule="mcq_options_required",
                    message=f"Question {question.id}: MCQ questions must have exactly 4 options, found 0",
                    field_path=path,
                    question_id=question.id,
                    expected=len(MCQ_OPTION_IDS),
                    actual=0,
                )
            ]

        violations: list[BusinessRuleViolation] = []
        option_ids = [option.id for option in question.options]

        if sorted(option_ids) != list(MCQ_OPTION_IDS):
            violations.append(
                BusinessRuleViolation(
                    rule="mcq_option_ids",
                    message=(
                        f"Question {question.id}: MCQ option ids must be "
                        f"{', '.join(MCQ_OPTION_IDS)} (found {', '.join(option_ids)})"
                    ),
                    field_path=path,
                    question_id=question.id,
                    expected=list(MCQ_OPTION_IDS),
                    actual=option_ids,
                )
            )

        answer = question.correct_answer
        if isinstance(answer, McqAnswer) and answer.correct_option_id not in option_ids:
            violations.append(
                BusinessRuleViolation(
                    rule="mcq_correct_option_declared",
                    message=(
                        f"Question {question.id}: correctOptionId {answer.correct_option_id} "
                        f"is not one of the declared options"
                    ),
                    field_path=f"questions.{index}.correctAnswer.correctOptionId",
                    question_id=question.id,
                    expected=option_ids,
                    actual=answer.correct_option_id,
                )
            )

        return violations

    def _validate_media_references(self, package: ExamPackage) -> list[BusinessRuleViolation]:
        """Every mediaId, at question or option level, must name a media asset."""
        asset_ids = {asset.id for asset in package.media_assets}
        violations: list[BusinessRuleViolation] = []

        for q_index, question in enumerate(package.questions):
            for r_index, reference in enumerate(question.media_references or []):
                if reference.media_id not in asset_ids:
                    violations.append(
                        BusinessRuleViolation(
                            rule="media_reference_resolves",
                            message=(
                                f"Question {question.id}: mediaReference {reference.media_id} "
                                f"not found in mediaAssets"
                            ),
                            field_path=f"questions.{q_index}.mediaReferences.{r_index}.mediaId",
                            question_id=question.id,
                            media_id=reference.media_id,
                        )
                    )

            for o_index, option in enumerate(question.options or []):
                reference = option.media_reference
                if reference is not None and reference.media_id not in asset_ids:
                    violations.append(
                        BusinessRuleViolation(
                            rule="media_reference_resolves",
                            message=(
                                f"Question {question.id}, Option {option.id}: mediaReference "
                                f"{reference.media_id} not found in mediaAssets"
                            ),
                            field_path=f"questions.{q_index}.options.{o_index}.mediaReference.mediaId",
                            question_id=question.id,
                            media_id=reference.media_id,
                        )
                    )

        return violations

    def _validate_total_marks(self, package: ExamPackage) -> list[BusinessRuleViolation]:
        declared = package.metadata.total_marks
        calculated = sum(question.marks for question in package.questions)
        if calculated == declared:
            return []
        return [
            BusinessRuleViolation(
                rule="total_marks_match",
                message=(
                    f"Total marks mismatch: metadata.totalMarks is {declared}, "
                    f"but sum of question marks is {calculated}"
                ),
                field_path="metadata.totalMarks",
                expected=declared,
                actual=calculated,
            )
        ]

    def _validate_unique_ids(self, package: ExamPackage) -> list[BusinessRuleViolation]:
        violations: list[BusinessRuleViolation] = []

        question_ids = Counter(question.id for question in package.questions)
        for question_id, count in question_ids.items():
            if count > 1:
                violations.append(
                    BusinessRuleViolation(
                        rule="question_id_unique",
                        message=f"Question id {question_id} appears {count} times",
                        field_path="questions",
                        question_id=question_id,
                        actual=count,
                    )
                )

        asset_ids = Counter(asset.id for asset in package.media_assets)
        for media_id, count in asset_ids.items():
            if count > 1:
                violations.append(
                    BusinessRuleViolation(
                        rule="media_asset_id_unique",
                        message=f"Media asset id {media_id} appears {count} times",
                        field_path="mediaAssets",
                        media_id=media_id,
                        actual=count,
                    )
                )

        sequence_numbers = Counter(question.sequence_number for question in package.questions)
        for sequence_number, count in sequence_numbers.items():
            if count > 1:
                violations.append(
                    BusinessRuleViolation(
                        rule="sequence_number_unique",
                        message=f"Sequence number {sequence_number} appears {count} times",
                        field_path="questions",
                        expected=1,
                        actual=count,
                    )
                )

        return violations

    def _validate_contiguous_sequence(self, package: ExamPackage) -> list[BusinessRuleViolation]:
        """Sequence numbers, sorted, must be exactly 1..n. Reports the first gap only."""
        sequence_numbers = sorted(question.sequence_number for question in package.questions)
        for position, sequence_number in enumerate(sequence_numbers, start=1):
            if sequence_number != position:
                return [
                    BusinessRuleViolation(
                        rule="sequence_contiguous",
                        message=(
                            "Sequence numbers must be sequential starting from 1. "
                            f"Found gap or duplicate at position {position}"
                        ),
                        field_path="questions",
                        expected=position,
                        actual=sequence_number,
                    )
                ]
        return []
