"""
Unit tests for Stage 3: Business Rules Validation.
"""

import pytest

from exam_ingestion.contract.models import ExamPackage
from exam_ingestion.validation.stage3_business_rules import Stage3BusinessRules

OPTIONS = [
    {"id": "A", "content": "10"},
    {"id": "B", "content": "12"},
    {"id": "C", "content": "14"},
    {"id": "D", "content": "16"},
]


def _rules(violations) -> list[str]:
    return [v.rule for v in violations]


class TestStage3BusinessRules:
    """Test suite for Stage 3 business rules."""

    def setup_method(self):
        """Setup test fixtures."""
        self.stage3 = Stage3BusinessRules()

    def _validate(self, data, stage3=None):
        package = ExamPackage.model_validate(data)
        return (stage3 or self.stage3).validate(package)

    @pytest.mark.parametrize("name", ["year2_numeracy", "year5_maths", "year9_reading"])
    def test_valid_fixtures_have_no_violations(self, make_package, name):
        assert self._validate(make_package(name)) == []

    # ------------------------------------------------------------------
    # Answer type
    # ------------------------------------------------------------------

    def test_answer_type_must_match_response_type(self, make_package):
        data = make_package()
        data["questions"][0]["correctAnswer"] = {"type": "short", "acceptedAnswers": ["7"]}

        violations = self._validate(data)

        assert _rules(violations) == ["answer_type_matches_response_type"]
        violation = violations[0]
        assert violation.field_path == "questions.0.correctAnswer.type"
        assert violation.question_id == "660e8400-e29b-41d4-a716-446655440101"
        assert violation.expected == "mcq"
        assert violation.actual == "short"

    def test_numeric_question_with_mcq_answer(self, make_package):
        data = make_package()
        data["questions"][3]["correctAnswer"] = {"type": "mcq", "correctOptionId": "A"}

        violations = self._validate(data)

        assert _rules(violations) == ["answer_type_matches_response_type"]
        assert violations[0].expected == "numeric"

    # ------------------------------------------------------------------
    # MCQ options
    # ------------------------------------------------------------------

    def test_options_only_allowed_for_mcq(self, make_package):
        data = make_package()
        data["questions"][3]["options"] = OPTIONS

        violations = self._validate(data)

        assert _rules(violations) == ["options_only_for_mcq"]
        assert violations[0].field_path == "questions.3.options"

    def test_mcq_requires_options(self, make_package):
        data = make_package()
        del data["questions"][1]["options"]

        violations = self._validate(data)

        assert _rules(violations) == ["mcq_options_required"]
        assert violations[0].expected == 4
        assert violations[0].actual == 0

    def test_mcq_option_ids_must_be_a_to_d(self, make_package):
        data = make_package()
        data["questions"][0]["options"][1]["id"] = "A"

        violations = self._validate(data)

        assert _rules(violations) == ["mcq_option_ids"]
        assert violations[0].actual == ["A", "A", "C", "D"]

    def test_correct_option_must_be_declared(self, make_package):
        data = make_package()
        data["questions"][1]["options"][3]["id"] = "B"
        data["questions"][1]["correctAnswer"] = {"type": "mcq", "correctOptionId": "D"}

        violations = self._validate(data)

        assert _rules(violations) == ["mcq_option_ids", "mcq_correct_option_declared"]
        declared = violations[1]
        assert declared.field_path == "questions.1.correctAnswer.correctOptionId"
        assert declared.actual == "D"

    def test_correct_option_not_checked_for_other_answer_types(self, make_package):
        """A mismatched answer variant is reported once, by the answer type rule."""
        data = make_package()
        data["questions"][2]["correctAnswer"] = {"type": "numeric", "exactValue": 7}

        assert _rules(self._validate(data)) == ["answer_type_matches_response_type"]

    # ------------------------------------------------------------------
    # Media references
    # ------------------------------------------------------------------

    def test_question_media_reference_must_resolve(self, make_package):
        data = make_package()
        data["questions"][0]["mediaReferences"][0]["mediaId"] = "770e8400-e29b-41d4-a716-446655440999"

        violations = self._validate(data)

        assert _rules(violations) == ["media_reference_resolves"]
        assert violations[0].field_path == "questions.0.mediaReferences.0.mediaId"
        assert violations[0].media_id == "770e8400-e29b-41d4-a716-446655440999"

    def test_option_media_reference_must_resolve(self, make_package):
        data = make_package()
        data["questions"][1]["options"][2]["mediaReference"] = {
            "mediaId": "770e8400-e29b-41d4-a716-446655440998",
            "type": "image",
            "placement": "inline",
            "altText": "Six stickers",
        }

        violations = self._validate(data)

        assert _rules(violations) == ["media_reference_resolves"]
        assert violations[0].field_path == "questions.1.options.2.mediaReference.mediaId"

    def test_option_media_reference_that_resolves(self, make_package):
        data = make_package()
        data["questions"][1]["options"][2]["mediaReference"] = {
            "mediaId": "770e8400-e29b-41d4-a716-446655440201",
            "type": "image",
            "placement": "inline",
            "altText": "Apples",
        }

        assert self._validate(data) == []

    def test_media_references_without_assets(self, make_package):
        data = make_package()
        data["mediaAssets"] = []

        violations = self._validate(data)

        assert _rules(violations) == ["media_reference_resolves", "media_reference_resolves"]

    # ------------------------------------------------------------------
    # Marks
    # ------------------------------------------------------------------

    def test_total_marks_must_match(self, make_package):
        data = make_package()
        data["metadata"]["totalMarks"] = 6

        violations = self._validate(data)

        assert _rules(violations) == ["total_marks_match"]
        assert violations[0].field_path == "metadata.totalMarks"
        assert violations[0].expected == 6
        assert violations[0].actual == 5

    def test_default_marks_count_towards_total(self, make_package):
        data = make_package()
        for question in data["questions"]:
            del question["marks"]

        assert self._validate(data) == []

    # ------------------------------------------------------------------
    # Uniqueness
    # ------------------------------------------------------------------

    def test_question_ids_must_be_unique(self, make_package):
        data = make_package()
        data["questions"][1]["id"] = data["questions"][0]["id"]

        violations = self._validate(data)

        assert _rules(violations) == ["question_id_unique"]
        assert violations[0].actual == 2

    def test_media_asset_ids_must_be_unique(self, make_package):
        data = make_package()
        data["mediaAssets"][1]["id"] = data["mediaAssets"][0]["id"]

        rules = _rules(self._validate(data))

        assert "media_asset_id_unique" in rules
        # the asset referenced by question 4 is gone
        assert "media_reference_resolves" in rules

    def test_sequence_numbers_must_be_unique(self, make_package):
        data = make_package()
        data["questions"][1]["sequenceNumber"] = 1

        violations = self._validate(data)

        assert _rules(violations) == ["sequence_number_unique"]
        assert violations[0].actual == 2

    # ------------------------------------------------------------------
    # Sequence contiguity
    # ------------------------------------------------------------------

    def test_gaps_allowed_by_default(self, make_package):
        data = make_package()
        data["questions"][4]["sequenceNumber"] = 9

        assert self._validate(data) == []

    def test_contiguous_sequence_when_required(self, make_package):
        data = make_package()
        data["questions"][4]["sequenceNumber"] = 9

        violations = self._validate(data, Stage3BusinessRules(require_contiguous_sequence=True))

        assert _rules(violations) == ["sequence_contiguous"]
        assert violations[0].expected == 5
        assert violations[0].actual == 9

    def test_contiguous_sequence_ignores_authored_order(self, make_package):
        data = make_package()
        data["questions"].reverse()

        stage3 = Stage3BusinessRules(require_contiguous_sequence=True)
        assert self._validate(data, stage3) == []

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------

    def test_all_violations_are_aggregated(self, make_package):
        data = make_package()
        data["metadata"]["totalMarks"] = 50
        data["questions"][0]["correctAnswer"] = {"type": "short", "acceptedAnswers": ["7"]}
        data["questions"][3]["options"] = OPTIONS
        data["questions"][3]["mediaReferences"][0]["mediaId"] = "770e8400-e29b-41d4-a716-446655440999"

        rules = _rules(self._validate(data))

        assert rules == [
            "answer_type_matches_response_type",
            "options_only_for_mcq",
            "media_reference_resolves",
            "total_marks_match",
        ]

    def test_package_is_not_modified(self, year2_package):
        before = year2_package.model_dump()

        self.stage3.validate(year2_package)

        assert year2_package.model_dump() == before

    def test_violation_to_dict_drops_empty_fields(self, make_package):
        data = make_package()
        data["metadata"]["totalMarks"] = 6

        violation = self._validate(data)[0]

        assert violation.to_dict() == {
            "rule": "total_marks_match",
            "message": "Total marks mismatch: metadata.totalMarks is 6, but sum of question marks is 5",
            "field_path": "metadata.totalMarks",
            "expected": 6,
            "actual": 5,
        }
