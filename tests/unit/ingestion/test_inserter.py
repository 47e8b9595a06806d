"""
Unit tests for TransactionalInserter against a SQLite store.
"""

import pytest
from sqlalchemy import select, text

from exam_ingestion.contract.models import ExamPackage
from exam_ingestion.ingestion.exceptions import (
    AuthorizationError,
    InsertStage,
    TransactionError,
)
from exam_ingestion.ingestion.inserter import (
    InsertFailure,
    InsertSuccess,
    is_access_denied,
    is_unique_violation,
)
from exam_ingestion.ingestion.transformer import transform_exam_package
from exam_ingestion.persistence.store import StoreAccessDenied
from exam_ingestion.persistence.tables import (
    exam_correct_answers,
    exam_question_options,
    exam_questions,
)

PACKAGE_ID = "550e8400-e29b-41d4-a716-446655440001"
EMPTY_COUNTS = {
    "exam_packages": 0,
    "exam_media_assets": 0,
    "exam_questions": 0,
    "exam_question_options": 0,
    "exam_correct_answers": 0,
}


@pytest.fixture
def bundle(year2_package):
    return transform_exam_package(year2_package)


class TestTransactionalInserter:
    """Test suite for the single-transaction insert."""

    def test_insert_success(self, inserter, store, bundle, admin_credential):
        result = inserter.insert(bundle, admin_credential)

        assert isinstance(result, InsertSuccess)
        assert result.success
        assert result.exam_package_id == PACKAGE_ID
        assert result.row_counts == bundle.row_counts()
        assert store.count_rows(PACKAGE_ID) == bundle.row_counts()

    def test_stored_rows_match_bundle(self, inserter, store, bundle, admin_credential):
        inserter.insert(bundle, admin_credential)

        with store.engine.connect() as conn:
            questions = conn.execute(
                select(exam_questions).order_by(exam_questions.c.sequence_number)
            ).mappings().all()
            answers = conn.execute(select(exam_correct_answers)).mappings().all()
            options = conn.execute(
                select(exam_question_options.c.option_id).where(
                    exam_question_options.c.question_id == "660e8400-e29b-41d4-a716-446655440101"
                ).order_by(exam_question_options.c.id)
            ).scalars().all()

        assert [q["id"] for q in questions] == [q.id for q in bundle.questions]
        assert questions[2]["prompt_blocks"][1] == {"type": "text", "content": "5 + □ = 12"}
        assert options == ["A", "B", "C", "D"]
        by_question = {a["question_id"]: a for a in answers}
        assert by_question["660e8400-e29b-41d4-a716-446655440104"]["exact_value"] == 14
        assert by_question["660e8400-e29b-41d4-a716-446655440105"]["accepted_answers"] == ["9", "nine"]

    def test_missing_credential(self, inserter, store, bundle):
        result = inserter.insert(bundle, None)

        assert isinstance(result, InsertFailure)
        assert not result.success
        assert isinstance(result.error, AuthorizationError)
        assert result.error.stage == InsertStage.AUTHORIZATION
        assert result.error.cause is None
        assert store.count_rows(PACKAGE_ID) == EMPTY_COUNTS

    def test_non_admin_denied_by_store(self, inserter, store, bundle, teacher_credential):
        result = inserter.insert(bundle, teacher_credential)

        assert isinstance(result.error, AuthorizationError)
        assert result.error.stage == InsertStage.PACKAGE
        assert isinstance(result.error.cause, StoreAccessDenied)
        assert result.error.details["stage"] == "exam_packages"
        assert store.count_rows(PACKAGE_ID) == EMPTY_COUNTS

    def test_failure_mid_sequence_rolls_back_everything(
        self, inserter, store, bundle, admin_credential
    ):
        """A failure on the third question's options leaves no rows in any table."""
        with store.engine.begin() as conn:
            conn.execute(
                text(
                    "CREATE TRIGGER fail_question_3_options "
                    "BEFORE INSERT ON exam_question_options "
                    "WHEN NEW.question_id = '660e8400-e29b-41d4-a716-446655440103' "
                    "BEGIN SELECT RAISE(ABORT, 'option insert failed'); END;"
                )
            )

        result = inserter.insert(bundle, admin_credential)

        assert isinstance(result, InsertFailure)
        assert isinstance(result.error, TransactionError)
        assert result.error.stage == InsertStage.QUESTION_OPTIONS
        assert result.error.conflict is False
        assert store.count_rows(PACKAGE_ID) == EMPTY_COUNTS

    def test_duplicate_package_is_a_conflict(self, inserter, store, bundle, admin_credential):
        assert inserter.insert(bundle, admin_credential).success

        result = inserter.insert(bundle, admin_credential)

        assert isinstance(result.error, TransactionError)
        assert result.error.conflict is True
        assert result.error.stage == InsertStage.PACKAGE
        assert store.count_rows(PACKAGE_ID) == bundle.row_counts()

    def test_reused_question_id_across_packages(
        self, inserter, store, make_package, admin_credential
    ):
        """A second package may not claim a question id that is already stored."""
        first = make_package()
        second = make_package()
        second["metadata"]["id"] = "550e8400-e29b-41d4-a716-446655440099"
        second["mediaAssets"] = []
        for question in second["questions"]:
            question.pop("mediaReferences", None)

        inserter.insert(transform_exam_package(ExamPackage.model_validate(first)), admin_credential)
        result = inserter.insert(
            transform_exam_package(ExamPackage.model_validate(second)), admin_credential
        )

        assert result.error.conflict is True
        assert result.error.stage == InsertStage.QUESTIONS
        assert store.count_rows("550e8400-e29b-41d4-a716-446655440099") == EMPTY_COUNTS

    def test_package_without_media(self, inserter, store, make_package, admin_credential):
        bundle = transform_exam_package(ExamPackage.model_validate(make_package("year9_reading")))

        result = inserter.insert(bundle, admin_credential)

        assert result.success
        assert result.row_counts["exam_media_assets"] == 0
        assert result.row_counts["exam_question_options"] == 20


class TestErrorClassification:
    def test_access_denied_direct(self):
        assert is_access_denied(StoreAccessDenied("exam_packages", "teacher"))

    def test_access_denied_through_cause(self):
        try:
            try:
                raise StoreAccessDenied("exam_questions", None)
            except StoreAccessDenied as inner:
                raise RuntimeError("wrapped") from inner
        except RuntimeError as outer:
            assert is_access_denied(outer)

    def test_access_denied_by_sqlstate(self):
        class FakeDriverError(Exception):
            sqlstate = "42501"

        assert is_access_denied(FakeDriverError("permission denied"))

    def test_other_errors_are_not_access_denied(self):
        assert not is_access_denied(ValueError("boom"))

    def test_unique_violation_requires_integrity_error(self):
        assert not is_unique_violation(ValueError("UNIQUE constraint failed: exam_packages.id"))
