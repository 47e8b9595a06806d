"""
Unit tests for ExamPackageIngestor (validate -> transform -> insert).
"""

import json
from unittest.mock import Mock, patch

import pytest

from exam_ingestion.ingestion.exceptions import AuthorizationError, TransformationDefect
from exam_ingestion.ingestion.inserter import InsertSuccess
from exam_ingestion.ingestion.service import ExamPackageIngestor

PACKAGE_ID = "550e8400-e29b-41d4-a716-446655440001"


class TestExamPackageIngestor:
    """Test suite for the ingestion service."""

    def test_committed(self, ingestor, store, year2_numeracy, admin_credential):
        result = ingestor.ingest(json.dumps(year2_numeracy).encode("utf-8"), admin_credential)

        assert result.outcome == "committed"
        assert result.committed
        assert isinstance(result.insert_result, InsertSuccess)
        assert result.insert_result.row_counts["exam_question_options"] == 12
        assert store.count_rows(PACKAGE_ID)["exam_questions"] == 5

    def test_rejected_document_is_not_inserted(self, pipeline, make_package, admin_credential):
        inserter = Mock()
        ingestor = ExamPackageIngestor(pipeline=pipeline, inserter=inserter)
        data = make_package()
        data["metadata"]["totalMarks"] = 7

        result = ingestor.ingest(data, admin_credential)

        assert result.outcome == "rejected"
        assert result.insert_result is None
        assert not result.committed
        assert [v.rule for v in result.report.business_violations] == ["total_marks_match"]
        inserter.insert.assert_not_called()

    def test_malformed_body_is_rejected(self, ingestor, admin_credential):
        result = ingestor.ingest(b"not json", admin_credential)

        assert result.outcome == "rejected"
        assert result.report.structural_violations[0].field_path == "root"

    def test_missing_credential_is_unauthorized(self, ingestor, store, year2_numeracy):
        result = ingestor.ingest(year2_numeracy, None)

        assert result.outcome == "unauthorized"
        assert isinstance(result.insert_result.error, AuthorizationError)
        assert store.count_rows(PACKAGE_ID)["exam_packages"] == 0

    def test_non_admin_is_forbidden(self, ingestor, store, year2_numeracy, teacher_credential):
        result = ingestor.ingest(year2_numeracy, teacher_credential)

        assert result.outcome == "forbidden"
        assert store.count_rows(PACKAGE_ID)["exam_packages"] == 0

    def test_resubmission_is_a_conflict(self, ingestor, year2_numeracy, admin_credential):
        assert ingestor.ingest(year2_numeracy, admin_credential).committed

        result = ingestor.ingest(year2_numeracy, admin_credential)

        assert result.outcome == "conflict"

    def test_transformation_defect_propagates(self, ingestor, year2_numeracy, admin_credential):
        with patch(
            "exam_ingestion.ingestion.service.transform_exam_package",
            side_effect=TransformationDefect("broken invariant"),
        ):
            with pytest.raises(TransformationDefect):
                ingestor.ingest(year2_numeracy, admin_credential)

    def test_credential_forwarded_unmodified(self, pipeline, year2_numeracy, admin_credential):
        inserter = Mock()
        inserter.insert.return_value = InsertSuccess(exam_package_id=PACKAGE_ID)
        ingestor = ExamPackageIngestor(pipeline=pipeline, inserter=inserter)

        result = ingestor.ingest(year2_numeracy, admin_credential)

        assert result.outcome == "committed"
        bundle, credential = inserter.insert.call_args.args
        assert credential is admin_credential
        assert bundle.exam_package_id == PACKAGE_ID
