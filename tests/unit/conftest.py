"""Unit test fixtures (pipeline and ingestion components).

Builds components directly from test settings, without FastAPI.
"""

import pytest

from exam_ingestion.ingestion.inserter import TransactionalInserter
from exam_ingestion.ingestion.service import ExamPackageIngestor
from exam_ingestion.validation.pipeline import ValidationPipeline


@pytest.fixture
def pipeline(test_settings) -> ValidationPipeline:
    """Validation pipeline using the model engine."""
    return ValidationPipeline(test_settings)


@pytest.fixture
def inserter(store) -> TransactionalInserter:
    return TransactionalInserter(store)


@pytest.fixture
def ingestor(pipeline, inserter) -> ExamPackageIngestor:
    """Ingestor wired to the SQLite store."""
    return ExamPackageIngestor(pipeline=pipeline, inserter=inserter)
