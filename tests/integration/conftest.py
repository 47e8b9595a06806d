"""Integration test fixtures (HTTP API over a SQLite store).

The FastAPI app is exercised through TestClient with its singletons
replaced by components built from the test settings. The lifespan is not
run, so no connection to the configured PostgreSQL database is attempted.
"""

import pytest
from fastapi.testclient import TestClient

from exam_ingestion.api.dependencies import get_settings, get_store, get_validation_pipeline
from exam_ingestion.main import app
from exam_ingestion.validation.pipeline import ValidationPipeline

ADMIN_HEADERS = {"Authorization": "Bearer authoring-tool:s3cret"}
TEACHER_HEADERS = {"Authorization": "Bearer teacher-portal:s3cret"}


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return ADMIN_HEADERS


@pytest.fixture
def teacher_headers() -> dict[str, str]:
    return TEACHER_HEADERS


@pytest.fixture
def client(test_settings, store):
    """TestClient wired to the per-test SQLite store."""
    pipeline = ValidationPipeline(test_settings)

    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_validation_pipeline] = lambda: pipeline

    yield TestClient(app)

    app.dependency_overrides.clear()
