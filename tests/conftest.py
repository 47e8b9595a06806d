"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

import copy
import json
from pathlib import Path
from typing import Any, Callable, Dict

import pytest
from sqlalchemy import create_engine

from exam_ingestion.config import Settings
from exam_ingestion.contract.models import ExamPackage
from exam_ingestion.credentials import AccessCredential
from exam_ingestion.persistence.store import ExamPackageStore

FIXTURES_DIR = Path(__file__).parent / "fixtures"

ADMIN_TOKEN = "authoring-tool:s3cret"
TEACHER_TOKEN = "teacher-portal:s3cret"


def load_fixture(name: str) -> Dict[str, Any]:
    """Load a JSON exam package fixture by file stem (e.g. "year2_numeracy")."""
    with open(FIXTURES_DIR / f"{name}.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Test settings with safe defaults for local testing.

    Uses a throwaway SQLite file and two registered bearer tokens:
    ADMIN_TOKEN (role "admin") and TEACHER_TOKEN (role "teacher").
    """
    return Settings(
        # === Application ===
        APP_NAME="Exam Package Ingestion (Test)",
        APP_VERSION="0.1.0",
        DEBUG=True,
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === Database ===
        DATABASE_URL=f"sqlite:///{tmp_path / 'exam_content.db'}",

        # === Validation ===
        STRUCTURAL_ENGINE="model",
        REQUIRE_CONTIGUOUS_SEQUENCE=False,

        # === Authorization ===
        ADMIN_ROLE="admin",
        ENFORCE_WRITE_POLICY=True,
        ACCESS_TOKENS={ADMIN_TOKEN: "admin", TEACHER_TOKEN: "teacher"},

        # === Monitoring ===
        PROMETHEUS_ENABLED=False,
    )


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to test fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def year2_numeracy() -> Dict[str, Any]:
    """Year 2 numeracy package: 5 questions (mcq, numeric, short), 2 media assets."""
    return load_fixture("year2_numeracy")


@pytest.fixture
def year5_maths() -> Dict[str, Any]:
    """Year 5 maths package: all four response types, list prompt block."""
    return load_fixture("year5_maths")


@pytest.fixture
def year9_reading() -> Dict[str, Any]:
    """Year 9 reading package: quote block, extended responses, no media."""
    return load_fixture("year9_reading")


@pytest.fixture
def make_package() -> Callable[..., Dict[str, Any]]:
    """Factory fixture returning a deep copy of a fixture package.

    Usage:
        def test_something(make_package):
            data = make_package()
            data["metadata"]["totalMarks"] = 99
    """
    def _make(name: str = "year2_numeracy") -> Dict[str, Any]:
        return copy.deepcopy(load_fixture(name))

    return _make


@pytest.fixture
def year2_package(year2_numeracy: Dict[str, Any]) -> ExamPackage:
    """Parsed ExamPackage instance from the Year 2 fixture."""
    return ExamPackage.model_validate(year2_numeracy)


@pytest.fixture
def sqlite_engine(test_settings: Settings):
    """File-backed SQLite engine, disposed after the test."""
    engine = create_engine(test_settings.DATABASE_URL)
    yield engine
    engine.dispose()


@pytest.fixture
def store(sqlite_engine, test_settings: Settings) -> ExamPackageStore:
    """ExamPackageStore with the five exam tables created."""
    exam_store = ExamPackageStore(
        sqlite_engine,
        admin_role=test_settings.ADMIN_ROLE,
        enforce_write_policy=test_settings.ENFORCE_WRITE_POLICY,
    )
    exam_store.create_schema()
    return exam_store


@pytest.fixture
def admin_credential() -> AccessCredential:
    return AccessCredential(subject="authoring-tool", role="admin", token=ADMIN_TOKEN)


@pytest.fixture
def teacher_credential() -> AccessCredential:
    return AccessCredential(subject="teacher-portal", role="teacher", token=TEACHER_TOKEN)
