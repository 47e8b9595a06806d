"""
FastAPI dependency injection for the ingestion service.

Provides singleton instances of expensive resources (engine, store, validation
pipeline) and resolves bearer tokens to access credentials.
"""

from functools import lru_cache
from typing import Optional

import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import Engine

from exam_ingestion.config import Settings, settings
from exam_ingestion.credentials import AccessCredential
from exam_ingestion.ingestion.inserter import TransactionalInserter
from exam_ingestion.ingestion.service import ExamPackageIngestor
from exam_ingestion.persistence.database import Database
from exam_ingestion.persistence.store import ExamPackageStore
from exam_ingestion.validation.pipeline import ValidationPipeline

logger = structlog.get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache()
def get_settings() -> Settings:
    """
    Get settings singleton.

    Returns:
        Settings instance
    """
    return settings


def get_engine() -> Engine:
    """
    Get the process-wide SQLAlchemy engine (pooled connections).
    """
    return Database.get_engine(get_settings())


@lru_cache()
def get_store() -> ExamPackageStore:
    """
    Get singleton exam package store bound to the shared engine.

    Returns:
        ExamPackageStore instance
    """
    app_settings = get_settings()
    return ExamPackageStore(
        get_engine(),
        admin_role=app_settings.ADMIN_ROLE,
        enforce_write_policy=app_settings.ENFORCE_WRITE_POLICY,
    )


@lru_cache()
def get_validation_pipeline() -> ValidationPipeline:
    """
    Get singleton validation pipeline.

    Builds the JSON Schema validator (if selected) once and reuses it.

    Returns:
        ValidationPipeline instance
    """
    return ValidationPipeline(get_settings())


def get_ingestor(
    pipeline: ValidationPipeline = Depends(get_validation_pipeline),
    store: ExamPackageStore = Depends(get_store),
) -> ExamPackageIngestor:
    """
    Create ingestor with injected dependencies.

    Note: ExamPackageIngestor is NOT cached because it's lightweight and stateless.

    Args:
        pipeline: Validation pipeline singleton (injected)
        store: Store singleton (injected)

    Returns:
        ExamPackageIngestor instance
    """
    return ExamPackageIngestor(pipeline=pipeline, inserter=TransactionalInserter(store))


def resolve_credential(token: str, app_settings: Settings) -> Optional[AccessCredential]:
    """
    Look a bearer token up in the configured token registry.

    Tokens have the form "<key_id>:<secret>"; the key id becomes the subject.

    Returns:
        AccessCredential, or None for an unknown token
    """
    role = app_settings.ACCESS_TOKENS.get(token)
    if role is None:
        return None
    subject = token.split(":", 1)[0]
    return AccessCredential(subject=subject, role=role, token=token)


def get_credential(
    authorization: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    app_settings: Settings = Depends(get_settings),
) -> Optional[AccessCredential]:
    """
    Resolve the Authorization header to a credential.

    Missing or unknown tokens yield None; the inserter turns that into an
    AuthorizationError. No role check happens here.
    """
    if authorization is None:
        return None

    credential = resolve_credential(authorization.credentials, app_settings)
    if credential is None:
        logger.warning("Unknown bearer token presented")
    return credential
