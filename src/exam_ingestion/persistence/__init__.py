"""
Relational persistence layer (SQLAlchemy Core).

- database.py: process-wide engine with connection pooling
- tables.py: the five exam content tables
- store.py: per-package transactions with credential forwarding

Storage Strategy:
- One transaction per exam package, inserts in foreign key order
- Authorization delegated to the database (row-level security on PostgreSQL,
  emulated admin-only insert policy elsewhere)
- Resubmitting a package id is rejected by the primary key constraint
"""

from exam_ingestion.persistence.database import Database, create_engine_from_settings
from exam_ingestion.persistence.store import ExamPackageStore, StoreAccessDenied
from exam_ingestion.persistence.tables import EXAM_TABLES, metadata

__all__ = [
    "Database",
    "create_engine_from_settings",
    "ExamPackageStore",
    "StoreAccessDenied",
    "EXAM_TABLES",
    "metadata",
]
