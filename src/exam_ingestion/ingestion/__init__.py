"""
Exam package ingestion.

- transformer.py: validated package -> RowBundle (pure)
- rows.py: row models, one per table
- inserter.py: atomic insert of a RowBundle through the store
- service.py: validate -> transform -> insert orchestration
- exceptions.py: TransformationDefect, AuthorizationError, TransactionError
"""

from .exceptions import (
    AuthorizationError,
    IngestionError,
    InsertStage,
    TransactionError,
    TransformationDefect,
)
from .inserter import InsertFailure, InsertResult, InsertSuccess, TransactionalInserter
from .rows import RowBundle
from .service import ExamPackageIngestor, IngestionResult
from .transformer import transform_exam_package

__all__ = [
    "transform_exam_package",
    "RowBundle",
    "TransactionalInserter",
    "InsertResult",
    "InsertSuccess",
    "InsertFailure",
    "InsertStage",
    "ExamPackageIngestor",
    "IngestionResult",
    # Exceptions
    "IngestionError",
    "TransformationDefect",
    "AuthorizationError",
    "TransactionError",
]
