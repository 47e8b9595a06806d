"""
Transactional insertion of a transformed exam package.

All five relations are written inside one store transaction, in foreign key
order:

1. exam_packages
2. exam_media_assets
3. exam_questions
4. exam_question_options
5. exam_correct_answers

Any failure rolls the whole package back. There are no retries: a failed
insert is reported to the caller with the stage it failed at.
"""

import time
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Optional, Union

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from exam_ingestion.credentials import AccessCredential
from exam_ingestion.monitoring.metrics import ingestion_rows_total, insert_latency_seconds
from exam_ingestion.persistence.store import (
    INSUFFICIENT_PRIVILEGE,
    ExamPackageStore,
    StoreAccessDenied,
)
from .exceptions import AuthorizationError, InsertStage, TransactionError
from .rows import Row, RowBundle

logger = structlog.get_logger(__name__)

UNIQUE_VIOLATION = "23505"


@dataclass(frozen=True)
class InsertSuccess:
    """Every row of the package was committed."""

    exam_package_id: str
    row_counts: dict[str, int] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class InsertFailure:
    """Nothing was committed; `error` says why and at which stage."""

    error: Union[AuthorizationError, TransactionError]

    @property
    def success(self) -> bool:
        return False


InsertResult = Union[InsertSuccess, InsertFailure]


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Walk a wrapped exception: SQLAlchemy's .orig first, then __cause__/__context__."""
    seen: set[int] = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = getattr(current, "orig", None) or current.__cause__ or current.__context__


def _sqlstate(exc: BaseException) -> Optional[str]:
    for item in _exception_chain(exc):
        # psycopg exposes .sqlstate, psycopg2 .pgcode
        code = getattr(item, "sqlstate", None) or getattr(item, "pgcode", None)
        if isinstance(code, str):
            return code
    return None


def is_access_denied(exc: BaseException) -> bool:
    """True when the store's access control rejected the statement."""
    if any(isinstance(item, StoreAccessDenied) for item in _exception_chain(exc)):
        return True
    return _sqlstate(exc) == INSUFFICIENT_PRIVILEGE


def is_unique_violation(exc: BaseException) -> bool:
    if not isinstance(exc, IntegrityError):
        return False
    if _sqlstate(exc) == UNIQUE_VIOLATION:
        return True
    # SQLite reports constraint kinds only in the message
    return "UNIQUE constraint failed" in str(exc.orig)


class TransactionalInserter:
    """
    Writes a RowBundle atomically through an ExamPackageStore.
    """

    def __init__(self, store: ExamPackageStore):
        self.store = store

    @staticmethod
    def _plan(bundle: RowBundle) -> Iterator[tuple[InsertStage, list[Row]]]:
        yield InsertStage.PACKAGE, [bundle.exam_package]
        yield InsertStage.MEDIA_ASSETS, list(bundle.media_assets)
        yield InsertStage.QUESTIONS, list(bundle.questions)
        yield InsertStage.QUESTION_OPTIONS, list(bundle.question_options)
        yield InsertStage.CORRECT_ANSWERS, list(bundle.correct_answers)

    def insert(self, bundle: RowBundle, credential: Optional[AccessCredential]) -> InsertResult:
        """
        Insert every row of the bundle in one transaction.

        Args:
            bundle: Rows produced by transform_exam_package
            credential: Caller credential, forwarded unmodified to the store

        Returns:
            InsertSuccess with per-table row counts, or InsertFailure carrying
            an AuthorizationError or TransactionError
        """
        log = logger.bind(exam_package_id=bundle.exam_package_id)

        if credential is None:
            log.warning("Insert refused: no credential supplied")
            return InsertFailure(
                AuthorizationError(
                    "A credential is required to insert exam packages",
                    stage=InsertStage.AUTHORIZATION,
                )
            )

        stage = InsertStage.AUTHORIZATION
        row_counts: dict[str, int] = {}
        start = time.perf_counter()

        try:
            with self.store.transaction(credential) as conn:
                for stage, rows in self._plan(bundle):
                    row_counts[stage.value] = self.store.insert_rows(
                        conn, stage.value, [row.model_dump() for row in rows]
                    )
                stage = InsertStage.COMMIT
        except (StoreAccessDenied, SQLAlchemyError) as e:
            insert_latency_seconds.labels(success="false").observe(time.perf_counter() - start)
            error = self._classify(e, stage)
            log.warning(
                "Insert rolled back",
                stage=stage.value,
                error_type=type(error).__name__,
                cause=str(e),
            )
            return InsertFailure(error)

        insert_latency_seconds.labels(success="true").observe(time.perf_counter() - start)
        for table, count in row_counts.items():
            ingestion_rows_total.labels(table=table).inc(count)

        log.info("Exam package committed", row_counts=row_counts, subject=credential.subject)
        return InsertSuccess(exam_package_id=bundle.exam_package_id, row_counts=row_counts)

    @staticmethod
    def _classify(exc: BaseException, stage: InsertStage) -> Union[AuthorizationError, TransactionError]:
        if is_access_denied(exc):
            return AuthorizationError(
                f"Store denied write at {stage.value}: {exc}",
                stage=stage,
                cause=exc,
            )
        conflict = is_unique_violation(exc)
        return TransactionError(
            f"Transaction failed at {stage.value}: {exc}",
            stage=stage,
            cause=exc,
            conflict=conflict,
        )
