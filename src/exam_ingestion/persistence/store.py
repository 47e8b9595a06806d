"""
Exam content store.

Opens one database transaction per exam package and forwards the caller's
credential to the database's access-control layer:

- PostgreSQL: the claims are set as transaction-local `request.jwt.claims`,
  which row-level security policies read. create_schema() installs the
  admin-only insert policy on every exam table.
- Other dialects (SQLite in tests and local runs): the claims travel on the
  connection and a cursor hook applies the same admin-only insert policy, so
  the allow/deny decision still belongs to the store.

Denials surface as StoreAccessDenied (emulated policy) or as a DBAPI error
with SQLSTATE 42501 (PostgreSQL).
"""

import json
import re
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any

import structlog
from sqlalchemy import Connection, Engine, event, func, insert, select, text

from exam_ingestion.credentials import AccessCredential
from .tables import (
    CLAIMS_SETTING,
    EXAM_TABLES,
    exam_correct_answers,
    exam_media_assets,
    exam_packages,
    exam_question_options,
    exam_questions,
    metadata,
    row_security_statements,
)

logger = structlog.get_logger(__name__)

CLAIMS_KEY = "exam_ingestion.claims"
INSUFFICIENT_PRIVILEGE = "42501"

_INSERT_TARGET = re.compile(r'^\s*INSERT\s+INTO\s+"?(\w+)"?', re.IGNORECASE)
_EXAM_TABLE_NAMES = frozenset(table.name for table in EXAM_TABLES)


class StoreAccessDenied(Exception):
    """The store's write policy rejected a statement for the current credential."""

    sqlstate = INSUFFICIENT_PRIVILEGE

    def __init__(self, table: str, role: str | None):
        super().__init__(
            f"new row violates write policy for table \"{table}\" (role: {role or 'anonymous'})"
        )
        self.table = table
        self.role = role


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class ExamPackageStore:
    """
    Transactional access to the five exam content tables.
    """

    def __init__(self, engine: Engine, admin_role: str = "admin", enforce_write_policy: bool = True):
        """
        Args:
            engine: SQLAlchemy engine (PostgreSQL in deployment, SQLite in tests)
            admin_role: Role allowed to insert exam content
            enforce_write_policy: Apply the admin-only insert policy (row-level
                security on PostgreSQL, a cursor hook elsewhere)
        """
        self.engine = engine
        self.admin_role = admin_role
        self.enforce_write_policy = enforce_write_policy
        self.is_postgresql = engine.dialect.name == "postgresql"

        if engine.dialect.name == "sqlite" and not event.contains(
            engine, "connect", _enable_sqlite_foreign_keys
        ):
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)

        if enforce_write_policy and not self.is_postgresql:
            event.listen(engine, "before_cursor_execute", self._enforce_write_policy)

    @contextmanager
    def transaction(self, credential: AccessCredential) -> Iterator[Connection]:
        """
        Open one unit of work on behalf of `credential`.

        Commits when the block exits normally, rolls back on any exception.

        Yields:
            Connection bound to the transaction
        """
        claims = credential.claims()
        with self.engine.begin() as conn:
            if self.is_postgresql:
                conn.execute(
                    text("select set_config(:setting, :claims, true)"),
                    {"setting": CLAIMS_SETTING, "claims": json.dumps(claims)},
                )
                yield conn
                return

            conn.info[CLAIMS_KEY] = claims
            try:
                yield conn
            finally:
                conn.info.pop(CLAIMS_KEY, None)

    def insert_rows(self, conn: Connection, table_name: str, rows: Sequence[Mapping[str, Any]]) -> int:
        """
        Insert rows into one exam table within an open transaction.

        Returns:
            Number of rows written (0 when `rows` is empty; no statement is issued)
        """
        if not rows:
            return 0
        table = metadata.tables[table_name]
        conn.execute(insert(table), [dict(row) for row in rows])
        return len(rows)

    def create_schema(self) -> None:
        """
        Create every exam table that does not exist yet.

        On PostgreSQL this also (re)installs the row-level security policies
        that restrict inserts to the admin role.
        """
        metadata.create_all(self.engine)
        if self.is_postgresql and self.enforce_write_policy:
            with self.engine.begin() as conn:
                for table in EXAM_TABLES:
                    for statement in row_security_statements(table.name, self.admin_role):
                        conn.execute(text(statement))
            logger.info("Row-level security policies installed", admin_role=self.admin_role)
        logger.info("Exam content schema ensured", tables=sorted(_EXAM_TABLE_NAMES))

    def count_rows(self, exam_package_id: str) -> dict[str, int]:
        """
        Count the rows stored for one package in each of the five tables.

        Returns:
            Mapping of table name to row count
        """
        package_questions = select(exam_questions.c.id).where(
            exam_questions.c.exam_package_id == exam_package_id
        )
        queries = {
            exam_packages.name: select(func.count()).select_from(exam_packages).where(
                exam_packages.c.id == exam_package_id
            ),
            exam_media_assets.name: select(func.count()).select_from(exam_media_assets).where(
                exam_media_assets.c.exam_package_id == exam_package_id
            ),
            exam_questions.name: select(func.count()).select_from(exam_questions).where(
                exam_questions.c.exam_package_id == exam_package_id
            ),
            exam_question_options.name: select(func.count())
            .select_from(exam_question_options)
            .where(exam_question_options.c.question_id.in_(package_questions)),
            exam_correct_answers.name: select(func.count())
            .select_from(exam_correct_answers)
            .where(exam_correct_answers.c.question_id.in_(package_questions)),
        }
        with self.engine.connect() as conn:
            return {name: conn.execute(query).scalar_one() for name, query in queries.items()}

    def check_connection(self) -> bool:
        """Return True when a trivial query succeeds."""
        with self.engine.connect() as conn:
            conn.execute(text("select 1"))
        return True

    def _enforce_write_policy(
        self,
        conn: Connection,
        cursor: Any,
        statement: str,
        parameters: Any,
        context: Any,
        executemany: bool,
    ) -> None:
        match = _INSERT_TARGET.match(statement)
        if match is None or match.group(1) not in _EXAM_TABLE_NAMES:
            return

        claims = conn.info.get(CLAIMS_KEY) or {}
        role = claims.get("role")
        if role != self.admin_role:
            logger.warning(
                "Write policy denied insert",
                table=match.group(1),
                subject=claims.get("sub"),
                role=role,
            )
            raise StoreAccessDenied(match.group(1), role)
