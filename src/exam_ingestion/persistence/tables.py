"""
Relational schema for exam content (SQLAlchemy Core).

Five relations, written in this order by the inserter:

    exam_packages
      -> exam_media_assets      (exam_package_id)
      -> exam_questions         (exam_package_id, unique sequence_number per package)
           -> exam_question_options  (question_id, unique option_id per question)
           -> exam_correct_answers   (question_id, one per question)

Deleting a package cascades to everything below it.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB

metadata = MetaData()

# JSONB on PostgreSQL, JSON text elsewhere (SQLite in tests)
JSONDocument = JSON().with_variant(JSONB(), "postgresql")

ID_LENGTH = 36

exam_packages = Table(
    "exam_packages",
    metadata,
    Column("id", String(ID_LENGTH), primary_key=True),
    Column("title", String(200), nullable=False),
    Column("year_level", Integer, nullable=False),
    Column("subject", String(40), nullable=False),
    Column("assessment_type", String(20), nullable=False),
    Column("duration_minutes", Integer, nullable=False),
    Column("total_marks", Integer, nullable=False),
    Column("version", String(40), nullable=False),
    Column("schema_version", String(20), nullable=False),
    Column("status", String(20), nullable=False),
    Column("instructions", JSONDocument, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

exam_media_assets = Table(
    "exam_media_assets",
    metadata,
    Column("id", String(ID_LENGTH), primary_key=True),
    Column(
        "exam_package_id",
        String(ID_LENGTH),
        ForeignKey("exam_packages.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("type", String(20), nullable=False),
    Column("filename", String(200), nullable=False),
    Column("mime_type", String(40), nullable=False),
    Column("width", Integer),
    Column("height", Integer),
    Column("size_bytes", Integer),
)

exam_questions = Table(
    "exam_questions",
    metadata,
    Column("id", String(ID_LENGTH), primary_key=True),
    Column(
        "exam_package_id",
        String(ID_LENGTH),
        ForeignKey("exam_packages.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("sequence_number", Integer, nullable=False),
    Column("difficulty", String(20), nullable=False),
    Column("response_type", String(20), nullable=False),
    Column("marks", Integer, nullable=False),
    Column("prompt_blocks", JSONDocument, nullable=False),
    Column("media_references", JSONDocument, nullable=False),
    Column("tags", JSONDocument, nullable=False),
    Column("hint", Text),
    UniqueConstraint("exam_package_id", "sequence_number", name="uq_exam_questions_sequence"),
)

exam_question_options = Table(
    "exam_question_options",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "question_id",
        String(ID_LENGTH),
        ForeignKey("exam_questions.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("option_id", String(1), nullable=False),
    Column("content", Text, nullable=False),
    Column("media_reference", JSONDocument),
    UniqueConstraint("question_id", "option_id", name="uq_exam_question_options_option"),
)

exam_correct_answers = Table(
    "exam_correct_answers",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "question_id",
        String(ID_LENGTH),
        ForeignKey("exam_questions.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    ),
    Column("answer_type", String(20), nullable=False),
    Column("correct_option_id", String(1)),
    Column("accepted_answers", JSONDocument),
    Column("case_sensitive", Boolean),
    Column("exact_value", Float),
    Column("range_min", Float),
    Column("range_max", Float),
    Column("tolerance", Float),
    Column("unit", String(20)),
    Column("rubric", JSONDocument),
    Column("sample_response", Text),
)

EXAM_TABLES: tuple[Table, ...] = (
    exam_packages,
    exam_media_assets,
    exam_questions,
    exam_question_options,
    exam_correct_answers,
)
"""All exam content tables, in insert (foreign key dependency) order."""

CLAIMS_SETTING = "request.jwt.claims"


def row_security_statements(table_name: str, admin_role: str = "admin") -> list[str]:
    """
    PostgreSQL DDL for the admin-only write policy on one exam table.

    Row-level security is forced so the owning role is subject to it too.
    Everyone may read; only a transaction whose `request.jwt.claims` carry
    `admin_role` may insert. Re-running the statements is safe.
    """
    role_literal = admin_role.replace("'", "''")
    read_policy = f"{table_name}_read"
    insert_policy = f"{table_name}_admin_insert"
    return [
        f"ALTER TABLE {table_name} ENABLE ROW LEVEL SECURITY",
        f"ALTER TABLE {table_name} FORCE ROW LEVEL SECURITY",
        f"DROP POLICY IF EXISTS {read_policy} ON {table_name}",
        f"CREATE POLICY {read_policy} ON {table_name} FOR SELECT USING (true)",
        f"DROP POLICY IF EXISTS {insert_policy} ON {table_name}",
        (
            f"CREATE POLICY {insert_policy} ON {table_name} FOR INSERT WITH CHECK ("
            f"coalesce(nullif(current_setting('{CLAIMS_SETTING}', true), '')::jsonb ->> 'role', '')"
            f" = '{role_literal}')"
        ),
    ]
