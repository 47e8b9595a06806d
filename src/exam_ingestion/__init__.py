"""
Exam Package Ingestion.

Accepts authored exam packages (metadata, questions, media manifest) and
commits them to the exam content store:
- Contract: Pydantic models + generated JSON Schema
- Validation: JSON parse, structural, business rules
- Ingestion: relational transform + single-transaction insert

Architecture: FastAPI service + SQLAlchemy Core (PostgreSQL row-level security)
"""

__version__ = "0.1.0"
