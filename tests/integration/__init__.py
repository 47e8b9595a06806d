"""
Integration tests for Exam Package Ingestion.

Test components together through the HTTP API:
- API endpoints (FastAPI TestClient, marked with @pytest.mark.integration)
- Full ingestion (body -> validation -> transform -> SQLite transaction)
"""
