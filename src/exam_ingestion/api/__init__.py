"""
FastAPI API routes and endpoints.

- routes.py: POST /exam-packages, POST /exam-packages/validate, GET /schema, GET /health
- dependencies.py: Dependency injection for engine, store, pipeline, credentials
- models.py: API-specific response models
- error_handlers.py: Exception handlers for structured error responses
- middleware.py: Request id tracing
"""

from exam_ingestion.api import dependencies, error_handlers, models
from exam_ingestion.api.routes import router

__all__ = [
    "router",
    "dependencies",
    "error_handlers",
    "models",
]
