"""Monitoring and metrics instrumentation for the Exam Package Ingestion service.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from exam_ingestion.monitoring.metrics import (
    ingestion_rows_total,
    ingestions_total,
    insert_latency_seconds,
    validation_failures_total,
)

__all__ = [
    "validation_failures_total",
    "ingestions_total",
    "ingestion_rows_total",
    "insert_latency_seconds",
]
