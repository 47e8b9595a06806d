"""Custom Prometheus metrics for the Exam Package Ingestion service.

These metrics are exposed at /metrics endpoint and should be scraped by Prometheus.
Alert rules should be configured for:
- validation_failures_total (authoring tool producing malformed packages)
- ingestions_total{outcome="conflict"} (duplicate submissions)
- ingestions_total{outcome="unauthorized"|"forbidden"} (credential problems)
"""

from prometheus_client import Counter, Histogram

# === Validation Metrics ===

validation_failures_total = Counter(
    "validation_failures_total",
    "Total validation failures by stage and error type",
    ["stage", "error_type"],
)
"""
Validation failures counter by stage and error type.

Labels:
- stage: stage1 (JSON parse), stage2 (structural), stage3 (business rules)
- error_type: json_decode_error, missing, extra_forbidden, total_marks_match, etc.
"""

# === Ingestion Metrics ===

ingestions_total = Counter(
    "ingestions_total",
    "Total ingestion attempts by outcome",
    ["outcome"],
)
"""
Ingestion attempts counter.

Labels:
- outcome: committed, rejected (validation), unauthorized, forbidden,
  conflict, failed
"""

ingestion_rows_total = Counter(
    "ingestion_rows_total",
    "Total rows committed by table",
    ["table"],
)
"""
Rows committed per relation (exam_packages, exam_questions, ...).
"""

insert_latency_seconds = Histogram(
    "insert_latency_seconds",
    "Transactional insert latency in seconds",
    ["success"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)
"""
Latency of one package transaction (begin to commit or rollback).

Labels:
- success: true (committed), false (rolled back)

Alert thresholds:
- WARN: p95 > 1s
"""
