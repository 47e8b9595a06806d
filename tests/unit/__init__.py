"""
Unit tests for Exam Package Ingestion.

Test individual components in isolation:
- Contract models and generated JSON Schema
- Validation stages (each stage with positive/negative cases)
- Transformer (row mapping, determinism)
- Store and inserter (write policy, atomicity, conflicts)
- Ingestion service and API dependencies
"""
