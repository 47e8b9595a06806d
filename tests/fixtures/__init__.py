"""
Test fixtures for Exam Package Ingestion.

Contains example exam packages (valid contract documents):
- year2_numeracy.json: mcq, numeric and short questions, two media assets
- year5_maths.json: all four response types, list prompt block
- year9_reading.json: quote block, extended responses, no media
"""
