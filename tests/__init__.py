"""
Test suite for the attribute schema and mapping engine.

Run all tests: pytest
Run with coverage: pytest --cov=. --cov-report=html
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_field_validator.py -v
"""
