"""audio2features test suite.

Test Structure:
    tests/
    ├── conftest.py          # Shared fixtures and stub backends
    ├── unit/                # Stages, parsing, persistence, providers
    └── integration/         # HTTP surface through the FastAPI app

Run all tests:
    pytest

Run one category:
    pytest -m unit
    pytest -m integration
"""
