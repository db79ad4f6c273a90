"""
Test Suite

Structure:
- tests/unit/: Tests for individual components (signing, params, schemas, config)
  and end-to-end client tests against an in-process mock VALR server (conftest.py)

Uses pytest with pytest-asyncio for testing async functionality.
"""
