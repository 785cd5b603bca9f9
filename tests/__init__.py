#!/usr/bin/env python3
"""
Test suite for the job board backend.

All tests run against in-memory SQLite; no external services are needed:

    # Run all tests
    python -m pytest tests/ -v

    # Only pure unit tests (no database session)
    python -m pytest tests/ -v -m "not db"

    # Only HTTP-level tests
    python -m pytest tests/ -v -m "api"

    # Using unittest for the TestCase-based modules
    python -m unittest discover tests -v
"""
