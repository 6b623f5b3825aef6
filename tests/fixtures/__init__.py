"""Test fixtures for the simulator test suite.

- core: graph model factories and session helpers
- api: TestClient and session registry fixtures
"""
