"""Pytest configuration and shared fixtures."""

# Import all fixtures from the fixture modules
pytest_plugins = [
    "tests.fixtures.core.graphs",
    "tests.fixtures.core.sessions",
    "tests.fixtures.api",
]
