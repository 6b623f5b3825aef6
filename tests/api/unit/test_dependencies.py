"""Unit tests for API dependency injection.

Test Organization:
- SessionRegistry tests - worker creation, lookup, removal, shutdown
- get_session_registry tests - retrieval behavior and error handling
- initialize/shutdown tests - global registry lifecycle
"""

import pytest

import api.dependencies as deps
from api.dependencies import (
    SessionRegistry,
    get_session_registry,
    initialize_session_registry,
    shutdown_session_registry,
)
from api.exceptions import SessionNotFoundError


@pytest.fixture(autouse=True)
def reset_global_registry():
    """Reset the global registry before and after each test."""
    original = deps._session_registry
    deps._session_registry = None
    yield
    if deps._session_registry is not None:
        deps._session_registry.shutdown()
    deps._session_registry = original


class TestSessionRegistry:
    """Tests for SessionRegistry."""

    def test_create_starts_worker(self, fresh_registry):
        worker = fresh_registry.create()
        assert worker.is_running
        assert fresh_registry.get(worker.session_id) is worker

    def test_session_ids(self, fresh_registry):
        first = fresh_registry.create()
        second = fresh_registry.create()
        assert fresh_registry.session_ids() == [first.session_id, second.session_id]

    def test_get_unknown(self, fresh_registry):
        known = fresh_registry.create()
        with pytest.raises(SessionNotFoundError) as exc_info:
            fresh_registry.get("missing")
        assert exc_info.value.session_id == "missing"
        assert exc_info.value.available_sessions == [known.session_id]

    def test_remove_stops_worker(self, fresh_registry):
        worker = fresh_registry.create()
        fresh_registry.remove(worker.session_id)
        assert not worker.is_running
        assert fresh_registry.session_ids() == []

    def test_remove_unknown(self, fresh_registry):
        with pytest.raises(SessionNotFoundError):
            fresh_registry.remove("missing")

    def test_shutdown_stops_all(self):
        registry = SessionRegistry()
        workers = [registry.create() for _ in range(3)]
        registry.shutdown()
        assert registry.session_ids() == []
        assert not any(w.is_running for w in workers)

    def test_create_with_callback(self, fresh_registry):
        received = []
        worker = fresh_registry.create(on_result=received.append)
        assert worker._on_result is not None


class TestGlobalRegistry:
    """Tests for the global registry accessors."""

    def test_get_before_initialize(self):
        with pytest.raises(RuntimeError, match="not initialized"):
            get_session_registry()

    def test_initialize(self):
        registry = initialize_session_registry()
        assert get_session_registry() is registry

    def test_shutdown(self):
        registry = initialize_session_registry()
        worker = registry.create()
        shutdown_session_registry()
        assert not worker.is_running
        with pytest.raises(RuntimeError):
            get_session_registry()

    def test_shutdown_without_registry(self):
        shutdown_session_registry()
