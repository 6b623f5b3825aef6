"""Dependency injection providers for the FastAPI application.

This module defines the session registry shared by route handlers. Each
registered session runs on its own SimulationWorker thread; the registry only
creates, looks up and tears down workers, it never touches session state.
"""

import logging
import threading
from typing import Annotated, Optional

from fastapi import Depends

from api.exceptions import SessionNotFoundError
from models.session import SimulationSession
from models.worker import ResultCallback, SimulationWorker

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Thread-safe map of session id -> running SimulationWorker."""

    def __init__(self) -> None:
        self._workers: dict[str, SimulationWorker] = {}
        self._lock = threading.Lock()

    def create(self, on_result: Optional[ResultCallback] = None) -> SimulationWorker:
        """Create, start and register a worker hosting a fresh session."""
        worker = SimulationWorker(session=SimulationSession(), on_result=on_result)
        worker.start()
        with self._lock:
            self._workers[worker.session_id] = worker
        return worker

    def get(self, session_id: str) -> SimulationWorker:
        """Look up a worker by session id.

        Raises:
            SessionNotFoundError: If no such session is registered.
        """
        with self._lock:
            worker = self._workers.get(session_id)
            available = list(self._workers)
        if worker is None:
            raise SessionNotFoundError(session_id, available)
        return worker

    def remove(self, session_id: str) -> None:
        """Stop and forget a session.

        Raises:
            SessionNotFoundError: If no such session is registered.
        """
        with self._lock:
            worker = self._workers.pop(session_id, None)
            available = list(self._workers)
        if worker is None:
            raise SessionNotFoundError(session_id, available)
        worker.stop()

    def session_ids(self) -> list[str]:
        with self._lock:
            return list(self._workers)

    def shutdown(self) -> None:
        """Stop every registered worker."""
        with self._lock:
            workers = list(self._workers.values())
            self._workers.clear()
        for worker in workers:
            worker.stop()
        logger.info(f"Session registry shut down {len(workers)} workers")


# Global registry, created when the app starts
_session_registry: SessionRegistry | None = None


def get_session_registry() -> SessionRegistry:
    """Get the shared SessionRegistry instance.

    This function is a FastAPI dependency. Route handlers receive the
    registry by declaring a ``SessionRegistryDep`` parameter.

    Returns:
        The shared SessionRegistry instance.

    Raises:
        RuntimeError: If the registry hasn't been initialized yet.
    """
    if _session_registry is None:
        raise RuntimeError(
            "SessionRegistry not initialized. Call initialize_session_registry() first."
        )
    return _session_registry


def initialize_session_registry() -> SessionRegistry:
    """Create the shared SessionRegistry. Called once at app startup."""
    global _session_registry
    _session_registry = SessionRegistry()
    return _session_registry


def shutdown_session_registry() -> None:
    """Stop all session workers. Called at app shutdown."""
    global _session_registry
    if _session_registry is not None:
        _session_registry.shutdown()
    _session_registry = None


SessionRegistryDep = Annotated[SessionRegistry, Depends(get_session_registry)]
