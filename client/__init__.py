"""Causal Graph Simulator API Client Library.

Type-safe Python client for the simulator's REST API, in synchronous and
asynchronous flavors.

Example:
    Synchronous usage::

        from client import SimulatorClient

        with SimulatorClient(base_url="http://localhost:8000") as client:
            session = client.sessions.create(use_seed=True, config={"steps": 20})
            client.sessions.run(session.session_id)
            results = client.sessions.wait_for(session.session_id, "done")

    Asynchronous usage::

        from client import AsyncSimulatorClient

        async with AsyncSimulatorClient() as client:
            session = await client.sessions.create(use_seed=True)
            await client.sessions.step(session.session_id)

Exports:
    SimulatorClient: Synchronous client.
    AsyncSimulatorClient: Asynchronous client.

    Exceptions:
        SimulatorClientError: Base exception for all client errors.
        ConnectionError: Failed to connect to the server.
        TimeoutError: Request timed out.
        ResultTimeoutError: wait_for saw no matching result in time.
        APIError: Server returned an error response.
        ValidationError: Request validation failed (HTTP 422).
        NotFoundError: Unknown session id (HTTP 404).
        ServerError: Server-side error (HTTP 5xx).
"""

from client._sessions import AsyncSessionsClient, SessionsClient
from client.client import AsyncSimulatorClient, SimulatorClient
from client.exceptions import (
    APIError,
    ConnectionError,
    NotFoundError,
    ResultTimeoutError,
    ServerError,
    SimulatorClientError,
    TimeoutError,
    ValidationError,
)
from client.models import (
    BreakpointSpec,
    CreateSessionResponse,
    DeleteSessionResponse,
    GraphEdge,
    GraphModel,
    GraphNode,
    PostMessageResponse,
    ResultsResponse,
    RunConfig,
    SessionStatusResponse,
)

__all__ = [
    # Main clients
    "SimulatorClient",
    "AsyncSimulatorClient",
    # Sub-clients
    "SessionsClient",
    "AsyncSessionsClient",
    # Wire models
    "GraphModel",
    "GraphNode",
    "GraphEdge",
    "RunConfig",
    "BreakpointSpec",
    # Response models
    "CreateSessionResponse",
    "SessionStatusResponse",
    "PostMessageResponse",
    "ResultsResponse",
    "DeleteSessionResponse",
    # Exceptions
    "SimulatorClientError",
    "ConnectionError",
    "TimeoutError",
    "ResultTimeoutError",
    "APIError",
    "ValidationError",
    "NotFoundError",
    "ServerError",
]
