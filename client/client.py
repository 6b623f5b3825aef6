"""Top-level clients for the simulator REST API.

This is an internal module. Import from `client` instead.
"""

from typing import Any

from client._http import AsyncHTTPClient, HTTPClient
from client._sessions import AsyncSessionsClient, SessionsClient
from client.models import GraphModel, HealthResponse


class SimulatorClient:
    """Synchronous client for the simulator REST API.

    Attributes:
        base_url: The base URL of the simulator server.
        timeout: Request timeout in seconds.
        retry_enabled: Whether automatic retry is enabled.
        max_retries: Maximum number of retry attempts.

    Example:
        Drive the demo model step by step::

            with SimulatorClient(base_url="http://localhost:8000") as client:
                session = client.sessions.create(use_seed=True)
                sid = session.session_id
                client.sessions.wait_for(sid, "ready")

                client.sessions.update_breakpoints(
                    sid, [{"nodeId": "C", "condition": ">=", "threshold": 6}]
                )
                client.sessions.step(sid)
                print(client.sessions.results(sid, timeout=1.0).results)
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 30.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: Any = None,
    ) -> None:
        """Initialize the simulator client.

        Args:
            base_url: The base URL of the simulator server.
            timeout: Request timeout in seconds (default: 30.0).
            retry_enabled: Retry on connection errors, timeouts and HTTP
                502/503/504 with exponential backoff (default: False).
            max_retries: Maximum number of retry attempts when retry is enabled.
            transport: Custom HTTP transport (e.g., ASGITransport for testing).
        """
        self.base_url = base_url
        self.timeout = timeout
        self.retry_enabled = retry_enabled
        self.max_retries = max_retries

        self._http = HTTPClient(
            base_url=base_url,
            timeout=timeout,
            retry_enabled=retry_enabled,
            max_retries=max_retries,
            transport=transport,
        )
        self._sessions: SessionsClient | None = None

    def __enter__(self) -> "SimulatorClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the client and release resources."""
        self._http.close()

    @property
    def sessions(self) -> SessionsClient:
        """Session lifecycle and message channel operations."""
        if self._sessions is None:
            self._sessions = SessionsClient(self._http)
        return self._sessions

    def health(self) -> bool:
        """Check whether the server reports itself healthy.

        Returns:
            True if ``GET /health`` answers with status "healthy".

        Raises:
            ConnectionError: If the server cannot be reached.
        """
        return HealthResponse(**self._http.get("/health")).status == "healthy"

    def seed_model(self) -> GraphModel:
        """Fetch the server's built-in demo model.

        Returns:
            The three-node Input -> Buffer -> Output model, ready to pass to
            ``sessions.create`` or ``sessions.init``.
        """
        return GraphModel.model_validate(self._http.get("/models/seed"))


class AsyncSimulatorClient:
    """Asynchronous client for the simulator REST API.

    Example:
        async with AsyncSimulatorClient() as client:
            session = await client.sessions.create(use_seed=True)
            await client.sessions.run(session.session_id)
            await client.sessions.wait_for(session.session_id, "done", timeout=60.0)
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 30.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: Any = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self.retry_enabled = retry_enabled
        self.max_retries = max_retries

        self._http = AsyncHTTPClient(
            base_url=base_url,
            timeout=timeout,
            retry_enabled=retry_enabled,
            max_retries=max_retries,
            transport=transport,
        )
        self._sessions: AsyncSessionsClient | None = None

    async def __aenter__(self) -> "AsyncSimulatorClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the client and release resources."""
        await self._http.close()

    @property
    def sessions(self) -> AsyncSessionsClient:
        """Session lifecycle and message channel operations."""
        if self._sessions is None:
            self._sessions = AsyncSessionsClient(self._http)
        return self._sessions

    async def health(self) -> bool:
        return HealthResponse(**await self._http.get("/health")).status == "healthy"

    async def seed_model(self) -> GraphModel:
        """Fetch the server's built-in demo model."""
        return GraphModel.model_validate(await self._http.get("/models/seed"))
