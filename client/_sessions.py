"""Session sub-client for the simulator API.

This module provides SessionsClient and AsyncSessionsClient for the session
endpoints (/sessions/*). Besides the raw endpoints, both clients offer one
helper per inbound message type (init, run, step, ...) that builds the
camelCase wire message and posts it to the session's channel.

Both clients share the HTTP client owned by the top-level SimulatorClient;
they hold no connection state of their own.

This is an internal module. Import from `client` instead.
"""

import asyncio
import time
from typing import TYPE_CHECKING, Any, Iterable

from pydantic import BaseModel

from client.exceptions import ResultTimeoutError
from client.models import (
    CreateSessionResponse,
    DeleteSessionResponse,
    PostMessageResponse,
    ResultsResponse,
    SessionStatusResponse,
    to_wire,
)

if TYPE_CHECKING:
    from client._http import AsyncHTTPClient, HTTPClient

_BASE_PATH = "/sessions"

WireModel = BaseModel | dict[str, Any]


def _session_path(session_id: str, suffix: str = "") -> str:
    return f"{_BASE_PATH}/{session_id}{suffix}"


def _create_body(
    model: WireModel | None,
    config: WireModel | None,
    use_seed: bool,
) -> dict[str, Any]:
    body: dict[str, Any] = {"use_seed": use_seed}
    if model is not None:
        body["model"] = to_wire(model)
    if config is not None:
        body["config"] = to_wire(config)
    return body


def _message(message_type: str, **fields: Any) -> dict[str, Any]:
    """Build a wire message, dropping fields left as None."""
    message = {"type": message_type}
    message.update({k: to_wire(v) for k, v in fields.items() if v is not None})
    return message


def _breakpoints_message(breakpoints: Iterable[WireModel]) -> dict[str, Any]:
    return _message("updateBreakpoints", breakpoints=[to_wire(bp) for bp in breakpoints])


class SessionsClient:
    """Synchronous client for the session endpoints (/sessions/*).

    Example:
        with SimulatorClient() as client:
            session = client.sessions.create(use_seed=True)
            client.sessions.run(session.session_id)
            results = client.sessions.wait_for(session.session_id, "done")
    """

    def __init__(self, http_client: "HTTPClient") -> None:
        self._http = http_client

    # Endpoints

    def create(
        self,
        model: WireModel | None = None,
        config: WireModel | None = None,
        use_seed: bool = False,
    ) -> CreateSessionResponse:
        """Create a session, optionally initializing it right away.

        Args:
            model: Model to initialize the session with (GraphModel, the
                server's CausalModel, or a wire dict).
            config: Run configuration used with ``model``.
            use_seed: Initialize with the demo model when ``model`` is None.

        Returns:
            The new session's id and status.

        Raises:
            ValidationError: If the model or config is invalid.
        """
        data = self._http.post(
            _BASE_PATH, json=_create_body(model, config, use_seed), params=None
        )
        return CreateSessionResponse(**data)

    def list_sessions(self) -> list[str]:
        """List the ids of all sessions on the server.

        Returns:
            Session ids in registration order.
        """
        data = self._http.get(_BASE_PATH, params=None)
        return data["sessions"]

    def status(self, session_id: str) -> SessionStatusResponse:
        """Get a session's last published status.

        Args:
            session_id: Session to inspect.

        Returns:
            Lifecycle state, step, timer and history counters.

        Raises:
            NotFoundError: If the session doesn't exist.
        """
        data = self._http.get(_session_path(session_id), params=None)
        return SessionStatusResponse(**data)

    def post_message(self, session_id: str, message: WireModel) -> PostMessageResponse:
        """Queue one inbound message on the session's channel.

        Malformed messages are still accepted; the session answers them with
        an ``error`` result.

        Args:
            session_id: Target session.
            message: A pydantic message model or a raw wire dict.

        Returns:
            Acknowledgement carrying the message type.

        Raises:
            NotFoundError: If the session doesn't exist.
        """
        data = self._http.post(
            _session_path(session_id, "/messages"), json=to_wire(message), params=None
        )
        return PostMessageResponse(**data)

    def results(
        self,
        session_id: str,
        max_results: int | None = None,
        timeout: float = 0.0,
    ) -> ResultsResponse:
        """Drain outbound results, waiting up to ``timeout`` seconds for the first.

        Args:
            session_id: Session to drain.
            max_results: Upper bound on results returned (all if None).
            timeout: Seconds the server waits when nothing is pending.

        Returns:
            The drained results, oldest first.

        Raises:
            NotFoundError: If the session doesn't exist.
        """
        data = self._http.get(
            _session_path(session_id, "/results"),
            params={"max_results": max_results, "timeout": timeout},
        )
        return ResultsResponse(**data)

    def delete(self, session_id: str) -> DeleteSessionResponse:
        """Stop a session's worker and remove it.

        Raises:
            NotFoundError: If the session doesn't exist.
        """
        data = self._http.delete(_session_path(session_id), params=None)
        return DeleteSessionResponse(**data)

    def wait_for(
        self,
        session_id: str,
        result_type: str,
        timeout: float = 5.0,
        poll_interval: float = 0.5,
    ) -> list[dict[str, Any]]:
        """Collect results until one of ``result_type`` arrives.

        Args:
            session_id: Session to poll.
            result_type: Result type to wait for, e.g. "done" or "paused".
            timeout: Total seconds to wait.
            poll_interval: Longest single long-poll on the results endpoint.

        Returns:
            Every result collected, up to and including the batch that held
            the first match.

        Raises:
            ResultTimeoutError: If no matching result arrives within
                ``timeout``. Carries the results drained meanwhile.
        """
        collected: list[dict[str, Any]] = []
        deadline = time.monotonic() + timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise ResultTimeoutError(session_id, result_type, timeout, collected)
            response = self.results(session_id, timeout=min(poll_interval, remaining))
            collected.extend(response.results)
            if response.of_type(result_type):
                return collected

    # Message helpers

    def init(
        self,
        session_id: str,
        model: WireModel,
        config: WireModel | None = None,
    ) -> PostMessageResponse:
        """Send ``init``; the session answers with ``ready``.

        Args:
            session_id: Target session.
            model: Model to compile.
            config: Run configuration; the server defaults apply when omitted.
        """
        return self.post_message(session_id, _message("init", model=model, config=config))

    def run(self, session_id: str) -> PostMessageResponse:
        return self.post_message(session_id, _message("run"))

    def pause(self, session_id: str) -> PostMessageResponse:
        return self.post_message(session_id, _message("pause"))

    def resume(self, session_id: str) -> PostMessageResponse:
        return self.post_message(session_id, _message("resume"))

    def reset(self, session_id: str) -> PostMessageResponse:
        return self.post_message(session_id, _message("reset"))

    def stop(self, session_id: str) -> PostMessageResponse:
        return self.post_message(session_id, _message("stop"))

    def step(self, session_id: str) -> PostMessageResponse:
        return self.post_message(session_id, _message("step"))

    def set_speed(self, session_id: str, interval_ms: float) -> PostMessageResponse:
        """Change the automatic step interval; applies from the next tick."""
        return self.post_message(session_id, _message("setSpeed", intervalMs=interval_ms))

    def update_breakpoints(
        self, session_id: str, breakpoints: Iterable[WireModel]
    ) -> PostMessageResponse:
        """Replace the session's breakpoint set.

        Args:
            session_id: Target session.
            breakpoints: BreakpointSpec models or wire dicts, in evaluation order.
        """
        return self.post_message(session_id, _breakpoints_message(breakpoints))


class AsyncSessionsClient:
    """Asynchronous client for the session endpoints (/sessions/*).

    Mirrors SessionsClient method for method.

    Example:
        async with AsyncSimulatorClient() as client:
            session = await client.sessions.create(use_seed=True)
            await client.sessions.step(session.session_id)
    """

    def __init__(self, http_client: "AsyncHTTPClient") -> None:
        self._http = http_client

    # Endpoints

    async def create(
        self,
        model: WireModel | None = None,
        config: WireModel | None = None,
        use_seed: bool = False,
    ) -> CreateSessionResponse:
        """Create a session, optionally initializing it right away.

        Raises:
            ValidationError: If the model or config is invalid.
        """
        data = await self._http.post(
            _BASE_PATH, json=_create_body(model, config, use_seed), params=None
        )
        return CreateSessionResponse(**data)

    async def list_sessions(self) -> list[str]:
        data = await self._http.get(_BASE_PATH, params=None)
        return data["sessions"]

    async def status(self, session_id: str) -> SessionStatusResponse:
        """Get a session's last published status.

        Raises:
            NotFoundError: If the session doesn't exist.
        """
        data = await self._http.get(_session_path(session_id), params=None)
        return SessionStatusResponse(**data)

    async def post_message(
        self, session_id: str, message: WireModel
    ) -> PostMessageResponse:
        data = await self._http.post(
            _session_path(session_id, "/messages"), json=to_wire(message), params=None
        )
        return PostMessageResponse(**data)

    async def results(
        self,
        session_id: str,
        max_results: int | None = None,
        timeout: float = 0.0,
    ) -> ResultsResponse:
        data = await self._http.get(
            _session_path(session_id, "/results"),
            params={"max_results": max_results, "timeout": timeout},
        )
        return ResultsResponse(**data)

    async def delete(self, session_id: str) -> DeleteSessionResponse:
        data = await self._http.delete(_session_path(session_id), params=None)
        return DeleteSessionResponse(**data)

    async def wait_for(
        self,
        session_id: str,
        result_type: str,
        timeout: float = 5.0,
        poll_interval: float = 0.5,
    ) -> list[dict[str, Any]]:
        """Collect results until one of ``result_type`` arrives.

        Raises:
            ResultTimeoutError: If no matching result arrives within ``timeout``.
        """
        collected: list[dict[str, Any]] = []
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise ResultTimeoutError(session_id, result_type, timeout, collected)
            response = await self.results(session_id, timeout=min(poll_interval, remaining))
            collected.extend(response.results)
            if response.of_type(result_type):
                return collected

    # Message helpers

    async def init(
        self,
        session_id: str,
        model: WireModel,
        config: WireModel | None = None,
    ) -> PostMessageResponse:
        return await self.post_message(
            session_id, _message("init", model=model, config=config)
        )

    async def run(self, session_id: str) -> PostMessageResponse:
        return await self.post_message(session_id, _message("run"))

    async def pause(self, session_id: str) -> PostMessageResponse:
        return await self.post_message(session_id, _message("pause"))

    async def resume(self, session_id: str) -> PostMessageResponse:
        return await self.post_message(session_id, _message("resume"))

    async def reset(self, session_id: str) -> PostMessageResponse:
        return await self.post_message(session_id, _message("reset"))

    async def stop(self, session_id: str) -> PostMessageResponse:
        return await self.post_message(session_id, _message("stop"))

    async def step(self, session_id: str) -> PostMessageResponse:
        return await self.post_message(session_id, _message("step"))

    async def set_speed(self, session_id: str, interval_ms: float) -> PostMessageResponse:
        return await self.post_message(
            session_id, _message("setSpeed", intervalMs=interval_ms)
        )

    async def update_breakpoints(
        self, session_id: str, breakpoints: Iterable[WireModel]
    ) -> PostMessageResponse:
        return await self.post_message(session_id, _breakpoints_message(breakpoints))
