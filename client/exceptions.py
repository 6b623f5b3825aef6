"""Errors raised by the simulator client.

Exception Hierarchy:
    SimulatorClientError
    ├── ConnectionError - the server could not be reached
    ├── TimeoutError - an HTTP request exceeded the client timeout
    │   └── ResultTimeoutError - ``wait_for`` saw no matching result in time
    └── APIError - the server answered with an error status
        ├── ValidationError (HTTP 422) - rejected model, config or query
        ├── NotFoundError (HTTP 404) - unknown session id
        └── ServerError (HTTP 5xx)

A simulation that breaches a bound, hits a breakpoint or rejects a control
message does not raise here. Those outcomes are ``paused``,
``breakpointHit`` and ``error`` results on the session's message channel.

Example:
    Recovering from an expired session::

        try:
            client.sessions.status(session_id)
        except NotFoundError as e:
            print(f"{e.session_id} is gone; live sessions: {e.available_sessions}")
"""

from typing import Any

# Statuses that signal a temporary outage; retried when retry is enabled.
RETRYABLE_STATUS_CODES = frozenset({502, 503, 504})


class SimulatorClientError(Exception):
    """Root of every error the client raises.

    Attributes:
        message: Human-readable description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class ConnectionError(SimulatorClientError):
    """The simulator server could not be reached.

    Attributes:
        url: Full URL of the request that failed.
        cause: The transport exception raised by httpx.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.url = url
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.message} (url: {self.url})" if self.url else self.message


class TimeoutError(SimulatorClientError):
    """A request to the simulator took longer than the client timeout.

    Attributes:
        timeout: The timeout that was exceeded, in seconds.
        url: Full URL of the request, when known.
    """

    def __init__(
        self,
        message: str,
        timeout: float | None = None,
        url: str | None = None,
    ) -> None:
        self.timeout = timeout
        self.url = url
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.timeout is not None:
            parts.append(f"timeout: {self.timeout}s")
        if self.url:
            parts.append(f"url: {self.url}")
        if len(parts) == 1:
            return self.message
        return f"{parts[0]} ({', '.join(parts[1:])})"


class ResultTimeoutError(TimeoutError):
    """No result of the awaited type arrived on a session's channel in time.

    The results drained while waiting are kept on the exception, so a caller
    can see what the session did instead (for example a ``paused`` result
    when waiting for ``done``).

    Attributes:
        session_id: Session whose channel was polled.
        result_type: Result type that was awaited.
        received: Every result drained while waiting, in arrival order.
    """

    def __init__(
        self,
        session_id: str,
        result_type: str,
        timeout: float,
        received: list[dict[str, Any]] | None = None,
    ) -> None:
        self.session_id = session_id
        self.result_type = result_type
        self.received = received or []
        super().__init__(
            f"No '{result_type}' result from session {session_id}",
            timeout=timeout,
        )

    @property
    def received_types(self) -> list[str]:
        """Type tags of the drained results, in arrival order."""
        return [r.get("type", "?") for r in self.received]

    def __str__(self) -> str:
        base = super().__str__()
        if not self.received:
            return f"{base}; nothing received"
        return f"{base}; received {', '.join(self.received_types)}"


class APIError(SimulatorClientError):
    """The simulator answered with a 4xx or 5xx status.

    Attributes:
        status_code: HTTP status of the response.
        error_type: Short error category from the body, when present.
        details: Structured error body, when the server sent one.
        response_body: The decoded body (JSON or text), kept for debugging.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        error_type: str | None = None,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.details = details
        self.response_body = response_body
        super().__init__(message)

    def __str__(self) -> str:
        label = f"[HTTP {self.status_code}]"
        if self.error_type:
            label = f"{label} [{self.error_type}]"
        return f"{label} {self.message}"


class ValidationError(APIError):
    """The server rejected a model, run config or query parameter (HTTP 422).

    Covers both FastAPI's request validation (``detail`` is a list of field
    errors) and the app's own handler (``validation_errors``).

    Attributes:
        errors: Field error entries, each with ``loc`` and ``msg``.
    """

    def __init__(
        self,
        message: str,
        errors: list[dict[str, Any]] | None = None,
        response_body: Any = None,
    ) -> None:
        self.errors = errors or []
        super().__init__(
            message=message,
            status_code=422,
            error_type="validation_error",
            details={"errors": self.errors},
            response_body=response_body,
        )

    @property
    def fields(self) -> list[str]:
        """Dotted paths of the rejected fields, without the request section.

        ``["body", "config", "intervalMs"]`` becomes ``"config.intervalMs"``.
        """
        paths = []
        for error in self.errors:
            loc = [str(part) for part in error.get("loc", [])]
            if loc and loc[0] in ("body", "query", "path"):
                loc = loc[1:]
            paths.append(".".join(loc))
        return paths


class NotFoundError(APIError):
    """The session id is not registered on the server (HTTP 404).

    Attributes:
        session_id: The id that was requested.
        available_sessions: Ids the server does know about.
    """

    def __init__(
        self,
        message: str,
        session_id: str | None = None,
        available_sessions: list[str] | None = None,
        response_body: Any = None,
    ) -> None:
        self.session_id = session_id
        self.available_sessions = available_sessions or []
        super().__init__(
            message=message,
            status_code=404,
            error_type="session_not_found",
            details={
                "requested_session": session_id,
                "available_sessions": self.available_sessions,
            },
            response_body=response_body,
        )


class ServerError(APIError):
    """The server failed while handling the request (HTTP 5xx)."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_type: str | None = None,
        response_body: Any = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status_code,
            error_type=error_type or "server_error",
            details=response_body if isinstance(response_body, dict) else None,
            response_body=response_body,
        )

    @property
    def retryable(self) -> bool:
        """Whether the status signals a transient outage (502, 503 or 504)."""
        return self.status_code in RETRYABLE_STATUS_CODES
