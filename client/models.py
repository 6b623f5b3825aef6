"""Wire models for the simulator API client.

The client never imports the server's core: everything it sends or reads is
described here in wire form. Request-side models (GraphModel, RunConfig,
BreakpointSpec) do not validate beyond types. The server validates models
on ``POST /sessions`` and answers bad messages on the channel with
``error`` results.

Any pydantic model can be passed where a request model is expected. It is
serialized by alias, so the server's own ``CausalModel`` or ``SimConfig``
work as well.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

__all__ = [
    # Request-side wire models
    "GraphNode",
    "GraphEdge",
    "GraphModel",
    "RunConfig",
    "BreakpointSpec",
    # Response models
    "HealthResponse",
    "CreateSessionResponse",
    "SessionStatusResponse",
    "PostMessageResponse",
    "ResultsResponse",
    "DeleteSessionResponse",
    # Helpers
    "to_wire",
]


def to_wire(value: Any) -> Any:
    """Serialize a pydantic model to its JSON wire form; pass anything else through."""
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json", exclude_none=True)
    return value


# Request-side wire models


class GraphNode(BaseModel):
    """A node as it travels over the wire.

    Attributes:
        id: Stable node id.
        label: Display label.
        value: Initial value.
        min: Inclusive lower bound, if any.
        max: Inclusive upper bound, if any.
        kind: "regular" or "event".
        event: Event schedule (``eventType``, ``interval``, ``intervalMin``,
            ``intervalMax``) for event nodes.
    """

    id: str
    label: str = ""
    value: float = 0.0
    min: float | None = None
    max: float | None = None
    kind: Literal["regular", "event"] = "regular"
    event: dict[str, Any] | None = None


class GraphEdge(BaseModel):
    """A directed, weighted, signed edge."""

    id: str
    from_: str = Field(alias="from")
    to: str
    weight: float = 1.0
    polarity: Literal["+", "-"] = "+"

    class Config:
        populate_by_name = True


class GraphModel(BaseModel):
    """A whole causal model document (what ``GET /models/seed`` returns)."""

    version: int = 1
    meta: dict[str, Any] | None = None
    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)


class RunConfig(BaseModel):
    """Run configuration sent with ``init``.

    Attributes:
        dt: Integration step size.
        steps: Step budget for automatic stepping.
        interval_ms: Milliseconds between automatic steps.
    """

    dt: float = 0.1
    steps: int = 1000
    interval_ms: float = Field(default=50, alias="intervalMs")

    class Config:
        populate_by_name = True


class BreakpointSpec(BaseModel):
    """A breakpoint to register with ``updateBreakpoints``.

    ``condition`` is sent as given; the server accepts the symbols
    ``=``, ``>``, ``<``, ``>=``, ``<=`` and the names ``eq``, ``gt``, ``lt``,
    ``gte``, ``lte``.
    """

    node_id: str = Field(alias="nodeId")
    condition: str
    threshold: float

    class Config:
        populate_by_name = True


# Response models


class HealthResponse(BaseModel):
    """Response model for ``GET /health``."""

    status: str


class CreateSessionResponse(BaseModel):
    """Response model for session creation.

    Attributes:
        session_id: Identifier of the new session.
        status: Lifecycle state at creation.
        init_posted: Whether an ``init`` message was queued.
    """

    session_id: str
    status: str
    init_posted: bool = False


class SessionStatusResponse(BaseModel):
    """Last status published by a session's worker."""

    session_id: str
    status: str
    step: int | None = None
    timer_active: bool
    interval_ms: float
    breakpoint_count: int
    history_length: int
    worker_running: bool


class PostMessageResponse(BaseModel):
    """Acknowledgement that an inbound message was queued."""

    session_id: str
    accepted: bool = True
    type: str | None = None


class ResultsResponse(BaseModel):
    """Outbound results drained from a session, in wire format."""

    session_id: str
    results: list[dict[str, Any]] = Field(default_factory=list)

    def of_type(self, result_type: str) -> list[dict[str, Any]]:
        """Return the results whose ``type`` tag equals ``result_type``."""
        return [r for r in self.results if r.get("type") == result_type]


class DeleteSessionResponse(BaseModel):
    """Response model for session deletion."""

    session_id: str
    status: str
