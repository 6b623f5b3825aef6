"""Request and response models for the session endpoints.

REST bodies use snake_case like the rest of the HTTP surface; the message
payloads they carry keep the camelCase wire format of the message protocol.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field

from models.graph import CausalModel
from models.messages import SimConfig


class CreateSessionRequest(BaseModel):
    """Request model for creating a session.

    Attributes:
        model: Model to initialize the session with (optional).
        config: Run configuration used with ``model`` (defaults apply if omitted).
        use_seed: Initialize with the built-in demo model when no model is given.
    """

    model: Optional[CausalModel] = None
    config: Optional[SimConfig] = None
    use_seed: bool = False


class CreateSessionResponse(BaseModel):
    """Response model for session creation.

    Attributes:
        session_id: Identifier of the new session.
        status: Lifecycle state at creation ("uninitialized" until ``init`` runs).
        init_posted: Whether an ``init`` message was queued.
    """

    session_id: str
    status: str
    init_posted: bool = False


class SessionStatusResponse(BaseModel):
    """Response model for session status.

    Attributes:
        session_id: Identifier of the session.
        status: Lifecycle state (uninitialized, idle, running, paused, done).
        step: Current step counter (None before ``init``).
        timer_active: Whether automatic stepping is active.
        interval_ms: Current tick interval.
        breakpoint_count: Number of active breakpoints.
        history_length: Snapshots recorded since the last run or reset.
        worker_running: Whether the hosting worker thread is alive.
    """

    session_id: str
    status: str
    step: Optional[int] = None
    timer_active: bool
    interval_ms: float
    breakpoint_count: int
    history_length: int
    worker_running: bool


class SessionListResponse(BaseModel):
    """Response model for listing sessions."""

    sessions: list[str] = Field(default_factory=list)


class PostMessageResponse(BaseModel):
    """Response model for posting an inbound message.

    Attributes:
        session_id: Session the message was queued for.
        accepted: Always True; validation happens on the session thread and
            failures come back as ``error`` results.
        type: The message's ``type`` tag, if it had one.
    """

    session_id: str
    accepted: bool = True
    type: Optional[str] = None


class ResultsResponse(BaseModel):
    """Response model for draining outbound results."""

    session_id: str
    results: list[dict[str, Any]] = Field(default_factory=list)


class DeleteSessionResponse(BaseModel):
    """Response model for deleting a session."""

    session_id: str
    status: str = "deleted"
