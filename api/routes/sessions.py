"""Simulation session endpoints.

Each session is a SimulationSession hosted on its own worker thread. The
HTTP endpoints post inbound messages and drain outbound results; the
WebSocket endpoint carries the same message channel over one connection.
"""

import asyncio
import contextlib
import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Query, WebSocket, WebSocketDisconnect, status

from api.dependencies import SessionRegistryDep
from api.exceptions import SessionNotFoundError
from api.models import (
    CreateSessionRequest,
    CreateSessionResponse,
    DeleteSessionResponse,
    PostMessageResponse,
    ResultsResponse,
    SessionListResponse,
    SessionStatusResponse,
)
from models.graph import seed_model
from models.messages import InitMessage, SimConfig

logger = logging.getLogger(__name__)

# Create router for session endpoints
router = APIRouter(
    prefix="/sessions",
    tags=["sessions"],
)


@router.post("", response_model=CreateSessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    registry: SessionRegistryDep,
    request: Optional[CreateSessionRequest] = None,
):
    """Create a session and start its worker.

    If the request carries a model (or asks for the demo model) an ``init``
    message is queued immediately; its ``ready`` result arrives on the
    results channel.

    Args:
        registry: The session registry (injected by FastAPI).
        request: Optional model and configuration.

    Returns:
        The new session's id and initial status.
    """
    request = request or CreateSessionRequest()
    worker = registry.create()

    model = request.model
    if model is None and request.use_seed:
        model = seed_model()

    if model is not None:
        worker.post(InitMessage(model=model, config=request.config or SimConfig()))

    logger.info(f"Created session {worker.session_id} (init posted: {model is not None})")
    return CreateSessionResponse(
        session_id=worker.session_id,
        status=worker.status()["status"],
        init_posted=model is not None,
    )


@router.get("", response_model=SessionListResponse)
async def list_sessions(registry: SessionRegistryDep):
    """List the ids of all registered sessions."""
    return SessionListResponse(sessions=registry.session_ids())


@router.get("/{session_id}", response_model=SessionStatusResponse)
async def get_session_status(session_id: str, registry: SessionRegistryDep):
    """Get the last published status of a session.

    Args:
        session_id: The session to query.
        registry: The session registry (injected by FastAPI).

    Returns:
        Lifecycle state, step counter and timer details.
    """
    worker = registry.get(session_id)
    return SessionStatusResponse(**worker.status(), worker_running=worker.is_running)


@router.post(
    "/{session_id}/messages",
    response_model=PostMessageResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def post_message(
    session_id: str,
    registry: SessionRegistryDep,
    payload: Any = Body(...),
):
    """Queue one inbound message for a session.

    The payload is validated on the session thread, so a malformed message is
    still accepted here and answered with an ``error`` result.

    Args:
        session_id: Target session.
        registry: The session registry (injected by FastAPI).
        payload: The raw message, e.g. ``{"type": "step"}``.
    """
    worker = registry.get(session_id)
    worker.post(payload)
    message_type = payload.get("type") if isinstance(payload, dict) else None
    return PostMessageResponse(session_id=session_id, type=message_type)


@router.get("/{session_id}/results", response_model=ResultsResponse)
def get_results(
    session_id: str,
    registry: SessionRegistryDep,
    max_results: Optional[int] = Query(default=None, ge=1),
    timeout: float = Query(default=0.0, ge=0.0, le=30.0),
):
    """Drain outbound results for a session.

    Declared as a plain function so FastAPI runs the blocking wait in its
    thread pool.

    Args:
        session_id: Target session.
        registry: The session registry (injected by FastAPI).
        max_results: Maximum number of results to return.
        timeout: Seconds to wait for the first result.
    """
    worker = registry.get(session_id)
    return ResultsResponse(
        session_id=session_id,
        results=worker.collect(max_results=max_results, timeout=timeout),
    )


@router.delete("/{session_id}", response_model=DeleteSessionResponse)
async def delete_session(session_id: str, registry: SessionRegistryDep):
    """Stop a session's worker and forget the session."""
    await asyncio.to_thread(registry.remove, session_id)
    logger.info(f"Deleted session {session_id}")
    return DeleteSessionResponse(session_id=session_id)


@router.websocket("/connect")
async def session_channel(websocket: WebSocket, registry: SessionRegistryDep):
    """Bidirectional message channel bound to a fresh session.

    Every text frame received is one inbound message; every outbound result
    is sent back as a JSON text frame. The session is torn down when the
    connection closes.
    """
    await websocket.accept()
    loop = asyncio.get_running_loop()
    outbound: asyncio.Queue = asyncio.Queue()

    def forward(result) -> None:
        loop.call_soon_threadsafe(outbound.put_nowait, result.to_wire())

    worker = registry.create(on_result=forward)
    session_id = worker.session_id
    logger.info(f"WebSocket channel opened for session {session_id}")

    async def receive_messages() -> None:
        while True:
            text = await websocket.receive_text()
            try:
                payload = json.loads(text)
            except json.JSONDecodeError:
                # The session answers non-objects with an error result
                payload = text
            worker.post(payload)

    async def send_results() -> None:
        while True:
            await websocket.send_json(await outbound.get())

    receiver = asyncio.create_task(receive_messages())
    sender = asyncio.create_task(send_results())
    tasks = (receiver, sender)
    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            error = task.exception()
            if error is None or isinstance(error, WebSocketDisconnect):
                logger.info(f"WebSocket channel closed for session {session_id}")
            else:
                logger.warning(f"WebSocket channel for session {session_id} failed: {error!r}")
    finally:
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await task
        with contextlib.suppress(SessionNotFoundError):
            await asyncio.to_thread(registry.remove, session_id)
