"""Integration tests for the simulator client against the real app.

The synchronous client talks to the app through a transport that wraps
FastAPI's TestClient; the async client uses httpx's ASGITransport. Both see
a fresh SessionRegistry per test via the ``api_client`` fixture.
"""

import httpx
import pytest
from httpx import ASGITransport

from client import AsyncSimulatorClient, NotFoundError, SimulatorClient, ValidationError
from main import app
from tests.fixtures.core.graphs import create_breach_model


class SyncTestTransport(httpx.BaseTransport):
    """Route httpx requests through a Starlette TestClient."""

    def __init__(self, test_client):
        self.test_client = test_client

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        response = self.test_client.request(
            method=request.method,
            url=request.url.path,
            params=dict(request.url.params) if request.url.params else None,
            content=request.read(),
            headers=dict(request.headers),
        )
        return httpx.Response(
            status_code=response.status_code,
            headers=response.headers,
            content=response.content,
        )


@pytest.fixture
def sync_client(api_client):
    test_client, _ = api_client
    with SimulatorClient(
        base_url="http://test", transport=SyncTestTransport(test_client)
    ) as client:
        yield client


@pytest.fixture
async def async_client(api_client):
    async with AsyncSimulatorClient(
        base_url="http://test", transport=ASGITransport(app=app)
    ) as client:
        yield client


class TestSyncClientIntegration:
    """End-to-end tests for SimulatorClient."""

    def test_health_and_seed(self, sync_client):
        assert sync_client.health() is True
        model = sync_client.seed_model()
        assert [n.id for n in model.nodes] == ["A", "B", "C"]

    def test_step_through_demo_model(self, sync_client):
        session = sync_client.sessions.create(use_seed=True)
        sid = session.session_id
        sync_client.sessions.wait_for(sid, "ready")

        sync_client.sessions.step(sid)
        results = sync_client.sessions.wait_for(sid, "stepped")
        assert results[-1]["snapshot"]["step"] == 1

        status = sync_client.sessions.status(sid)
        assert status.step == 1
        assert status.history_length == 1

    def test_breakpoint_halts_run(self, sync_client):
        sid = sync_client.sessions.create(use_seed=True, config={"intervalMs": 5}).session_id
        sync_client.sessions.update_breakpoints(
            sid, [{"nodeId": "B", "condition": ">=", "threshold": 2}]
        )
        sync_client.sessions.run(sid)
        results = sync_client.sessions.wait_for(sid, "breakpointHit")
        hit = [r for r in results if r["type"] == "breakpointHit"][0]["hit"]
        assert hit["breakpoint"]["nodeId"] == "B"
        assert hit["actualValue"] == pytest.approx(2.0)
        assert sync_client.sessions.status(sid).status == "paused"

    def test_breach_and_reset(self, sync_client):
        sid = sync_client.sessions.create(model=create_breach_model()).session_id
        sync_client.sessions.step(sid)
        results = sync_client.sessions.wait_for(sid, "paused")
        assert results[-1]["breach"]["constraint"] == "max"

        sync_client.sessions.reset(sid)
        results = sync_client.sessions.wait_for(sid, "state")
        assert results[-1]["snapshot"]["step"] == 0

    def test_unknown_session(self, sync_client):
        with pytest.raises(NotFoundError) as exc_info:
            sync_client.sessions.status("missing")
        assert exc_info.value.session_id == "missing"
        assert exc_info.value.available_sessions == []

    def test_invalid_config(self, sync_client):
        with pytest.raises(ValidationError):
            sync_client.sessions.create(use_seed=True, config={"intervalMs": 0})

    def test_delete(self, sync_client):
        sid = sync_client.sessions.create().session_id
        assert sync_client.sessions.delete(sid).status == "deleted"
        assert sid not in sync_client.sessions.list_sessions()


class TestAsyncClientIntegration:
    """End-to-end tests for AsyncSimulatorClient."""

    async def test_run_to_done(self, async_client):
        session = await async_client.sessions.create(
            use_seed=True, config={"steps": 3, "intervalMs": 5}
        )
        await async_client.sessions.run(session.session_id)
        results = await async_client.sessions.wait_for(session.session_id, "done")
        done = [r for r in results if r["type"] == "done"][0]
        assert [s["step"] for s in done["history"]] == [1, 2, 3]

    async def test_health(self, async_client):
        assert await async_client.health() is True
