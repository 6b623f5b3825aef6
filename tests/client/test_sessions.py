"""Unit tests for SessionsClient and AsyncSessionsClient.

The shared HTTP client is replaced with a MagicMock/AsyncMock, so these tests
check the paths, bodies and response parsing of each method.
"""

import subprocess
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from client._sessions import AsyncSessionsClient, SessionsClient
from client.exceptions import ResultTimeoutError, TimeoutError
from client.models import (
    BreakpointSpec,
    CreateSessionResponse,
    GraphEdge,
    GraphModel,
    GraphNode,
    PostMessageResponse,
    ResultsResponse,
    RunConfig,
    SessionStatusResponse,
)
from tests.fixtures.core.graphs import create_chain_model


def accepted(session_id="s1", type=None):
    return {"session_id": session_id, "accepted": True, "type": type}


STATUS = {
    "session_id": "s1",
    "status": "idle",
    "step": 0,
    "timer_active": False,
    "interval_ms": 50,
    "breakpoint_count": 0,
    "history_length": 0,
    "worker_running": True,
}


@pytest.fixture
def mock_http():
    return MagicMock()


@pytest.fixture
def sessions(mock_http):
    return SessionsClient(mock_http)


# =============================================================================
# Response Model Tests
# =============================================================================


class TestResponseModels:
    """Tests for the session response models."""

    def test_status_response(self):
        status = SessionStatusResponse(**STATUS)
        assert status.status == "idle"
        assert status.worker_running is True

    def test_results_of_type(self):
        results = ResultsResponse(
            session_id="s1",
            results=[{"type": "state"}, {"type": "done"}, {"type": "state"}],
        )
        assert len(results.of_type("state")) == 2
        assert results.of_type("ready") == []


# =============================================================================
# SessionsClient Tests
# =============================================================================


class TestSessionsClientEndpoints:
    """Tests for the raw endpoint methods."""

    def test_create_default(self, sessions, mock_http):
        mock_http.post.return_value = {"session_id": "s1", "status": "uninitialized"}
        result = sessions.create()
        mock_http.post.assert_called_once_with(
            "/sessions", json={"use_seed": False}, params=None
        )
        assert isinstance(result, CreateSessionResponse)
        assert result.init_posted is False

    def test_create_with_model_and_config(self, sessions, mock_http):
        mock_http.post.return_value = {
            "session_id": "s1",
            "status": "uninitialized",
            "init_posted": True,
        }
        sessions.create(model=create_chain_model(), config=RunConfig(steps=5))
        body = mock_http.post.call_args.kwargs["json"]
        assert body["model"]["edges"][0]["from"] == "A"
        assert body["config"] == {"dt": 0.1, "steps": 5, "intervalMs": 50}

    def test_list_sessions(self, sessions, mock_http):
        mock_http.get.return_value = {"sessions": ["a", "b"]}
        assert sessions.list_sessions() == ["a", "b"]
        mock_http.get.assert_called_once_with("/sessions", params=None)

    def test_status(self, sessions, mock_http):
        mock_http.get.return_value = STATUS
        assert sessions.status("s1").step == 0
        mock_http.get.assert_called_once_with("/sessions/s1", params=None)

    def test_results(self, sessions, mock_http):
        mock_http.get.return_value = {"session_id": "s1", "results": [{"type": "ready"}]}
        response = sessions.results("s1", max_results=5, timeout=1.0)
        mock_http.get.assert_called_once_with(
            "/sessions/s1/results", params={"max_results": 5, "timeout": 1.0}
        )
        assert response.results == [{"type": "ready"}]

    def test_delete(self, sessions, mock_http):
        mock_http.delete.return_value = {"session_id": "s1", "status": "deleted"}
        assert sessions.delete("s1").status == "deleted"
        mock_http.delete.assert_called_once_with("/sessions/s1", params=None)

    def test_post_raw_message(self, sessions, mock_http):
        mock_http.post.return_value = accepted(type="step")
        response = sessions.post_message("s1", {"type": "step"})
        mock_http.post.assert_called_once_with(
            "/sessions/s1/messages", json={"type": "step"}, params=None
        )
        assert isinstance(response, PostMessageResponse)


class TestSessionsClientMessages:
    """Tests for the per-message helpers."""

    @pytest.mark.parametrize("name", ["run", "pause", "resume", "reset", "stop", "step"])
    def test_bare_messages(self, sessions, mock_http, name):
        mock_http.post.return_value = accepted(type=name)
        getattr(sessions, name)("s1")
        assert mock_http.post.call_args.kwargs["json"] == {"type": name}

    def test_init(self, sessions, mock_http):
        mock_http.post.return_value = accepted(type="init")
        sessions.init("s1", create_chain_model(), {"steps": 3})
        body = mock_http.post.call_args.kwargs["json"]
        assert body["type"] == "init"
        assert body["config"]["steps"] == 3
        assert [n["id"] for n in body["model"]["nodes"]] == ["A", "B"]

    def test_init_with_client_models(self, sessions, mock_http):
        mock_http.post.return_value = accepted(type="init")
        model = GraphModel(
            nodes=[GraphNode(id="A", label="Input", value=10), GraphNode(id="B", max=5)],
            edges=[GraphEdge(id="e1", from_="A", to="B", weight=0.5)],
        )
        sessions.init("s1", model)
        body = mock_http.post.call_args.kwargs["json"]
        assert "config" not in body
        assert body["model"]["edges"] == [
            {"id": "e1", "from": "A", "to": "B", "weight": 0.5, "polarity": "+"}
        ]
        assert "min" not in body["model"]["nodes"][1]
        assert body["model"]["nodes"][1]["max"] == 5

    def test_set_speed(self, sessions, mock_http):
        mock_http.post.return_value = accepted(type="setSpeed")
        sessions.set_speed("s1", 128)
        assert mock_http.post.call_args.kwargs["json"] == {
            "type": "setSpeed",
            "intervalMs": 128,
        }

    def test_update_breakpoints(self, sessions, mock_http):
        mock_http.post.return_value = accepted(type="updateBreakpoints")
        sessions.update_breakpoints(
            "s1",
            [
                BreakpointSpec(node_id="B", condition=">=", threshold=10),
                {"nodeId": "C", "condition": "lt", "threshold": 0},
            ],
        )
        body = mock_http.post.call_args.kwargs["json"]
        assert body["breakpoints"] == [
            {"nodeId": "B", "condition": ">=", "threshold": 10},
            {"nodeId": "C", "condition": "lt", "threshold": 0},
        ]


class TestSessionsClientWaitFor:
    """Tests for wait_for."""

    def test_returns_on_match(self, sessions, mock_http):
        mock_http.get.side_effect = [
            {"session_id": "s1", "results": [{"type": "state"}]},
            {"session_id": "s1", "results": [{"type": "state"}, {"type": "done"}]},
        ]
        collected = sessions.wait_for("s1", "done", timeout=5.0)
        assert [r["type"] for r in collected] == ["state", "state", "done"]

    def test_times_out(self, sessions, mock_http):
        mock_http.get.return_value = {"session_id": "s1", "results": []}
        with pytest.raises(TimeoutError):
            sessions.wait_for("s1", "done", timeout=0.05, poll_interval=0.01)

    def test_timeout_carries_drained_results(self, sessions, mock_http):
        mock_http.get.return_value = {
            "session_id": "s1",
            "results": [{"type": "state"}, {"type": "paused"}],
        }
        with pytest.raises(ResultTimeoutError) as exc_info:
            sessions.wait_for("s1", "done", timeout=0.05, poll_interval=0.01)
        exc = exc_info.value
        assert exc.session_id == "s1"
        assert exc.result_type == "done"
        assert exc.received_types[:2] == ["state", "paused"]


# =============================================================================
# AsyncSessionsClient Tests
# =============================================================================


class TestAsyncSessionsClient:
    """Tests for AsyncSessionsClient."""

    @pytest.fixture
    def async_http(self):
        http = MagicMock()
        http.get = AsyncMock()
        http.post = AsyncMock()
        http.delete = AsyncMock()
        return http

    async def test_create(self, async_http):
        async_http.post.return_value = {"session_id": "s1", "status": "uninitialized"}
        result = await AsyncSessionsClient(async_http).create(use_seed=True)
        async_http.post.assert_awaited_once_with(
            "/sessions", json={"use_seed": True}, params=None
        )
        assert result.session_id == "s1"

    async def test_step(self, async_http):
        async_http.post.return_value = accepted(type="step")
        await AsyncSessionsClient(async_http).step("s1")
        assert async_http.post.call_args.kwargs["json"] == {"type": "step"}

    async def test_status(self, async_http):
        async_http.get.return_value = STATUS
        status = await AsyncSessionsClient(async_http).status("s1")
        assert status.session_id == "s1"

    async def test_delete(self, async_http):
        async_http.delete.return_value = {"session_id": "s1", "status": "deleted"}
        result = await AsyncSessionsClient(async_http).delete("s1")
        assert result.status == "deleted"

    async def test_wait_for(self, async_http):
        async_http.get.return_value = {"session_id": "s1", "results": [{"type": "ready"}]}
        collected = await AsyncSessionsClient(async_http).wait_for("s1", "ready")
        assert collected == [{"type": "ready"}]


class TestClientIsolation:
    """The client package must not drag the simulation core along."""

    def test_import_does_not_load_core(self):
        code = (
            "import sys, client; "
            "print(sorted(m for m in ('models', 'numpy', 'api') if m in sys.modules))"
        )
        completed = subprocess.run(
            [sys.executable, "-c", code],
            cwd=Path(__file__).resolve().parents[2],
            capture_output=True,
            text=True,
            check=True,
        )
        assert completed.stdout.strip() == "[]"
