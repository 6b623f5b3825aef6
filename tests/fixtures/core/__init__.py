"""Core fixtures: causal graph models and simulation sessions."""

from tests.fixtures.core.graphs import (
    BREACH_MODEL,
    CHAIN_MODEL,
    EVENT_MODEL,
    create_breach_model,
    create_chain_model,
    create_edge,
    create_event_model,
    create_event_node,
    create_model,
    create_node,
)
from tests.fixtures.core.sessions import FakeClock, create_session

__all__ = [
    "create_node",
    "create_event_node",
    "create_edge",
    "create_model",
    "create_chain_model",
    "create_breach_model",
    "create_event_model",
    "CHAIN_MODEL",
    "BREACH_MODEL",
    "EVENT_MODEL",
    "FakeClock",
    "create_session",
]
