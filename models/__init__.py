"""Causal graph simulator core package.

This package contains the simulation core: the causal model definitions,
the graph compiler, the per-step integrator with event scheduling and
constraint clamping, breakpoint evaluation, the message protocol, and the
control state machine together with the thread that hosts it.
"""

from models.breakpoints import Breakpoint, BreakpointHit, BreakpointSet, check_breakpoints
from models.compiled import CompiledGraph, IncomingEdge, compile_graph
from models.errors import MalformedMessageError, SessionError, UninitializedSessionError
from models.graph import CausalModel, Edge, EventSpec, ModelMeta, Node, seed_model
from models.messages import SimConfig, parse_inbound_message
from models.scheduler import EventFiring, EventScheduler
from models.session import SessionStatus, SimulationSession
from models.state import BreachInfo, SimState, Snapshot
from models.stepper import compute_step, create_initial_state
from models.timer import TickTimer
from models.worker import SimulationWorker

__all__ = [
    "Breakpoint",
    "BreakpointHit",
    "BreakpointSet",
    "check_breakpoints",
    "CompiledGraph",
    "IncomingEdge",
    "compile_graph",
    "SessionError",
    "UninitializedSessionError",
    "MalformedMessageError",
    "CausalModel",
    "Edge",
    "EventSpec",
    "ModelMeta",
    "Node",
    "seed_model",
    "SimConfig",
    "parse_inbound_message",
    "EventFiring",
    "EventScheduler",
    "SessionStatus",
    "SimulationSession",
    "BreachInfo",
    "SimState",
    "Snapshot",
    "compute_step",
    "create_initial_state",
    "TickTimer",
    "SimulationWorker",
]
