"""Simulation session: the run/pause/step control state machine.

A SimulationSession owns everything about one run: the compiled graph, the
current SimState, the step history, the active breakpoints and the tick
timer. It is driven purely by messages (``dispatch``) and timer ticks
(``tick``), and answers each with a list of outbound results. It is not
thread-safe; SimulationWorker serializes all access on one thread.

Lifecycle::

    uninitialized --init--> idle --run--> running <--pause/resume--> paused
                                              |
                                   budget reached / stop
                                              v
                                            done

``reset`` returns to idle from any initialized state.
"""

import logging
from enum import Enum
from typing import Any, Optional, Union
from uuid import uuid4

from pydantic import BaseModel

from models.breakpoints import BreakpointSet
from models.compiled import CompiledGraph, compile_graph
from models.errors import SessionError, UninitializedSessionError
from models.graph import CausalModel
from models.messages import (
    BreakpointHitResult,
    DoneResult,
    ErrorResult,
    InboundMessage,
    InitMessage,
    OutboundMessage,
    PausedResult,
    ReadyResult,
    ResumedResult,
    SetSpeedMessage,
    SimConfig,
    StateResult,
    SteppedResult,
    UpdateBreakpointsMessage,
    parse_inbound_message,
)
from models.scheduler import EventScheduler
from models.state import SimState, Snapshot
from models.stepper import compute_step, create_initial_state
from models.timer import TickTimer

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    """Lifecycle state of a simulation session."""

    UNINITIALIZED = "uninitialized"
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    DONE = "done"


class SimulationSession:
    """Control state machine for one simulation run.

    Attributes:
        session_id: Unique identifier for this session.
        status: Current lifecycle state.
        timer: Tick timer consulted by the hosting worker.
        scheduler: Event scheduler (holds the random generator).
        model: The model passed to the last ``init``.
        graph: Compiled form of ``model``.
        config: Run configuration from the last ``init``.
        state: Current SimState.
        history: Snapshots produced since the last ``run`` or ``reset``.
        breakpoints: Active breakpoint set.
    """

    def __init__(
        self,
        session_id: Optional[str] = None,
        timer: Optional[TickTimer] = None,
        scheduler: Optional[EventScheduler] = None,
    ) -> None:
        self.session_id = session_id or str(uuid4())
        self.timer = timer or TickTimer()
        self.scheduler = scheduler or EventScheduler()
        self.status = SessionStatus.UNINITIALIZED

        self.model: Optional[CausalModel] = None
        self.graph: Optional[CompiledGraph] = None
        self.config = SimConfig()
        self.state: Optional[SimState] = None
        self.history: list[Snapshot] = []
        self.breakpoints = BreakpointSet()

        self._handlers = {
            "init": self._on_init,
            "run": self._on_run,
            "pause": self._on_pause,
            "resume": self._on_resume,
            "reset": self._on_reset,
            "stop": self._on_stop,
            "step": self._on_step,
            "setSpeed": self._on_set_speed,
            "updateBreakpoints": self._on_update_breakpoints,
        }

    @property
    def is_initialized(self) -> bool:
        return self.state is not None

    # ===== Entry points =====

    def dispatch(
        self, message: Union[InboundMessage, dict[str, Any]]
    ) -> list[OutboundMessage]:
        """Handle one inbound message.

        Args:
            message: A parsed inbound message, or a raw dict to parse.

        Returns:
            Outbound results, in emission order. Errors are returned as
            ``error`` results, never raised.
        """
        try:
            if not isinstance(message, BaseModel):
                message = parse_inbound_message(message)
            if message.type != "init" and not self.is_initialized:
                raise UninitializedSessionError(message.type)
            return self._handlers[message.type](message)
        except SessionError as e:
            logger.warning(f"Session {self.session_id} rejected message: {e.message}")
            return [ErrorResult(message=e.message)]

    def tick(self) -> list[OutboundMessage]:
        """Perform one timer-driven step.

        Stale ticks (timer stopped since the tick was scheduled) are ignored.
        """
        if not self.is_initialized or not self.timer.is_active:
            return []
        if self._budget_spent():
            return self._finish()
        return self._advance(manual=False)

    def describe(self) -> dict[str, Any]:
        """Summarize the session for status reporting."""
        return {
            "session_id": self.session_id,
            "status": self.status.value,
            "step": self.state.step if self.state else None,
            "timer_active": self.timer.is_active,
            "interval_ms": self.timer.interval_ms,
            "breakpoint_count": len(self.breakpoints),
            "history_length": len(self.history),
        }

    # ===== Message handlers =====

    def _on_init(self, message: InitMessage) -> list[OutboundMessage]:
        self.timer.stop()
        self.model = message.model
        self.graph = compile_graph(message.model)
        self.config = message.config
        self.timer.interval_ms = message.config.interval_ms
        self.state = create_initial_state(self.graph, self.scheduler)
        self.history = []
        self.status = SessionStatus.IDLE

        logger.info(
            f"Session {self.session_id} initialized with "
            f"{len(self.graph.nodes)} nodes ({len(self.graph.event_nodes)} events), "
            f"{len(message.model.edges)} edges, dt={self.config.dt}, "
            f"steps={self.config.steps}, interval={self.config.interval_ms}ms"
        )
        return [ReadyResult()]

    def _on_run(self, message: InboundMessage) -> list[OutboundMessage]:
        if self._budget_spent():
            return self._finish()
        self.history = []
        self.timer.start()
        self.status = SessionStatus.RUNNING
        logger.info(
            f"Session {self.session_id} running from step {self.state.step} "
            f"every {self.timer.interval_ms}ms"
        )
        return []

    def _on_pause(self, message: InboundMessage) -> list[OutboundMessage]:
        was_active = self.timer.is_active
        self.timer.stop()
        if was_active or self.status == SessionStatus.RUNNING:
            self.status = SessionStatus.PAUSED
        logger.info(f"Session {self.session_id} paused at step {self.state.step}")
        return [PausedResult()]

    def _on_resume(self, message: InboundMessage) -> list[OutboundMessage]:
        self.state = self.state.clear_breach()
        if self._budget_spent():
            return self._finish()
        self.timer.start()
        self.status = SessionStatus.RUNNING
        logger.info(f"Session {self.session_id} resumed at step {self.state.step}")
        return [ResumedResult()]

    def _on_reset(self, message: InboundMessage) -> list[OutboundMessage]:
        self.timer.stop()
        self.state = create_initial_state(self.graph, self.scheduler)
        self.history = []
        self.status = SessionStatus.IDLE
        logger.info(f"Session {self.session_id} reset")
        return [StateResult(snapshot=self.state.to_snapshot())]

    def _on_stop(self, message: InboundMessage) -> list[OutboundMessage]:
        self.timer.stop()
        self.status = SessionStatus.DONE
        logger.info(
            f"Session {self.session_id} stopped at step {self.state.step} "
            f"with {len(self.history)} snapshots"
        )
        return [DoneResult(history=list(self.history))]

    def _on_step(self, message: InboundMessage) -> list[OutboundMessage]:
        self.state = self.state.clear_breach()
        return self._advance(manual=True)

    def _on_set_speed(self, message: SetSpeedMessage) -> list[OutboundMessage]:
        self.timer.restart(message.interval_ms)
        logger.debug(f"Session {self.session_id} interval set to {message.interval_ms}ms")
        return []

    def _on_update_breakpoints(
        self, message: UpdateBreakpointsMessage
    ) -> list[OutboundMessage]:
        self.breakpoints = BreakpointSet.from_list(message.breakpoints)
        logger.debug(
            f"Session {self.session_id} now has {len(self.breakpoints)} breakpoints"
        )
        return []

    # ===== Stepping =====

    def _advance(self, manual: bool) -> list[OutboundMessage]:
        """Compute one step and apply the breach / breakpoint / budget checks.

        A breach takes precedence over breakpoints, which take precedence
        over the step budget. Automatic steps always emit ``state`` first;
        manual steps emit ``stepped`` only if neither a breach nor a
        breakpoint stopped them.
        """
        self.state = compute_step(self.state, self.graph, self.config.dt, self.scheduler)
        snapshot = self.state.to_snapshot()
        self.history.append(snapshot)

        results: list[OutboundMessage] = []
        if not manual:
            results.append(StateResult(snapshot=snapshot))

        breach = self.state.breached
        if breach is not None:
            self.timer.stop()
            self.status = SessionStatus.PAUSED
            logger.warning(
                f"Session {self.session_id} paused at step {self.state.step}: "
                f"{breach.node_id} breached {breach.constraint} "
                f"({breach.value} vs limit {breach.limit})"
            )
            results.append(PausedResult(breach=breach))
            return results

        hit = self.breakpoints.check(self.state.values)
        if hit is not None:
            self.timer.stop()
            self.status = SessionStatus.PAUSED
            logger.warning(
                f"Session {self.session_id} hit breakpoint at step {self.state.step}: "
                f"{hit.breakpoint.node_id} {hit.breakpoint.condition} "
                f"{hit.breakpoint.threshold} (actual {hit.actual_value})"
            )
            results.append(BreakpointHitResult(hit=hit))
            return results

        if manual:
            results.append(SteppedResult(snapshot=snapshot))

        if self._budget_spent():
            results.extend(self._finish())

        return results

    def _budget_spent(self) -> bool:
        return self.state.step >= self.config.steps

    def _finish(self) -> list[OutboundMessage]:
        """Stop the timer and report the run as done with its history."""
        self.timer.stop()
        self.status = SessionStatus.DONE
        logger.info(f"Session {self.session_id} done after {self.state.step} steps")
        return [DoneResult(history=list(self.history))]
