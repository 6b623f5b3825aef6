"""Simulation run state.

A SimState is an immutable snapshot of one run at one step. The stepper never
mutates a state it was given; it always builds a new one, so a retained
reference to an earlier state is never altered by later steps.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class BreachInfo(BaseModel):
    """A constraint breach detected while computing a step.

    Args:
        node_id: Node whose unclamped value crossed a bound.
        constraint: Which bound was hit ("min" or "max").
        value: The unclamped computed value.
        limit: The bound the value was clamped to.
    """

    node_id: str = Field(alias="nodeId")
    constraint: Literal["min", "max"]
    value: float
    limit: float

    class Config:
        populate_by_name = True
        frozen = True


class Snapshot(BaseModel):
    """The externally visible part of a SimState."""

    step: int
    values: dict[str, float]
    triggered_events: Optional[list[str]] = Field(
        default=None, alias="triggeredEvents"
    )

    class Config:
        populate_by_name = True


class SimState(BaseModel):
    """Mutable-run, immutable-snapshot simulation state.

    Args:
        step: Number of steps computed so far.
        values: Node id -> current value, one entry per node.
        breached: Breach recorded by the most recent step, if any.
        event_next_trigger: Event node id -> step at which it fires next.
        triggered_events: Event node ids that fired during the most recent step.
    """

    step: int = Field(default=0, ge=0)
    values: dict[str, float] = Field(default_factory=dict)
    breached: Optional[BreachInfo] = None
    event_next_trigger: dict[str, int] = Field(default_factory=dict)
    triggered_events: list[str] = Field(default_factory=list)

    class Config:
        frozen = True

    def clear_breach(self) -> "SimState":
        """Return a copy of this state with the breach latch released."""
        if self.breached is None:
            return self
        return self.model_copy(update={"breached": None})

    def to_snapshot(self) -> Snapshot:
        """Build the outbound snapshot, copying the value map."""
        return Snapshot(
            step=self.step,
            values=dict(self.values),
            triggered_events=list(self.triggered_events) if self.triggered_events else None,
        )
