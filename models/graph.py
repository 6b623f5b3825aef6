"""Causal graph model definitions.

A model is an ordered list of nodes and directed, weighted edges. Models are
built by external editing tools and handed to a session wholesale on
``init``; the simulation core never mutates them.
"""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


Polarity = Literal["+", "-"]
NodeKind = Literal["regular", "event"]
EventType = Literal["fixed", "random"]


class EventSpec(BaseModel):
    """Trigger schedule for an event node.

    Args:
        event_type: "fixed" fires every ``interval`` steps, "random" fires
            after a uniformly drawn number of steps in
            ``[interval_min, interval_max]``.
        interval: Steps between firings for fixed events.
        interval_min: Lower bound for random events (defaults to 1).
        interval_max: Upper bound for random events (defaults to interval_min).
    """

    event_type: EventType = Field(alias="eventType")
    interval: Optional[int] = Field(default=None, ge=1)
    interval_min: Optional[int] = Field(default=None, ge=1, alias="intervalMin")
    interval_max: Optional[int] = Field(default=None, ge=1, alias="intervalMax")

    class Config:
        populate_by_name = True

    @model_validator(mode="after")
    def check_bounds(self) -> "EventSpec":
        """Check that the fields required by the event type are consistent."""
        if self.event_type == "fixed" and self.interval is None:
            raise ValueError("fixed events require an interval")
        if (
            self.interval_min is not None
            and self.interval_max is not None
            and self.interval_min > self.interval_max
        ):
            raise ValueError(
                f"intervalMin ({self.interval_min}) must not exceed "
                f"intervalMax ({self.interval_max})"
            )
        return self

    @property
    def bounds(self) -> tuple[int, int]:
        """Inclusive step range a random event draws from."""
        low = self.interval_min if self.interval_min is not None else 1
        high = self.interval_max if self.interval_max is not None else low
        return low, high


class Node(BaseModel):
    """A quantity in the causal graph.

    Args:
        id: Unique, stable identifier.
        label: Display label.
        value: Initial numeric reading.
        min: Optional inclusive lower bound.
        max: Optional inclusive upper bound.
        kind: "regular" nodes are integrated each step, "event" nodes act as
            pulse sources.
        event: Trigger schedule, required for event nodes.
    """

    id: str = Field(min_length=1)
    label: str = ""
    value: float
    min: Optional[float] = None
    max: Optional[float] = None
    kind: NodeKind = "regular"
    event: Optional[EventSpec] = None

    @model_validator(mode="after")
    def check_constraints(self) -> "Node":
        """Reject inverted bounds and event nodes without a schedule."""
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(
                f"Node {self.id}: min ({self.min}) must not exceed max ({self.max})"
            )
        if self.kind == "event" and self.event is None:
            raise ValueError(f"Event node {self.id} requires an event spec")
        return self

    @property
    def is_event(self) -> bool:
        return self.kind == "event"


class Edge(BaseModel):
    """A directed, weighted causal link between two nodes."""

    id: str = Field(min_length=1)
    from_: str = Field(alias="from")
    to: str
    weight: float
    polarity: Polarity = "+"

    class Config:
        populate_by_name = True

    @property
    def sign(self) -> int:
        """Numeric sign of the polarity symbol."""
        return 1 if self.polarity == "+" else -1


class ModelMeta(BaseModel):
    """Optional descriptive metadata carried alongside a model."""

    name: Optional[str] = None
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    class Config:
        populate_by_name = True


class CausalModel(BaseModel):
    """A complete causal graph: ordered nodes plus edges.

    Node order is meaningful: it is the iteration order used by the stepper
    and therefore the tie-break order for breach reporting.
    """

    version: Literal[1] = 1
    meta: Optional[ModelMeta] = None
    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)

    @field_validator("nodes")
    @classmethod
    def unique_node_ids(cls, nodes: list[Node]) -> list[Node]:
        seen: set[str] = set()
        for node in nodes:
            if node.id in seen:
                raise ValueError(f"Duplicate node id: {node.id}")
            seen.add(node.id)
        return nodes


def seed_model() -> CausalModel:
    """Return the built-in demo model.

    Three nodes in a causal chain: a constant input feeding a bounded buffer,
    which in turn feeds an output capped at 100.
    """
    return CausalModel(
        meta=ModelMeta(name="Demo Model", created_at=datetime.now(timezone.utc)),
        nodes=[
            Node(id="A", label="Input", value=10),
            Node(id="B", label="Buffer", value=0, min=-20, max=50),
            Node(id="C", label="Output", value=5, max=100),
        ],
        edges=[
            Edge(id="e1", from_="A", to="B", weight=0.5, polarity="+"),
            Edge(id="e2", from_="B", to="C", weight=0.3, polarity="+"),
        ],
    )
