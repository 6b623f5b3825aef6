"""Event scheduling.

Event nodes fire on a schedule computed eagerly whenever they are created or
fire. When an event fires its current value becomes a pulse that is added,
once, to the next value of each regular node it points at (or of every
regular node if it has no outgoing edges).
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from models.compiled import CompiledGraph
from models.graph import EventSpec

logger = logging.getLogger(__name__)


@dataclass
class EventFiring:
    """Outcome of firing the events due at one step.

    Attributes:
        triggered: Event node ids that fired, in graph order.
        pulses: Regular node id -> summed pulse to add this step.
        next_trigger: Complete schedule after rescheduling fired events.
    """

    triggered: list[str] = field(default_factory=list)
    pulses: dict[str, float] = field(default_factory=dict)
    next_trigger: dict[str, int] = field(default_factory=dict)


class EventScheduler:
    """Computes trigger steps and event pulses.

    Holds the random generator used by randomized events, so a seeded
    scheduler yields a reproducible run.

    Attributes:
        rng: numpy random Generator for randomized intervals.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def next_trigger(self, spec: EventSpec, current_step: int) -> int:
        """Step at which an event next fires, measured from ``current_step``.

        Args:
            spec: The event node's schedule.
            current_step: Baseline step (0 at creation, the firing step after
                a trigger).

        Returns:
            The absolute step number of the next firing.
        """
        if spec.event_type == "fixed":
            return current_step + int(spec.interval)

        low, high = spec.bounds
        return current_step + int(self.rng.integers(low, high, endpoint=True))

    def initial_schedule(self, graph: CompiledGraph) -> dict[str, int]:
        """Schedule every event node from step 0."""
        return {
            node_id: self.next_trigger(node.event, 0)
            for node_id, node in graph.event_nodes.items()
        }

    def fire_due(
        self,
        graph: CompiledGraph,
        values: dict[str, float],
        schedule: dict[str, int],
        step: int,
    ) -> EventFiring:
        """Fire every event due at ``step`` and collect its pulses.

        Each fired event is rescheduled immediately from ``step``, so no
        event can fire twice in one step. ``schedule`` is not modified.

        Args:
            graph: Compiled graph of the running model.
            values: Values at the start of the step.
            schedule: Event node id -> next trigger step.
            step: The step being computed.

        Returns:
            The fired events, their pulses, and the updated schedule.
        """
        firing = EventFiring(next_trigger=dict(schedule))

        for node_id, node in graph.event_nodes.items():
            due = schedule.get(node_id)
            if due is None:
                due = self.next_trigger(node.event, 0)
            if due > step:
                firing.next_trigger[node_id] = due
                continue

            firing.triggered.append(node_id)
            pulse = values.get(node_id, node.value)
            targets = graph.outgoing.get(node_id, [])
            if not targets:
                targets = list(graph.regular_nodes)
            for target in targets:
                if target in graph.regular_nodes:
                    firing.pulses[target] = firing.pulses.get(target, 0.0) + pulse

            firing.next_trigger[node_id] = self.next_trigger(node.event, step)
            logger.debug(
                f"Event {node_id} fired at step {step} with pulse {pulse}, "
                f"next at {firing.next_trigger[node_id]}"
            )

        return firing
