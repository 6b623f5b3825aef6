"""Per-step numeric integration.

Each step reads only the state it was given and returns a new one. Updates
are simultaneous: every node reads its sources' values from the start of the
step, so cycles are well defined.

For a regular node with incoming edges E (sources that are event nodes
excluded) and a summed event pulse P::

    next = current + dt * sum(weight * source * sign for edge in E) + P

The result is then clamped to the node's bounds, max checked before min.
Only the first breaching node in model order is reported; later breaching
nodes are still clamped.
"""

import logging
from typing import Optional

from models.compiled import CompiledGraph
from models.scheduler import EventScheduler
from models.state import BreachInfo, SimState

logger = logging.getLogger(__name__)


def create_initial_state(
    graph: CompiledGraph, scheduler: Optional[EventScheduler] = None
) -> SimState:
    """Build the step-0 state for a compiled graph.

    Args:
        graph: The compiled graph.
        scheduler: Scheduler used for the initial event schedule.

    Returns:
        A SimState at step 0 holding each node's model value.
    """
    scheduler = scheduler or EventScheduler()
    return SimState(
        step=0,
        values=graph.initial_values(),
        breached=None,
        event_next_trigger=scheduler.initial_schedule(graph),
        triggered_events=[],
    )


def compute_step(
    state: SimState,
    graph: CompiledGraph,
    dt: float,
    scheduler: Optional[EventScheduler] = None,
) -> SimState:
    """Advance ``state`` by one step.

    Args:
        state: State at the start of the step. Never modified.
        graph: Compiled graph of the running model.
        dt: Integration step size scaling the edge sum.
        scheduler: Scheduler used to fire and reschedule events.

    Returns:
        A new SimState one step later, carrying at most one breach.
    """
    scheduler = scheduler or EventScheduler()
    step = state.step + 1
    values = state.values

    firing = scheduler.fire_due(graph, values, state.event_next_trigger, step)

    new_values: dict[str, float] = {}
    breach: Optional[BreachInfo] = None

    for node_id, node in graph.nodes.items():
        current = values.get(node_id, 0.0)

        if node.is_event:
            new_values[node_id] = current
            continue

        edge_sum = 0.0
        for edge in graph.incoming[node_id]:
            if graph.is_event(edge.source_id):
                continue
            edge_sum += edge.weight * values.get(edge.source_id, 0.0) * edge.polarity

        next_value = current + dt * edge_sum + firing.pulses.get(node_id, 0.0)

        if node.max is not None and next_value > node.max:
            if breach is None:
                breach = BreachInfo(
                    node_id=node_id, constraint="max", value=next_value, limit=node.max
                )
            next_value = node.max

        if node.min is not None and next_value < node.min:
            if breach is None:
                breach = BreachInfo(
                    node_id=node_id, constraint="min", value=next_value, limit=node.min
                )
            next_value = node.min

        new_values[node_id] = next_value

    if breach is not None:
        logger.debug(
            f"Step {step}: node {breach.node_id} breached {breach.constraint} "
            f"({breach.value} vs {breach.limit})"
        )

    return SimState(
        step=step,
        values=new_values,
        breached=breach,
        event_next_trigger=firing.next_trigger,
        triggered_events=firing.triggered,
    )
