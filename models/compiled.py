"""Graph compilation.

Turns a declarative CausalModel into lookup tables optimized for repeated
per-step traversal. A CompiledGraph is rebuilt whenever the model changes and
is owned by the session that compiled it.
"""

from dataclasses import dataclass, field
from typing import NamedTuple

from models.graph import CausalModel, Node


class IncomingEdge(NamedTuple):
    """One contribution to a node's per-step edge sum."""

    source_id: str
    weight: float
    polarity: int


@dataclass(frozen=True)
class CompiledGraph:
    """Per-step evaluation structure derived from a CausalModel.

    Attributes:
        nodes: Every node keyed by id, in model order.
        regular_nodes: Subset of ``nodes`` integrated each step.
        event_nodes: Subset of ``nodes`` acting as pulse sources.
        incoming: Node id -> incoming (source, weight, sign) records. Every
            node has an entry, possibly empty.
        outgoing: Node id -> target ids, one per outgoing edge. Every node has
            an entry, possibly empty.
    """

    nodes: dict[str, Node] = field(default_factory=dict)
    regular_nodes: dict[str, Node] = field(default_factory=dict)
    event_nodes: dict[str, Node] = field(default_factory=dict)
    incoming: dict[str, list[IncomingEdge]] = field(default_factory=dict)
    outgoing: dict[str, list[str]] = field(default_factory=dict)

    def is_event(self, node_id: str) -> bool:
        return node_id in self.event_nodes

    def initial_values(self) -> dict[str, float]:
        """Fresh value map holding every node's model value."""
        return {node_id: node.value for node_id, node in self.nodes.items()}


def compile_graph(model: CausalModel) -> CompiledGraph:
    """Compile a model into a CompiledGraph.

    Pure and linear in nodes + edges. Self-loops and parallel edges are kept
    as separate records. Edges referencing unknown node ids are ignored; the
    upstream validator is expected to have rejected them already.

    Args:
        model: The causal model to compile.

    Returns:
        The compiled lookup structure.
    """
    nodes: dict[str, Node] = {}
    regular_nodes: dict[str, Node] = {}
    event_nodes: dict[str, Node] = {}
    incoming: dict[str, list[IncomingEdge]] = {}
    outgoing: dict[str, list[str]] = {}

    for node in model.nodes:
        nodes[node.id] = node
        if node.is_event:
            event_nodes[node.id] = node
        else:
            regular_nodes[node.id] = node
        incoming[node.id] = []
        outgoing[node.id] = []

    for edge in model.edges:
        if edge.to not in nodes or edge.from_ not in nodes:
            continue
        incoming[edge.to].append(IncomingEdge(edge.from_, edge.weight, edge.sign))
        outgoing[edge.from_].append(edge.to)

    return CompiledGraph(
        nodes=nodes,
        regular_nodes=regular_nodes,
        event_nodes=event_nodes,
        incoming=incoming,
        outgoing=outgoing,
    )
