"""Breakpoints on node values.

A breakpoint halts automatic stepping when a node's post-step value satisfies
a comparison. At most one breakpoint is active per node id.
"""

import operator
from typing import Callable, Iterable, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator


BreakpointCondition = Literal["=", ">", "<", ">=", "<="]

CONDITION_ALIASES: dict[str, str] = {
    "eq": "=",
    "==": "=",
    "gt": ">",
    "lt": "<",
    "gte": ">=",
    "lte": "<=",
}

_COMPARATORS: dict[str, Callable[[float, float], bool]] = {
    "=": operator.eq,
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
}


class Breakpoint(BaseModel):
    """A value condition on one node.

    Args:
        node_id: Node whose value is compared.
        condition: Comparison operator ("=", ">", "<", ">=", "<="). The names
            "eq", "gt", "lt", "gte" and "lte" are accepted as well.
        threshold: Value compared against, with no epsilon tolerance. Also
            read from "value", the key used by saved breakpoint lists.
    """

    node_id: str = Field(alias="nodeId")
    condition: BreakpointCondition
    threshold: float = Field(validation_alias=AliasChoices("threshold", "value"))

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("condition", mode="before")
    @classmethod
    def normalize_condition(cls, value):
        if isinstance(value, str):
            return CONDITION_ALIASES.get(value, value)
        return value

    def matches(self, value: float) -> bool:
        """Evaluate the condition against a node value."""
        return _COMPARATORS[self.condition](value, self.threshold)


class BreakpointHit(BaseModel):
    """A breakpoint whose condition held after a step."""

    breakpoint: Breakpoint
    actual_value: float = Field(alias="actualValue")

    class Config:
        populate_by_name = True


def check_breakpoints(
    breakpoints: Iterable[Breakpoint], values: dict[str, float]
) -> Optional[BreakpointHit]:
    """Return the first breakpoint matching ``values``, or None.

    Breakpoints are checked in registration order. A breakpoint on a node
    absent from ``values`` is skipped.
    """
    for bp in breakpoints:
        if bp.node_id not in values:
            continue
        value = values[bp.node_id]
        if bp.matches(value):
            return BreakpointHit(breakpoint=bp, actual_value=value)
    return None


class BreakpointSet:
    """Active breakpoints keyed by node id, in registration order.

    Re-adding a breakpoint for a node replaces it in place (last write wins,
    original position kept).
    """

    def __init__(self, breakpoints: Optional[Iterable[Breakpoint]] = None) -> None:
        self._breakpoints: dict[str, Breakpoint] = {}
        for bp in breakpoints or []:
            self.add(bp)

    @classmethod
    def from_list(cls, breakpoints: Iterable[Breakpoint]) -> "BreakpointSet":
        return cls(breakpoints)

    def add(self, breakpoint: Breakpoint) -> None:
        self._breakpoints[breakpoint.node_id] = breakpoint

    def remove(self, node_id: str) -> bool:
        """Remove the breakpoint on ``node_id``; return whether one existed."""
        return self._breakpoints.pop(node_id, None) is not None

    def clear(self) -> None:
        self._breakpoints.clear()

    def get(self, node_id: str) -> Optional[Breakpoint]:
        return self._breakpoints.get(node_id)

    def has(self, node_id: str) -> bool:
        return node_id in self._breakpoints

    def all(self) -> list[Breakpoint]:
        return list(self._breakpoints.values())

    def check(self, values: dict[str, float]) -> Optional[BreakpointHit]:
        return check_breakpoints(self._breakpoints.values(), values)

    def __len__(self) -> int:
        return len(self._breakpoints)

    def __iter__(self):
        return iter(self._breakpoints.values())
