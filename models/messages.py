"""Message protocol between callers and a simulation session.

Inbound messages drive the control state machine; outbound results report
what it did. Both directions are pydantic models discriminated by a ``type``
literal, serialized with camelCase keys.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from models.breakpoints import Breakpoint, BreakpointHit
from models.errors import MalformedMessageError
from models.graph import CausalModel
from models.state import BreachInfo, Snapshot


DEFAULT_DT = 0.1
DEFAULT_STEPS = 1000
DEFAULT_INTERVAL_MS = 50


class SimConfig(BaseModel):
    """Run configuration supplied with ``init``.

    Args:
        dt: Integration step size.
        steps: Step budget; the run completes once the step counter reaches it.
        interval_ms: Wall-clock milliseconds between automatic steps.
    """

    dt: float = Field(default=DEFAULT_DT, ge=0)
    steps: int = Field(default=DEFAULT_STEPS, ge=0)
    interval_ms: float = Field(default=DEFAULT_INTERVAL_MS, gt=0, alias="intervalMs")

    class Config:
        populate_by_name = True


class _Message(BaseModel):
    class Config:
        populate_by_name = True

    def to_wire(self) -> dict[str, Any]:
        """Serialize for transport: camelCase keys, unset optionals omitted."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


# ===== Inbound =====


class InitMessage(_Message):
    type: Literal["init"] = "init"
    model: CausalModel
    config: SimConfig = Field(default_factory=SimConfig)


class RunMessage(_Message):
    type: Literal["run"] = "run"


class PauseMessage(_Message):
    type: Literal["pause"] = "pause"


class ResumeMessage(_Message):
    type: Literal["resume"] = "resume"


class ResetMessage(_Message):
    type: Literal["reset"] = "reset"


class StopMessage(_Message):
    type: Literal["stop"] = "stop"


class StepMessage(_Message):
    type: Literal["step"] = "step"


class SetSpeedMessage(_Message):
    type: Literal["setSpeed"] = "setSpeed"
    interval_ms: float = Field(gt=0, alias="intervalMs")


class UpdateBreakpointsMessage(_Message):
    type: Literal["updateBreakpoints"] = "updateBreakpoints"
    breakpoints: list[Breakpoint] = Field(default_factory=list)


InboundMessage = Annotated[
    Union[
        InitMessage,
        RunMessage,
        PauseMessage,
        ResumeMessage,
        ResetMessage,
        StopMessage,
        StepMessage,
        SetSpeedMessage,
        UpdateBreakpointsMessage,
    ],
    Field(discriminator="type"),
]

INBOUND_TYPES = (
    "init",
    "run",
    "pause",
    "resume",
    "reset",
    "stop",
    "step",
    "setSpeed",
    "updateBreakpoints",
)

_inbound_adapter: TypeAdapter = TypeAdapter(InboundMessage)


def parse_inbound_message(payload: Any) -> InboundMessage:
    """Turn a raw payload into its inbound message model.

    Args:
        payload: A dict (typically decoded JSON) carrying a ``type`` tag.

    Returns:
        The matching inbound message model.

    Raises:
        MalformedMessageError: If the tag is unknown or the fields are invalid.
    """
    if not isinstance(payload, dict):
        raise MalformedMessageError(
            f"Expected a message object, got {type(payload).__name__}"
        )
    tag = payload.get("type")
    if tag not in INBOUND_TYPES:
        raise MalformedMessageError(f"Unknown message type: {tag!r}")
    try:
        return _inbound_adapter.validate_python(payload)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise MalformedMessageError(f"Invalid '{tag}' message: {details}") from e


# ===== Outbound =====


class ReadyResult(_Message):
    type: Literal["ready"] = "ready"


class StateResult(_Message):
    type: Literal["state"] = "state"
    snapshot: Snapshot


class SteppedResult(_Message):
    type: Literal["stepped"] = "stepped"
    snapshot: Snapshot


class PausedResult(_Message):
    type: Literal["paused"] = "paused"
    breach: Optional[BreachInfo] = None


class ResumedResult(_Message):
    type: Literal["resumed"] = "resumed"


class DoneResult(_Message):
    type: Literal["done"] = "done"
    history: list[Snapshot] = Field(default_factory=list)


class BreakpointHitResult(_Message):
    type: Literal["breakpointHit"] = "breakpointHit"
    hit: BreakpointHit


class ErrorResult(_Message):
    type: Literal["error"] = "error"
    message: str


OutboundMessage = Union[
    ReadyResult,
    StateResult,
    SteppedResult,
    PausedResult,
    ResumedResult,
    DoneResult,
    BreakpointHitResult,
    ErrorResult,
]
