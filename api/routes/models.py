"""Model endpoints.

Serves the built-in demo model so callers have a ready-made graph to send
with ``init``.
"""

from typing import Any

from fastapi import APIRouter

from models.graph import seed_model

router = APIRouter(
    prefix="/models",
    tags=["models"],
)


@router.get("/seed")
async def get_seed_model() -> dict[str, Any]:
    """Return the demo model in wire format (camelCase keys)."""
    return seed_model().model_dump(by_alias=True, mode="json", exclude_none=True)
