"""Health check endpoint."""

from typing import Any

import structlog
from fastapi import APIRouter, Depends

from ..state import EmulatorState, get_state

logger = structlog.get_logger("emulator.health")
router = APIRouter()


@router.get("/health")
async def health_check(state: EmulatorState = Depends(get_state)) -> dict[str, Any]:
    """
    Health check endpoint.

    Not subject to authorization or throttling.
    """
    uptime = state.get_uptime_seconds()
    logger.debug("Health check requested", uptime_seconds=round(uptime, 2))
    return {
        "status": "ok",
        "uptime_seconds": round(uptime, 2),
        "databases": len(state.store.databases),
    }
