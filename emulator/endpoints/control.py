"""Test control endpoints: throttling injection and state reset."""

import structlog
from fastapi import APIRouter, Depends, Path, Query

from ..state import EmulatorState, get_state

logger = structlog.get_logger("emulator.control")
router = APIRouter(prefix="/_emulator", tags=["emulator-control"])


@router.post("/throttle/count/{count}")
async def set_throttle_count(
    count: int = Path(..., description="Number of requests to answer with 429", ge=0, le=1000),
    retry_after_ms: int = Query(0, description="Value of x-ms-retry-after-ms", ge=0, le=60000),
    state: EmulatorState = Depends(get_state),
):
    """
    Answer the next ``count`` requests with 429 Too Many Requests.

    Every throttled response carries ``x-ms-retry-after-ms``.
    """
    await state.throttle.set_count(count, retry_after_ms)
    return {"remaining": count, "retry_after_ms": retry_after_ms}


@router.post("/throttle/reset")
async def reset_throttle(state: EmulatorState = Depends(get_state)):
    await state.throttle.reset()
    return {"remaining": 0, "retry_after_ms": 0}


@router.get("/throttle")
async def throttle_status(state: EmulatorState = Depends(get_state)):
    return await state.throttle.get_status()


@router.post("/reset")
async def reset_emulator(state: EmulatorState = Depends(get_state)):
    """Drop every resource and stop throttling."""
    state.store.clear()
    await state.throttle.reset()
    logger.info("Emulator state reset")
    return {"message": "All resources have been removed"}
