"""Manual scheduler tick."""

from fastapi import APIRouter

from slotwise.api.dependencies import EngineDep
from slotwise.scheduling import TickReport

router = APIRouter()


@router.post("/scheduler/tick", response_model=TickReport)
async def run_tick(engine: EngineDep) -> TickReport:
    """Run one scheduler tick now (skipped if one is already running)."""
    return await engine.driver.tick()
