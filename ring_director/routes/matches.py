"""Match endpoints."""

from fastapi import APIRouter, Depends

from ring_director.models import EngineError
from ring_director.pipeline.orchestrator import Show

from .deps import get_show, raise_for
from .models import CreateMatch

router = APIRouter()


@router.get("/matches")
async def get_matches(show: Show = Depends(get_show)):
    """Recent match summaries and the match-type catalog."""
    return show.promotion.simulator.get_state()


@router.post("/matches")
async def simulate_match(body: CreateMatch, show: Show = Depends(get_show)):
    outcome = show.promotion.simulate_match(body.participants, body.match_type, body.for_title)
    if isinstance(outcome, EngineError):
        raise_for(outcome)
    result, change = outcome
    return {
        **result.dump(),
        "titleChange": change.dump() if change else None,
    }
