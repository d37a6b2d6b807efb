"""Pay-per-view endpoints."""

from fastapi import APIRouter, Depends

from ring_director.models import EngineError
from ring_director.pipeline.orchestrator import Show

from .deps import get_show, raise_for
from .models import AddCardMatch, SchedulePPV

router = APIRouter()


@router.get("/ppv")
async def get_ppv(show: Show = Depends(get_show)):
    return show.promotion.booker.get_state()


@router.post("/ppv", status_code=201)
async def schedule_ppv(body: SchedulePPV, show: Show = Depends(get_show)):
    event = show.promotion.schedule_ppv(body.template_id, body.name, body.auto_book)
    if isinstance(event, EngineError):
        raise_for(event)
    return event.dump()


@router.post("/ppv/{event_id}/matches", status_code=201)
async def add_card_match(event_id: str, body: AddCardMatch, show: Show = Depends(get_show)):
    entry = show.promotion.booker.add_match(
        event_id, body.participants, body.match_type,
        body.for_title, body.stipulation, body.is_main_event,
    )
    if isinstance(entry, EngineError):
        raise_for(entry)
    show.promotion.save()
    return entry.dump()


@router.post("/ppv/{event_id}/run")
async def run_ppv(event_id: str, show: Show = Depends(get_show)):
    """Run the event to completion, publishing the show as it goes."""
    event = await show.run_ppv(event_id)
    if isinstance(event, EngineError):
        raise_for(event)
    return event.dump()
