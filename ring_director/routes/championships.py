"""Championship endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from ring_director.pipeline.orchestrator import Show

from .deps import get_show
from .models import AwardTitle

router = APIRouter()


@router.get("/championships")
async def get_championships(show: Show = Depends(get_show)):
    return show.promotion.ledger.get_state()


@router.post("/championships/{title_id}/award")
async def award_title(title_id: str, body: AwardTitle, show: Show = Depends(get_show)):
    promotion = show.promotion
    if promotion.registry.get(body.character_id) is None:
        raise HTTPException(404, f"Character not found: {body.character_id}")
    change = promotion.ledger.award_title(title_id, body.character_id, body.method)
    if change is None:
        raise HTTPException(404, f"Title not found: {title_id}")
    promotion.save()
    return change.dump()


@router.post("/championships/{title_id}/vacate")
async def vacate_title(title_id: str, show: Show = Depends(get_show)):
    promotion = show.promotion
    if title_id not in promotion.ledger.titles:
        raise HTTPException(404, f"Title not found: {title_id}")
    promotion.ledger.vacate_title(title_id)
    promotion.save()
    return promotion.ledger.get_state()[title_id]
