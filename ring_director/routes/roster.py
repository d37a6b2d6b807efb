"""Roster endpoints: director state, characters, feuds, surprises, forced lines."""

from fastapi import APIRouter, Depends, HTTPException

from ring_director.models import Responder
from ring_director.pipeline.orchestrator import Show

from .deps import get_show
from .models import CreateFeud, MessageBody, RosterChange, SpeakBody

router = APIRouter()


@router.get("/state")
async def get_state(show: Show = Depends(get_show)):
    """Full promotion state: storyline, titles, matches, events."""
    return show.promotion.get_state()


@router.get("/characters")
async def list_characters(show: Show = Depends(get_show)):
    director = show.promotion.director
    result = []
    for char in show.promotion.registry.all():
        data = char.dump()
        data["alignment"] = director.alignment_of(char.id)
        if char.id in director.active_characters:
            data["status"] = "active"
        elif char.id in director.waiting_in_the_wings:
            data["status"] = "wings"
        else:
            data["status"] = "retired"
        data["heat"] = director.get_heat(char.id)
        result.append(data)
    return result


@router.post("/characters")
async def change_roster(body: RosterChange, show: Show = Depends(get_show)):
    """Move a character between active, wings and retired, or turn them."""
    director = show.promotion.director
    if show.promotion.registry.get(body.character_id) is None:
        raise HTTPException(404, f"Character not found: {body.character_id}")
    if body.action == "activate":
        director.activate(body.character_id)
    elif body.action == "deactivate":
        director.deactivate(body.character_id)
    elif body.action == "wings":
        director.add_to_wings(body.character_id)
    if body.alignment is not None:
        director.set_alignment(body.character_id, body.alignment)
    director.save_state()
    return {
        "activeCharacters": director.active_characters,
        "waitingInTheWings": director.waiting_in_the_wings,
        "alignment": director.alignment_of(body.character_id),
    }


@router.post("/feuds", status_code=201)
async def create_feud(body: CreateFeud, show: Show = Depends(get_show)):
    registry = show.promotion.registry
    for cid in (body.a, body.b):
        if registry.get(cid) is None:
            raise HTTPException(404, f"Character not found: {cid}")
    if body.a == body.b:
        raise HTTPException(400, "A character cannot feud with themselves")
    return show.promotion.director.create_feud(body.a, body.b, body.intensity).dump()


@router.post("/surprise")
async def trigger_surprise(show: Show = Depends(get_show)):
    """Force a surprise entrance from the wings, and let them speak."""
    responder = show.promotion.director.trigger_surprise()
    if responder is None:
        raise HTTPException(400, "Nobody is waiting in the wings")
    text = await show.speak(responder)
    return {"responder": responder.dump(), "text": text}


@router.post("/speak")
async def force_speak(body: SpeakBody, show: Show = Depends(get_show)):
    if show.promotion.registry.get(body.character_id) is None:
        raise HTTPException(404, f"Character not found: {body.character_id}")
    responder = Responder(character_id=body.character_id, reason="forced", context=body.context)
    return {"text": await show.speak(responder)}


@router.post("/messages")
async def post_message(body: MessageBody, show: Show = Depends(get_show)):
    """Feed a chat message into the show as if it arrived in the arena channel."""
    return {"responses": await show.handle_message(body.author, body.content)}
