"""Pydantic request models for API endpoints."""

from typing import Literal

from pydantic import BaseModel, Field

from ring_director.models import Alignment


class RosterChange(BaseModel):
    character_id: str
    action: Literal["activate", "deactivate", "wings"] | None = None
    alignment: Alignment | None = None


class CreateFeud(BaseModel):
    a: str
    b: str
    intensity: float = Field(default=5.0, ge=0.0, le=10.0)


class SpeakBody(BaseModel):
    character_id: str
    context: str = ""


class MessageBody(BaseModel):
    author: str
    content: str


class CreateMatch(BaseModel):
    participants: list[str]
    match_type: str = "singles"
    for_title: str | None = None


class AwardTitle(BaseModel):
    character_id: str
    method: str = "pinfall"


class SchedulePPV(BaseModel):
    template_id: str
    name: str | None = None
    auto_book: bool = True


class AddCardMatch(BaseModel):
    participants: list[str]
    match_type: str | None = None
    for_title: str | None = None
    stipulation: str | None = None
    is_main_event: bool = False
