"""Core domain models.

Every engine component and storage function operates on these types.
Pydantic is used for validation and serialisation at every data boundary:
attributes are snake_case in Python and camelCase on the wire, so a dumped
Feud reads ``{"between": [...], "intensity": 7, "phase": "building",
"startedAt": ...}`` and a match summary carries ``winMethod``/``forTitle``.

Always dump with ``by_alias=True`` when writing to disk or the API.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Alignment = Literal["face", "heel", "tweener"]

FeudPhase = Literal["building", "simmering", "boiling", "cooling"]

MatchPhase = Literal["early", "mid", "late", "finish"]

EventStatus = Literal["scheduled", "in-progress", "completed"]


class Record(BaseModel):
    """Base for every serialisable record: camelCase aliases, name or alias on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def dump(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class EngineError(Record):
    """Structured validation failure returned (never raised) by engine operations."""

    error: str


# ---------------------------------------------------------------------------
# Roster
# ---------------------------------------------------------------------------

class Character(Record):
    """A persona in the registry. Immutable at runtime."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    display_name: str
    alignment: Alignment
    response_chance: float = Field(ge=0.0, le=1.0)
    feud_response_chance: float = Field(ge=0.0, le=1.0)
    initiate_chance: float = Field(default=0.0, ge=0.0, le=1.0)
    rivals: tuple[str, ...] = ()
    nicknames: tuple[str, ...] = ()
    finisher: str | None = None
    entrance_music: str | None = None
    personality: str = ""


class Feud(Record):
    """A rivalry between an unordered pair of characters."""

    between: list[str] = Field(min_length=2, max_length=2)
    intensity: float = 5.0
    phase: FeudPhase = "building"
    started_at: int = 0

    @field_validator("intensity")
    @classmethod
    def _clamp_intensity(cls, value: float) -> float:
        return max(0.0, min(10.0, value))

    def involves(self, a: str, b: str) -> bool:
        return a in self.between and b in self.between


class StorylineEntry(Record):
    """One storyline beat in the director's rolling history."""

    beat: str
    characters: list[str]
    intensity: float | None = None


class Responder(Record):
    """A character the director has decided should react, and the directive why."""

    character_id: str
    reason: str  # "feud-response" | "general-response" | "surprise-<type>" | "scheduled-promo" | "forced"
    context: str = ""
    is_surprise: bool = False
    surprise_type: str | None = None


class DirectorSnapshot(Record):
    """Full mutable state of the storyline director, as written to state.json."""

    saved_at: str | None = None
    feuds: list[Feud] = Field(default_factory=list)
    active_characters: list[str] = Field(default_factory=list)
    waiting_in_the_wings: list[str] = Field(default_factory=list)
    message_count: int = 0
    beats_since_last_surprise: int = 0
    alignment_overrides: dict[str, Alignment] = Field(default_factory=dict)
    heat_map: dict[str, list[int]] = Field(default_factory=dict)
    storyline_history: list[StorylineEntry] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Championships
# ---------------------------------------------------------------------------

class Title(Record):
    """Static championship metadata."""

    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str
    prestige: int
    description: str = ""
    is_tag_team: bool = False
    is_247: bool = False


class TitleReign(Record):
    """A closed reign. Never mutated once appended to a title's history."""

    model_config = ConfigDict(frozen=True)

    holder: str
    won_at: int | None = None
    lost_at: int
    defenses: int = 0
    vacated: bool = False


class TitleState(Record):
    holder: str | None = None
    won_at: int | None = None
    defenses: int = 0
    history: list[TitleReign] = Field(default_factory=list)


class TitleChange(Record):
    title_id: str
    title_name: str
    new_champion: str
    previous_champion: str | None = None
    method: str = "pinfall"


class HeldTitle(Record):
    title_id: str
    name: str
    display_name: str
    prestige: int
    holder: str
    won_at: int | None = None
    defenses: int = 0


# ---------------------------------------------------------------------------
# Matches
# ---------------------------------------------------------------------------

class MatchType(Record):
    """A catalog entry. ``win_conditions[0]`` is the primary pin-style condition."""

    model_config = ConfigDict(frozen=True)

    name: str
    emoji: str = ""
    min_participants: int
    max_participants: int
    win_conditions: tuple[str, ...]
    min_rounds: int
    max_rounds: int
    weapons_allowed: bool = False
    extreme: bool = False
    is_tag_team: bool = False


class MatchEvent(Record):
    """One resolved round in a live match's event log."""

    round: int
    phase: MatchPhase
    beat: str
    actor: str
    target: str
    momentum_swing: int
    damage_dealt: int


class Match(Record):
    """A live match. Owned by the simulator for the duration of one simulation."""

    id: str
    type: str
    type_name: str
    type_emoji: str = ""
    participants: list[str]
    stipulation: str | None = None
    for_title: str | None = None
    total_rounds: int
    current_round: int = 0
    momentum: dict[str, float] = Field(default_factory=dict)
    damage: dict[str, float] = Field(default_factory=dict)
    eliminated: list[str] = Field(default_factory=list)
    events: list[MatchEvent] = Field(default_factory=list)
    winner: str | None = None
    win_method: str | None = None
    started_at: int = 0


class RoundResult(Record):
    """Snapshot returned after each simulated round."""

    round: int
    total_rounds: int
    phase: MatchPhase
    beat: str
    actor: str | None = None
    target: str | None = None
    momentum_swing: int = 0
    damage_dealt: int = 0
    momentum: dict[str, float] = Field(default_factory=dict)
    damage: dict[str, float] = Field(default_factory=dict)
    is_finish: bool = False
    winner: str | None = None
    win_method: str | None = None
    narrative: str | None = None


class MatchResult(Record):
    match: Match
    rounds: list[RoundResult]


class MatchSummary(Record):
    """What survives in history after a live match is discarded."""

    id: str
    type: str
    participants: list[str]
    winner: str | None
    win_method: str | None
    rounds: int
    for_title: str | None = None
    timestamp: int


class RoundPrompt(Record):
    narrative: str
    commentary_prompt: str
    character_prompt: str


# ---------------------------------------------------------------------------
# Pay-per-view events
# ---------------------------------------------------------------------------

class PPVTemplate(Record):
    model_config = ConfigDict(frozen=True)

    name: str
    emoji: str = ""
    tagline: str = ""
    theme: str = ""
    prestige: int = 5
    min_matches: int = 3
    max_matches: int = 5
    default_match_type: str = "singles"


class CardEntry(Record):
    """A booked match. ``order`` is the 1-based card position."""

    order: int
    participants: list[str]
    match_type: str = "singles"
    for_title: str | None = None
    stipulation: str | None = None
    is_main_event: bool = False


class MatchResultRecord(Record):
    order: int
    participants: list[str]
    match_type: str
    winner: str | None
    win_method: str | None
    rounds: int = 0
    for_title: str | None = None
    title_change: TitleChange | None = None
    timestamp: int = 0


class PPVEvent(Record):
    id: str
    template_id: str
    name: str
    emoji: str = ""
    tagline: str = ""
    theme: str = ""
    prestige: int = 5
    scheduled_at: int | None = None
    match_card: list[CardEntry] = Field(default_factory=list)
    status: EventStatus = "scheduled"
    created_at: int = 0
    started_at: int | None = None
    completed_at: int | None = None
    results: list[MatchResultRecord] = Field(default_factory=list)
