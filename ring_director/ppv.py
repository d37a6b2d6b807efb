"""Pay-per-view scheduling and booking.

Events move strictly forward: scheduled -> in-progress -> completed. Only
one event may be in progress at a time. There is no cancel verb; a
scheduled event can simply be left unstarted.

auto_book_card() is a first-fit greedy booker. Feuds are taken in
descending intensity, each pair booked once per card, with the match type
escalating by intensity (>= 8 hell-in-a-cell, >= 6 no-dq, else singles).
After at most five feud matches the remaining active roster is paired off
in order until the card holds six matches.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from ring_director.championships import ChampionshipLedger
from ring_director.characters import CharacterRegistry
from ring_director.clock import Clock, now_ms
from ring_director.match_engine import MATCH_TYPES
from ring_director.models import (
    CardEntry,
    EngineError,
    Feud,
    MatchResult,
    MatchResultRecord,
    PPVEvent,
    PPVTemplate,
    TitleChange,
)

logger = logging.getLogger(__name__)

PPV_TEMPLATES: dict[str, PPVTemplate] = {
    "wrestlemania": PPVTemplate(
        name="WrestleMania", emoji="🌟",
        tagline="The Showcase of the Immortals",
        theme="The grandest stage of them all. Every match matters. Legacies are defined tonight.",
        prestige=10, min_matches=4, max_matches=7,
    ),
    "summerslam": PPVTemplate(
        name="SummerSlam", emoji="☀️",
        tagline="The Biggest Party of the Summer",
        theme="Summer heat. Tempers flare. The feuds reach their boiling point.",
        prestige=9, min_matches=4, max_matches=6,
    ),
    "royal-rumble": PPVTemplate(
        name="Royal Rumble", emoji="👑",
        tagline="Every Man for Himself",
        theme="The road to WrestleMania starts here. 30 men, one winner, a main event at WrestleMania.",
        prestige=9,
    ),
    "survivor-series": PPVTemplate(
        name="Survivor Series", emoji="⚔️",
        tagline="The One Night of the Year Where Raw and SmackDown Collide",
        theme="Brand supremacy. Elimination matches. Only the survivors remain.",
        prestige=8,
    ),
    "hell-in-a-cell-ppv": PPVTemplate(
        name="Hell in a Cell", emoji="😈",
        tagline="Satan's Structure",
        theme="The most demonic structure in WWE. No escape. No mercy.",
        prestige=8, default_match_type="hell-in-a-cell",
    ),
    "money-in-the-bank": PPVTemplate(
        name="Money in the Bank", emoji="💰",
        tagline="Opportunity Hangs Above the Ring",
        theme="A ladder match for a guaranteed title shot. Cash in anytime, anywhere.",
        prestige=8,
    ),
    "tables-ladders-chairs": PPVTemplate(
        name="TLC: Tables, Ladders & Chairs", emoji="🪜🪑",
        tagline="Oh My!",
        theme="Weapons are not just legal. They're encouraged.",
        prestige=7, default_match_type="no-dq",
    ),
    "elimination-chamber": PPVTemplate(
        name="Elimination Chamber", emoji="🔒",
        tagline="No Way Out",
        theme="Six men. Four pods. One chance. The Chamber decides everything.",
        prestige=8,
    ),
}

MAX_FEUD_MATCHES = 5
MAX_CARD_SIZE = 6
COMPLETED_LIMIT = 20
RECENT_COMPLETED = 10


def tier_for_intensity(intensity: float) -> str:
    if intensity >= 8:
        return "hell-in-a-cell"
    if intensity >= 6:
        return "no-dq"
    return "singles"


class PPVBooker:
    def __init__(self, registry: CharacterRegistry, clock: Clock | None = None) -> None:
        self.registry = registry
        self._clock = clock or now_ms
        self.scheduled_events: list[PPVEvent] = []
        self.completed_events: list[PPVEvent] = []
        self.active_event: PPVEvent | None = None

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load_from(self, data: dict[str, Any] | None) -> None:
        if not data:
            return
        if data.get("scheduledEvents") is not None:
            self.scheduled_events = [PPVEvent.model_validate(e) for e in data["scheduledEvents"]]
        if data.get("completedEvents") is not None:
            completed = [PPVEvent.model_validate(e) for e in data["completedEvents"]]
            self.completed_events = completed[-COMPLETED_LIMIT:]

    def to_dict(self) -> dict[str, Any]:
        return {
            "scheduledEvents": [e.dump() for e in self.scheduled_events],
            "completedEvents": [e.dump() for e in self.completed_events[-COMPLETED_LIMIT:]],
        }

    def get_state(self) -> dict[str, Any]:
        return {
            "scheduled": [e.dump() for e in self.scheduled_events],
            "active": self.active_event.dump() if self.active_event else None,
            "completed": [e.dump() for e in self.completed_events[-RECENT_COMPLETED:]],
            "templates": [{"id": tid, **t.dump()} for tid, t in PPV_TEMPLATES.items()],
        }

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def schedule_event(
        self,
        template_id: str,
        *,
        name: str | None = None,
        scheduled_at: int | None = None,
        match_card: list[CardEntry | dict[str, Any]] | None = None,
    ) -> PPVEvent | EngineError:
        template = PPV_TEMPLATES.get(template_id)
        if template is None:
            return EngineError(error=f"Unknown PPV template: {template_id}")

        event = PPVEvent(
            id=f"ppv-{uuid.uuid4().hex[:12]}",
            template_id=template_id,
            name=name or template.name,
            emoji=template.emoji,
            tagline=template.tagline,
            theme=template.theme,
            prestige=template.prestige,
            scheduled_at=scheduled_at,
            match_card=[CardEntry.model_validate(m) for m in match_card or []],
            created_at=self._clock(),
        )
        self.scheduled_events.append(event)
        logger.info("Scheduled %s (%s)", event.name, event.id)
        return event

    def get_event(self, event_id: str) -> PPVEvent | None:
        if self.active_event is not None and self.active_event.id == event_id:
            return self.active_event
        for event in (*self.scheduled_events, *self.completed_events):
            if event.id == event_id:
                return event
        return None

    def add_match(
        self,
        event_id: str,
        participants: list[str],
        match_type: str | None = None,
        for_title: str | None = None,
        stipulation: str | None = None,
        is_main_event: bool = False,
    ) -> CardEntry | EngineError:
        """Append a match to a scheduled event's card.

        ``match_type`` defaults to the event template's house match type.
        """
        event = next((e for e in self.scheduled_events if e.id == event_id), None)
        if event is None:
            if self.get_event(event_id) is not None:
                return EngineError(error="Event already started/completed")
            return EngineError(error="Event not found")
        if event.status != "scheduled":
            return EngineError(error="Event already started/completed")

        if match_type is None:
            template = PPV_TEMPLATES.get(event.template_id)
            match_type = template.default_match_type if template else "singles"
        if match_type not in MATCH_TYPES:
            return EngineError(error=f"Unknown match type: {match_type}")
        for p in participants:
            if self.registry.get(p) is None:
                return EngineError(error=f"Unknown character: {p}")

        entry = CardEntry(
            order=len(event.match_card) + 1,
            participants=list(participants),
            match_type=match_type,
            for_title=for_title,
            stipulation=stipulation,
            is_main_event=is_main_event,
        )
        event.match_card.append(entry)
        return entry

    def auto_book_card(
        self,
        event: PPVEvent,
        feuds: list[Feud],
        active_characters: list[str],
        ledger: ChampionshipLedger | None,
    ) -> list[CardEntry]:
        """Build a card from feuds and roster. Does not touch ``event``."""
        card: list[CardEntry] = []
        booked: set[str] = set()

        for feud in sorted(feuds, key=lambda f: f.intensity, reverse=True):
            c1, c2 = feud.between
            if c1 in booked or c2 in booked:
                continue
            if self.registry.get(c1) is None or self.registry.get(c2) is None:
                continue

            card.append(CardEntry(
                order=len(card) + 1,
                participants=[c1, c2],
                match_type=tier_for_intensity(feud.intensity),
                for_title=self._title_at_stake(ledger, c1, c2),
                is_main_event=not card,
            ))
            booked.update((c1, c2))
            if len(card) >= MAX_FEUD_MATCHES:
                break

        unbooked = [c for c in active_characters if c not in booked and self.registry.get(c)]
        while len(unbooked) >= 2 and len(card) < MAX_CARD_SIZE:
            c1, c2 = unbooked.pop(0), unbooked.pop(0)
            card.append(CardEntry(order=len(card) + 1, participants=[c1, c2]))
            booked.update((c1, c2))

        logger.debug("Auto-booked %d matches for %s", len(card), event.name)
        return card

    @staticmethod
    def _title_at_stake(ledger: ChampionshipLedger | None, c1: str, c2: str) -> str | None:
        if ledger is None:
            return None
        for title_id, state in ledger.titles.items():
            if state.holder in (c1, c2):
                return title_id
        return None

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    def start_event(self, event_id: str) -> PPVEvent | EngineError:
        event = next((e for e in self.scheduled_events if e.id == event_id), None)
        if event is None:
            return EngineError(error="Event not found")
        if not event.match_card:
            return EngineError(error="No matches on the card")
        if self.active_event is not None:
            return EngineError(error=f"{self.active_event.name} is already in progress")

        event.status = "in-progress"
        event.started_at = self._clock()
        event.results = []
        self.active_event = event
        self.scheduled_events.remove(event)
        logger.info("%s is LIVE with %d matches", event.name, len(event.match_card))
        return event

    def record_match_result(
        self,
        order: int,
        result: MatchResult,
        title_change: TitleChange | None = None,
    ) -> MatchResultRecord | EngineError:
        event = self.active_event
        if event is None:
            return EngineError(error="No event in progress")
        entry = next((m for m in event.match_card if m.order == order), None)
        if entry is None:
            return EngineError(error=f"No match {order} on the card")

        record = MatchResultRecord(
            order=order,
            participants=list(entry.participants),
            match_type=entry.match_type,
            winner=result.match.winner,
            win_method=result.match.win_method,
            rounds=len(result.rounds),
            for_title=entry.for_title,
            title_change=title_change,
            timestamp=self._clock(),
        )
        event.results.append(record)
        return record

    def complete_event(self) -> PPVEvent | None:
        event = self.active_event
        if event is None:
            return None
        event.status = "completed"
        event.completed_at = self._clock()
        self.completed_events.append(event)
        if len(self.completed_events) > COMPLETED_LIMIT:
            self.completed_events = self.completed_events[-COMPLETED_LIMIT:]
        self.active_event = None
        logger.info("%s is in the books", event.name)
        return event

    # ------------------------------------------------------------------
    # Show copy
    # ------------------------------------------------------------------

    def _display(self, character_id: str | None) -> str:
        char = self.registry.get(character_id) if character_id else None
        return char.display_name if char else str(character_id)

    def build_hype_messages(self, event: PPVEvent) -> list[str]:
        emoji = event.emoji or "🎤"
        messages = [
            f"{emoji} **{event.name.upper()}** {emoji}\n"
            f"*\"{event.tagline or 'This is gonna be good'}\"*\n\n"
            f"{event.theme or 'The biggest event of the year!'}\n\n"
            "**TONIGHT'S CARD:**"
        ]
        for match in event.match_card:
            names = " vs ".join(self._display(p) for p in match.participants)
            type_str = f" [{match.match_type.upper()}]" if match.match_type != "singles" else ""
            title_str = f" *({match.for_title} on the line!)*" if match.for_title else ""
            main_str = " 🌟 **MAIN EVENT**" if match.is_main_event else ""
            messages.append(f"{match.order}. {names}{type_str}{title_str}{main_str}")
        return messages

    def build_results_summary(self, event: PPVEvent) -> str:
        if not event.results:
            return ""
        lines = [f"{event.emoji} **{event.name.upper()}: RESULTS** {event.emoji}", ""]
        for result in event.results:
            entry = next((m for m in event.match_card if m.order == result.order), None)
            participants = (
                " vs ".join(self._display(p) for p in entry.participants) if entry else "Unknown"
            )
            main_str = " 🌟" if entry is not None and entry.is_main_event else ""
            lines.append(f"**Match {result.order}{main_str}:** {participants}")
            lines.append(f"  🏆 Winner: {self._display(result.winner)} ({result.win_method})")
            if result.title_change is not None:
                lines.append("  👑 NEW CHAMPION!")
            lines.append("")
        return "\n".join(lines) + "\n"
