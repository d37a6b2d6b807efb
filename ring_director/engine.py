"""The promotion: one owned instance wiring every engine component together.

Lifecycle is construct -> load() -> operate -> save() -> close(). All
components share one random source and one clock so a seeded promotion
replays the same show.
"""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Any

from ring_director.background import BackgroundWriter
from ring_director.championships import ChampionshipLedger
from ring_director.characters import CharacterRegistry
from ring_director.clock import Clock, now_ms
from ring_director.match_engine import MatchSimulator
from ring_director.models import (
    CardEntry,
    EngineError,
    MatchResult,
    MatchResultRecord,
    PPVEvent,
    TitleChange,
)
from ring_director.ppv import PPVBooker
from ring_director.storage import StateStore
from ring_director.storyline import StorylineDirector

logger = logging.getLogger(__name__)


class Promotion:
    def __init__(
        self,
        state_dir: Path | str | None = None,
        registry: CharacterRegistry | None = None,
        rng: random.Random | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.registry = registry or CharacterRegistry()
        self.rng = rng or random.Random()
        self.clock = clock or now_ms
        self.store = StateStore(Path(state_dir)) if state_dir is not None else None
        self.writer = BackgroundWriter() if self.store is not None else None

        self.director = StorylineDirector(
            self.registry, store=self.store, writer=self.writer, rng=self.rng, clock=self.clock,
        )
        self.ledger = ChampionshipLedger(clock=self.clock)
        self.simulator = MatchSimulator(self.registry, rng=self.rng, clock=self.clock)
        self.booker = PPVBooker(self.registry, clock=self.clock)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Restore everything from disk. A bad file leaves that component at its defaults."""
        self.director.load_state()
        if self.store is None:
            return
        try:
            data = self.store.load_engine()
        except Exception as e:
            logger.error("Failed to load engine state: %s", e)
            return
        for key, component in (
            ("championships", self.ledger),
            ("matches", self.simulator),
            ("ppv", self.booker),
        ):
            try:
                component.load_from(data.get(key))
            except Exception as e:
                logger.error("Ignoring saved %s state: %s", key, e)

    def engine_state(self) -> dict[str, Any]:
        return {
            "championships": self.ledger.to_dict(),
            "matches": self.simulator.to_dict(),
            "ppv": self.booker.to_dict(),
        }

    def save(self) -> None:
        self.director.save_state()
        if self.store is None or self.writer is None:
            return
        self.writer.submit("engine state", self.store.save_engine, self.engine_state())

    def close(self) -> None:
        self.save()
        if self.writer is not None:
            self.writer.close()

    def get_state(self) -> dict[str, Any]:
        return {
            "storyline": self.director.get_state(),
            "championships": self.ledger.get_state(),
            "matches": self.simulator.get_state(),
            "ppv": self.booker.get_state(),
        }

    # ------------------------------------------------------------------
    # Matches
    # ------------------------------------------------------------------

    def settle_title(self, title_id: str | None, result: MatchResult) -> TitleChange | None:
        """Apply a finished match to the title it was contested for."""
        winner = result.match.winner
        if not title_id or winner is None:
            return None
        if self.ledger.get_champion(title_id) == winner:
            self.ledger.record_defense(title_id)
            return None
        return self.ledger.award_title(title_id, winner, result.match.win_method or "pinfall")

    def simulate_match(
        self,
        participants: list[str],
        match_type: str = "singles",
        for_title: str | None = None,
    ) -> tuple[MatchResult, TitleChange | None] | EngineError:
        result = self.simulator.simulate_full_match(participants, match_type, for_title=for_title)
        if isinstance(result, EngineError):
            return result
        change = self.settle_title(for_title, result)
        self.save()
        return result, change

    # ------------------------------------------------------------------
    # Pay-per-views
    # ------------------------------------------------------------------

    def schedule_ppv(
        self, template_id: str, name: str | None = None, auto_book: bool = True,
    ) -> PPVEvent | EngineError:
        event = self.booker.schedule_event(template_id, name=name)
        if isinstance(event, EngineError):
            return event
        if auto_book:
            event.match_card = self.booker.auto_book_card(
                event, self.director.feuds, self.director.active_characters, self.ledger,
            )
        self.save()
        return event

    def play_card_match(
        self, entry: CardEntry,
    ) -> tuple[MatchResult, MatchResultRecord] | EngineError:
        """Simulate one entry of the live event's card and log its result."""
        result = self.simulator.simulate_full_match(
            entry.participants, entry.match_type,
            for_title=entry.for_title, stipulation=entry.stipulation,
        )
        if isinstance(result, EngineError):
            return result
        change = self.settle_title(entry.for_title, result)
        record = self.booker.record_match_result(entry.order, result, change)
        if isinstance(record, EngineError):
            return record
        return result, record

    def run_card_match(self, entry: CardEntry) -> MatchResultRecord | EngineError:
        played = self.play_card_match(entry)
        if isinstance(played, EngineError):
            return played
        return played[1]

    def run_ppv(self, event_id: str) -> PPVEvent | EngineError:
        """Run a scheduled event start to finish."""
        event = self.booker.start_event(event_id)
        if isinstance(event, EngineError):
            return event
        for entry in list(event.match_card):
            record = self.run_card_match(entry)
            if isinstance(record, EngineError):
                logger.warning("Skipping match %d of %s: %s", entry.order, event.name, record.error)
        completed = self.booker.complete_event()
        self.save()
        return completed if completed is not None else event
