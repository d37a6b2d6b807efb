"""Storyline director: the booker that decides who reacts, and why.

Owns feuds, the active/wings roster partition, per-character heat and the
rolling storyline history. For every inbound message it decides which active
characters respond (feud partners respond more often, mentions boost the
chance, recent activity dampens it), synthesises a feud directive when the
author is a rival, and occasionally pulls someone out of the wings for a
surprise entrance.

Response chance for character C reacting to message M from author A:

  base   = C.feud_response_chance if A in C.rivals else C.response_chance
  base  += 0.3 if C is mentioned in M (capped at 1.0)
  base  *= 0.7 if heat(C) > 5
  base  *= 0.5 if heat(C) > 10     (compounds: x0.35 overall)

Heat is the number of reactions in the trailing 30 minutes; stale entries
are purged lazily whenever heat is read or written.

Surprise ramp: no surprise before 8 beats since the last one, then
min(0.35, (beats - 8) * 0.025) per message.

State persists to a StateStore: a full snapshot every 10th message (and on
roster/feud edits), plus an append-only audit line per storyline beat. Both
writes are fire-and-forget.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime, timezone
from typing import Any

from ring_director.background import BackgroundWriter
from ring_director.beats import FEUD_BEATS, SURPRISE_BEATS, pick_beat
from ring_director.characters import CharacterRegistry
from ring_director.clock import Clock, now_ms
from ring_director.models import (
    Alignment,
    DirectorSnapshot,
    Feud,
    Responder,
    StorylineEntry,
)
from ring_director.prompts import (
    DEFAULT_ENTRANCE,
    FEUD_DIRECTIVES,
    PROMO_DIRECTIVES,
    RIVAL_PROMO_DIRECTIVES,
    SURPRISE_DIRECTIVES,
    format_intensity,
    render_prompt,
)
from ring_director.storage import StateStore

logger = logging.getLogger(__name__)

HEAT_WINDOW_MS = 30 * 60 * 1000
MENTION_BOOST = 0.3
HEAT_SOFT_LIMIT = 5
HEAT_HARD_LIMIT = 10
FEUD_ESCALATION = 0.3
DEFAULT_FEUD_INTENSITY = 5.0
MAX_INTENSITY = 10.0

SURPRISE_MIN_BEATS = 8
SURPRISE_RAMP = 0.025
SURPRISE_MAX_CHANCE = 0.35

SAVE_EVERY = 10
HISTORY_LIMIT = 100
RECENT_HISTORY = 20

DEFAULT_FEUDS = (
    (("john-cena", "the-rock"), 7.0, "building"),
    (("stone-cold", "triple-h"), 6.0, "building"),
    (("undertaker", "mankind"), 5.0, "simmering"),
)
DEFAULT_ACTIVE = ("john-cena", "the-rock")
DEFAULT_WINGS = ("stone-cold", "undertaker", "macho-man", "triple-h", "mankind")


class StorylineDirector:
    def __init__(
        self,
        registry: CharacterRegistry,
        store: StateStore | None = None,
        writer: BackgroundWriter | None = None,
        rng: random.Random | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.registry = registry
        self._store = store
        self._writer = writer
        self._rng = rng or random.Random()
        self._clock = clock or now_ms

        started = self._clock()
        self.feuds: list[Feud] = [
            Feud(between=list(pair), intensity=intensity, phase=phase, started_at=started)
            for pair, intensity, phase in DEFAULT_FEUDS
        ]
        self.active_characters: list[str] = list(DEFAULT_ACTIVE)
        self.waiting_in_the_wings: list[str] = list(DEFAULT_WINGS)
        self.message_count = 0
        self.beats_since_last_surprise = 0
        self.alignment_overrides: dict[str, Alignment] = {}
        self.heat_map: dict[str, list[int]] = {}
        self.storyline_history: list[StorylineEntry] = []
        self.session_started_at = started
        self.loaded = False

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def snapshot(self) -> DirectorSnapshot:
        """A detached copy of the full mutable state."""
        return DirectorSnapshot(
            saved_at=datetime.now(timezone.utc).isoformat(),
            feuds=[f.model_copy(deep=True) for f in self.feuds],
            active_characters=list(self.active_characters),
            waiting_in_the_wings=list(self.waiting_in_the_wings),
            message_count=self.message_count,
            beats_since_last_surprise=self.beats_since_last_surprise,
            alignment_overrides=dict(self.alignment_overrides),
            heat_map={k: list(v) for k, v in self.heat_map.items()},
            storyline_history=[e.model_copy() for e in self.storyline_history[-HISTORY_LIMIT:]],
        )

    def restore(self, snapshot: DirectorSnapshot) -> None:
        """Apply the fields present in ``snapshot``; absent fields keep their defaults."""
        present = snapshot.model_fields_set
        if "feuds" in present:
            self.feuds = [f.model_copy(deep=True) for f in snapshot.feuds]
        if "active_characters" in present:
            self.active_characters = list(snapshot.active_characters)
        if "waiting_in_the_wings" in present:
            self.waiting_in_the_wings = [
                c for c in snapshot.waiting_in_the_wings if c not in self.active_characters
            ]
        if "message_count" in present:
            self.message_count = snapshot.message_count
        if "beats_since_last_surprise" in present:
            self.beats_since_last_surprise = snapshot.beats_since_last_surprise
        if "alignment_overrides" in present:
            self.alignment_overrides = dict(snapshot.alignment_overrides)
        if "heat_map" in present:
            self.heat_map = {k: list(v) for k, v in snapshot.heat_map.items()}
        if "storyline_history" in present:
            self.storyline_history = list(snapshot.storyline_history[-HISTORY_LIMIT:])

    def load_state(self) -> bool:
        """Restore from the store. Never raises; returns True if a snapshot was applied."""
        self.loaded = True
        if self._store is None:
            return False
        try:
            snapshot = self._store.load_director()
        except Exception as e:
            logger.error("Failed to load storyline state: %s", e)
            return False
        if snapshot is None:
            logger.info("No saved storyline state, starting fresh")
            return False
        self.restore(snapshot)
        logger.info(
            "Loaded storyline state: %d messages, %d feuds, %d active characters",
            self.message_count, len(self.feuds), len(self.active_characters),
        )
        return True

    def save_state(self) -> None:
        """Persist a snapshot without blocking the decision loop."""
        if self._store is None:
            return
        self._persist("storyline snapshot", self._store.save_director, self.snapshot())

    def _append_history(self, entry: StorylineEntry) -> None:
        self.storyline_history.append(entry)
        if len(self.storyline_history) > HISTORY_LIMIT:
            self.storyline_history = self.storyline_history[-HISTORY_LIMIT:]
        if self._store is not None:
            record = {**entry.dump(), "timestamp": self._clock()}
            self._persist("storyline history", self._store.append_history, record)

    def _persist(self, label: str, fn, *args: Any) -> None:
        if self._writer is not None:
            self._writer.submit(label, fn, *args)
            return
        try:
            fn(*args)
        except Exception as e:
            logger.warning("Failed to write %s: %s", label, e)

    # ------------------------------------------------------------------
    # Heat
    # ------------------------------------------------------------------

    def _purge_heat(self, character_id: str, now: int) -> list[int]:
        cutoff = now - HEAT_WINDOW_MS
        fresh = [t for t in self.heat_map.get(character_id, []) if t > cutoff]
        self.heat_map[character_id] = fresh
        return fresh

    def update_heat(self, character_id: str) -> None:
        now = self._clock()
        self._purge_heat(character_id, now).append(now)

    def get_heat(self, character_id: str) -> int:
        if character_id not in self.heat_map:
            return 0
        return len(self._purge_heat(character_id, self._clock()))

    # ------------------------------------------------------------------
    # Responders
    # ------------------------------------------------------------------

    def response_chance(self, character_id: str, message: str, is_feud: bool) -> float:
        char = self.registry.get(character_id)
        if char is None:
            return 0.0
        chance = char.feud_response_chance if is_feud else char.response_chance
        if self.registry.is_mentioned(char, message):
            chance = min(1.0, chance + MENTION_BOOST)
        heat = self.get_heat(character_id)
        if heat > HEAT_SOFT_LIMIT:
            chance *= 0.7
        if heat > HEAT_HARD_LIMIT:
            chance *= 0.5
        return chance

    def decide_responders(self, message: str, author_id: str | None = None) -> list[Responder]:
        """Decide which active characters react to ``message``."""
        responders: list[Responder] = []
        self.message_count += 1
        self.beats_since_last_surprise += 1

        if author_id:
            self.update_heat(author_id)

        for char_id in list(self.active_characters):
            if char_id == author_id:
                continue
            if self.registry.get(char_id) is None:
                continue

            is_feud = bool(author_id) and author_id in self.registry.feud_partners(char_id)
            chance = self.response_chance(char_id, message, is_feud)

            if self._rng.random() < chance:
                context = self.generate_feud_context(char_id, author_id) if is_feud else ""
                responders.append(Responder(
                    character_id=char_id,
                    reason="feud-response" if is_feud else "general-response",
                    context=context,
                ))
                self.update_heat(char_id)

        if self.should_trigger_surprise():
            surprise = self.trigger_surprise()
            if surprise is not None:
                responders.append(surprise)

        if self.message_count % SAVE_EVERY == 0:
            self.save_state()

        return responders

    # ------------------------------------------------------------------
    # Feuds
    # ------------------------------------------------------------------

    def get_feud(self, a: str, b: str) -> Feud | None:
        for feud in self.feuds:
            if feud.involves(a, b):
                return feud
        return None

    def create_feud(self, a: str, b: str, intensity: float = DEFAULT_FEUD_INTENSITY) -> Feud:
        """Start a feud, or reset an existing one to ``intensity`` and phase building."""
        intensity = max(0.0, min(MAX_INTENSITY, intensity))
        existing = self.get_feud(a, b)
        if existing is not None:
            existing.intensity = intensity
            existing.phase = "building"
            return existing
        feud = Feud(between=[a, b], intensity=intensity, phase="building", started_at=self._clock())
        self.feuds.append(feud)
        self.save_state()
        return feud

    def generate_feud_context(self, character_id: str, opponent_id: str) -> str:
        """Pick a feud beat, escalate the feud, and return the directive."""
        beat = pick_beat(FEUD_BEATS, self._rng)
        opponent = self.registry.get(opponent_id)
        opponent_name = opponent.name if opponent else opponent_id

        feud = self.get_feud(character_id, opponent_id)
        intensity = feud.intensity if feud is not None else DEFAULT_FEUD_INTENSITY

        directive = render_prompt(FEUD_DIRECTIVES[beat], {
            "opponent": opponent_name,
            "intensity": format_intensity(intensity),
        })

        if feud is not None and intensity < MAX_INTENSITY:
            # Rounded so repeated +0.3 steps stay on tenths in the snapshot.
            feud.intensity = round(min(MAX_INTENSITY, intensity + FEUD_ESCALATION), 2)

        self._append_history(StorylineEntry(
            beat=beat,
            characters=[character_id, opponent_id],
            intensity=intensity,
        ))
        return directive

    # ------------------------------------------------------------------
    # Surprise entrances
    # ------------------------------------------------------------------

    def surprise_chance(self) -> float:
        if not self.waiting_in_the_wings:
            return 0.0
        if self.beats_since_last_surprise < SURPRISE_MIN_BEATS:
            return 0.0
        return min(
            SURPRISE_MAX_CHANCE,
            (self.beats_since_last_surprise - SURPRISE_MIN_BEATS) * SURPRISE_RAMP,
        )

    def should_trigger_surprise(self) -> bool:
        if not self.waiting_in_the_wings:
            return False
        if self.beats_since_last_surprise < SURPRISE_MIN_BEATS:
            return False
        return self._rng.random() < self.surprise_chance()

    def trigger_surprise(self) -> Responder | None:
        """Pull a random character out of the wings into the active roster."""
        if not self.waiting_in_the_wings:
            return None
        char_id = self._rng.choice(self.waiting_in_the_wings)
        char = self.registry.get(char_id)
        if char is None:
            return None

        self.waiting_in_the_wings.remove(char_id)
        self.active_characters.append(char_id)
        self.beats_since_last_surprise = 0

        surprise_type = pick_beat(SURPRISE_BEATS, self._rng)
        context = render_prompt(SURPRISE_DIRECTIVES[surprise_type], {
            "entrance": char.entrance_music or DEFAULT_ENTRANCE,
        })

        self._append_history(StorylineEntry(
            beat=f"surprise-{surprise_type}",
            characters=[char_id],
        ))
        logger.info("Surprise %s: %s", surprise_type, char_id)

        return Responder(
            character_id=char_id,
            reason=f"surprise-{surprise_type}",
            context=context,
            is_surprise=True,
            surprise_type=surprise_type,
        )

    # ------------------------------------------------------------------
    # Promos
    # ------------------------------------------------------------------

    def pick_promo_character(self) -> str | None:
        if not self.active_characters:
            return None
        return self._rng.choice(self.active_characters)

    def generate_promo(self, character_id: str) -> str | None:
        if self.registry.get(character_id) is None:
            return None
        partners = self.registry.feud_partners(character_id)
        opponent = self.registry.get(partners[0]) if partners else None

        options = list(PROMO_DIRECTIVES)
        if opponent is not None:
            options.extend(
                render_prompt(t, {"opponent": opponent.name}) for t in RIVAL_PROMO_DIRECTIVES
            )
        return self._rng.choice(options)

    # ------------------------------------------------------------------
    # Roster
    # ------------------------------------------------------------------

    def add_to_wings(self, character_id: str) -> None:
        if character_id in self.waiting_in_the_wings or character_id in self.active_characters:
            return
        self.waiting_in_the_wings.append(character_id)

    def activate(self, character_id: str) -> None:
        if character_id in self.waiting_in_the_wings:
            self.waiting_in_the_wings.remove(character_id)
        if character_id not in self.active_characters:
            self.active_characters.append(character_id)

    def deactivate(self, character_id: str) -> None:
        self.active_characters = [c for c in self.active_characters if c != character_id]
        self.waiting_in_the_wings = [c for c in self.waiting_in_the_wings if c != character_id]
        self.save_state()

    def set_alignment(self, character_id: str, alignment: Alignment) -> None:
        self.alignment_overrides[character_id] = alignment

    def alignment_of(self, character_id: str) -> Alignment | None:
        if character_id in self.alignment_overrides:
            return self.alignment_overrides[character_id]
        char = self.registry.get(character_id)
        return char.alignment if char else None

    # ------------------------------------------------------------------
    # Dashboard view
    # ------------------------------------------------------------------

    def get_state(self) -> dict[str, Any]:
        return {
            "feuds": [f.dump() for f in self.feuds],
            "activeCharacters": list(self.active_characters),
            "waitingInTheWings": list(self.waiting_in_the_wings),
            "messageCount": self.message_count,
            "beatsSinceLastSurprise": self.beats_since_last_surprise,
            "heatMap": {k: self.get_heat(k) for k in list(self.heat_map)},
            "alignmentOverrides": dict(self.alignment_overrides),
            "recentHistory": [e.dump() for e in self.storyline_history[-RECENT_HISTORY:]],
            "sessionStartedAt": self.session_started_at,
        }
