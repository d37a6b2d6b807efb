"""Match simulation: rounds, momentum, damage and finishes.

A match is created with a fixed round count drawn from its type's range,
then simulated round by round. Each round picks two live combatants in
random order, draws a beat for the current phase and resolves it:

  swing  = randint(1, 3)
  actor  momentum += swing        (cap 10)
  target momentum -= 1            (floor -10)
  target damage   += phase draw   (cap 100)

Reversal beats (counter, finisher-counter, comeback) then flip the swing
twice over and the actor eats half the damage. The finish compares
momentum plus a tenth of the opponent's damage, each side jittered by
U[0, 5); ties go to the actor. The win method is uniform over the type's
legal win conditions.
"""

from __future__ import annotations

import logging
import random
import uuid
from typing import Any

from ring_director.characters import CharacterRegistry
from ring_director.clock import Clock, now_ms
from ring_director.models import (
    EngineError,
    Match,
    MatchEvent,
    MatchPhase,
    MatchResult,
    MatchSummary,
    MatchType,
    RoundPrompt,
    RoundResult,
)
from ring_director.prompts import (
    CHARACTER_ROUND_PROMPT,
    COMMENTARY_PROMPT,
    DEFAULT_ROUND_NARRATIVE,
    PHASE_DESCRIPTIONS,
    ROUND_NARRATIVES,
    render_prompt,
)

logger = logging.getLogger(__name__)

MATCH_TYPES: dict[str, MatchType] = {
    "singles": MatchType(
        name="Singles Match", emoji="🤼",
        min_participants=2, max_participants=2,
        win_conditions=("pinfall", "submission", "count-out", "dq"),
        min_rounds=4, max_rounds=7,
    ),
    "no-dq": MatchType(
        name="No Disqualification Match", emoji="⚠️",
        min_participants=2, max_participants=2,
        win_conditions=("pinfall", "submission"),
        min_rounds=5, max_rounds=8,
        weapons_allowed=True,
    ),
    "steel-cage": MatchType(
        name="Steel Cage Match", emoji="🏗️",
        min_participants=2, max_participants=2,
        win_conditions=("pinfall", "submission", "escape"),
        min_rounds=5, max_rounds=9,
    ),
    "hell-in-a-cell": MatchType(
        name="Hell in a Cell", emoji="😈",
        min_participants=2, max_participants=2,
        win_conditions=("pinfall", "submission"),
        min_rounds=6, max_rounds=10,
        weapons_allowed=True, extreme=True,
    ),
    "ladder": MatchType(
        name="Ladder Match", emoji="🪜",
        min_participants=2, max_participants=6,
        win_conditions=("retrieve",),
        min_rounds=5, max_rounds=9,
    ),
    "triple-threat": MatchType(
        name="Triple Threat Match", emoji="🔺",
        min_participants=3, max_participants=3,
        win_conditions=("pinfall", "submission"),
        min_rounds=5, max_rounds=8,
    ),
    "fatal-four-way": MatchType(
        name="Fatal Four-Way", emoji="💀",
        min_participants=4, max_participants=4,
        win_conditions=("pinfall", "submission"),
        min_rounds=5, max_rounds=9,
    ),
    "tag-team": MatchType(
        name="Tag Team Match", emoji="🤝",
        min_participants=4, max_participants=4,
        win_conditions=("pinfall", "submission", "count-out", "dq"),
        min_rounds=4, max_rounds=7,
        is_tag_team=True,
    ),
    "royal-rumble": MatchType(
        name="Royal Rumble", emoji="👑",
        min_participants=3, max_participants=30,
        win_conditions=("last-standing",),
        min_rounds=8, max_rounds=15,
    ),
}

MATCH_BEATS: dict[str, tuple[str, ...]] = {
    "early": (
        "lock-up", "feeling-out", "headlock-takeover", "shoulder-block",
        "chain-wrestling", "staredown", "cheap-shot", "test-of-strength",
    ),
    "mid": (
        "momentum-shift", "signature-move", "near-fall", "counter",
        "top-rope-attempt", "outside-brawl", "submission-hold", "comeback",
        "distraction", "double-down", "ref-bump", "weapon-shot",
    ),
    "late": (
        "finisher-attempt", "finisher-counter", "near-fall-kickout",
        "desperation-move", "second-wind", "super-finisher", "roll-up",
    ),
    "finish": (
        "clean-finish", "dirty-finish", "surprise-roll-up", "submission-tap",
        "interference", "double-count-out", "ref-stoppage",
    ),
}

REVERSAL_BEATS = frozenset({"counter", "finisher-counter", "comeback"})
WEAPON_BEAT = "weapon-shot"

# (base, width) of the damage draw per phase
DAMAGE_RANGES: dict[str, tuple[float, float]] = {
    "early": (0.0, 10.0),
    "mid": (5.0, 15.0),
    "late": (10.0, 20.0),
    "finish": (10.0, 20.0),
}

MOMENTUM_CAP = 10.0
DAMAGE_CAP = 100.0
FINISH_JITTER = 5.0
SAFETY_CEILING = 20
HISTORY_LIMIT = 50
RECENT_MATCHES = 10


class MatchSimulator:
    def __init__(
        self,
        registry: CharacterRegistry,
        match_types: dict[str, MatchType] | None = None,
        rng: random.Random | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.registry = registry
        self.match_types = match_types if match_types is not None else MATCH_TYPES
        self._rng = rng or random.Random()
        self._clock = clock or now_ms
        self.active_match: Match | None = None
        self.match_history: list[MatchSummary] = []

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load_from(self, data: dict[str, Any] | None) -> None:
        if not data:
            return
        history = data.get("matchHistory") or []
        self.match_history = [MatchSummary.model_validate(m) for m in history][-HISTORY_LIMIT:]

    def to_dict(self) -> dict[str, Any]:
        return {"matchHistory": [m.dump() for m in self.match_history[-HISTORY_LIMIT:]]}

    def get_state(self) -> dict[str, Any]:
        return {
            "activeMatch": self.active_match.dump() if self.active_match else None,
            "recentMatches": [m.dump() for m in self.match_history[-RECENT_MATCHES:]],
            "matchTypes": [
                {"id": type_id, "name": t.name, "emoji": t.emoji}
                for type_id, t in self.match_types.items()
            ],
        }

    # ------------------------------------------------------------------
    # Matches
    # ------------------------------------------------------------------

    def create_match(
        self,
        participants: list[str],
        match_type: str = "singles",
        *,
        for_title: str | None = None,
        stipulation: str | None = None,
    ) -> Match | EngineError:
        mtype = self.match_types.get(match_type)
        if mtype is None:
            return EngineError(error=f"Unknown match type: {match_type}")
        for p in participants:
            if self.registry.get(p) is None:
                return EngineError(error=f"Unknown character: {p}")
        if len(set(participants)) != len(participants):
            return EngineError(error="A character cannot appear twice in the same match")
        if not mtype.min_participants <= len(participants) <= mtype.max_participants:
            return EngineError(
                error=(
                    f"{mtype.name} needs {mtype.min_participants}-{mtype.max_participants} "
                    f"participants, got {len(participants)}"
                )
            )

        total_rounds = self._rng.randint(mtype.min_rounds, mtype.max_rounds)
        self.active_match = Match(
            id=f"match-{uuid.uuid4().hex[:12]}",
            type=match_type,
            type_name=mtype.name,
            type_emoji=mtype.emoji,
            participants=list(participants),
            stipulation=stipulation,
            for_title=for_title,
            total_rounds=total_rounds,
            momentum={p: 0.0 for p in participants},
            damage={p: 0.0 for p in participants},
            started_at=self._clock(),
        )
        logger.debug(
            "Created %s %s: %s (%d rounds)",
            match_type, self.active_match.id, " vs ".join(participants), total_rounds,
        )
        return self.active_match

    def simulate_round(self) -> RoundResult | None:
        """Resolve the next round of the active match. None if there is nothing to simulate."""
        match = self.active_match
        if match is None or match.winner is not None:
            return None

        match.current_round += 1
        phase = self._phase(match)
        alive = [p for p in match.participants if p not in match.eliminated]
        actor, target = self._rng.sample(alive, 2)

        beat = self._pick_beat(match, phase)
        swing, damage_dealt = self._resolve_beat(match, beat, actor, target, phase)

        match.events.append(MatchEvent(
            round=match.current_round,
            phase=phase,
            beat=beat,
            actor=actor,
            target=target,
            momentum_swing=swing,
            damage_dealt=damage_dealt,
        ))

        if phase == "finish" or (phase == "late" and match.current_round >= match.total_rounds):
            self._resolve_finish(match, actor, target)

        logger.debug("Round %d/%d [%s] %s: %s -> %s",
                     match.current_round, match.total_rounds, phase, beat, actor, target)

        return RoundResult(
            round=match.current_round,
            total_rounds=match.total_rounds,
            phase=phase,
            beat=beat,
            actor=actor,
            target=target,
            momentum_swing=swing,
            damage_dealt=damage_dealt,
            momentum=dict(match.momentum),
            damage=dict(match.damage),
            is_finish=match.winner is not None,
            winner=match.winner,
            win_method=match.win_method,
        )

    def simulate_full_match(
        self,
        participants: list[str],
        match_type: str = "singles",
        *,
        for_title: str | None = None,
        stipulation: str | None = None,
    ) -> MatchResult | EngineError:
        created = self.create_match(
            participants, match_type, for_title=for_title, stipulation=stipulation,
        )
        if isinstance(created, EngineError):
            return created
        match = created

        rounds: list[RoundResult] = []
        while match.winner is None:
            if len(rounds) >= SAFETY_CEILING:
                self._force_finish(match)
                rounds.append(RoundResult(
                    round=match.current_round,
                    total_rounds=match.total_rounds,
                    phase="finish",
                    beat="forced-finish",
                    momentum=dict(match.momentum),
                    damage=dict(match.damage),
                    is_finish=True,
                    winner=match.winner,
                    win_method=match.win_method,
                    narrative="The match ends decisively!",
                ))
                break
            result = self.simulate_round()
            if result is None:
                break
            rounds.append(result)

        self.match_history.append(MatchSummary(
            id=match.id,
            type=match_type,
            participants=list(participants),
            winner=match.winner,
            win_method=match.win_method,
            rounds=len(rounds),
            for_title=for_title,
            timestamp=self._clock(),
        ))
        if len(self.match_history) > HISTORY_LIMIT:
            self.match_history = self.match_history[-HISTORY_LIMIT:]

        logger.info("%s won the %s by %s after %d rounds",
                    match.winner, match.type_name, match.win_method, len(rounds))

        self.active_match = None
        return MatchResult(match=match, rounds=rounds)

    def build_round_prompt(self, round_result: RoundResult) -> RoundPrompt | None:
        actor = self.registry.get(round_result.actor) if round_result.actor else None
        target = self.registry.get(round_result.target) if round_result.target else None
        if actor is None or target is None:
            return None

        template = ROUND_NARRATIVES.get(round_result.beat, DEFAULT_ROUND_NARRATIVE)
        narrative = render_prompt(template, {
            "actor": actor.name,
            "target": target.name,
            "finisher": actor.finisher or "finisher",
        })

        if round_result.is_finish:
            outcome = "WON" if round_result.winner == round_result.actor else "LOST"
        else:
            outcome = "experienced this"

        return RoundPrompt(
            narrative=narrative,
            commentary_prompt=render_prompt(COMMENTARY_PROMPT, {
                "phase": PHASE_DESCRIPTIONS.get(round_result.phase, ""),
                "narrative": narrative,
            }),
            character_prompt=render_prompt(CHARACTER_ROUND_PROMPT, {
                "outcome": outcome,
                "narrative": narrative,
            }),
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _phase(match: Match) -> MatchPhase:
        progress = match.current_round / match.total_rounds
        if progress <= 0.25:
            return "early"
        if progress <= 0.6:
            return "mid"
        if progress < 1.0:
            return "late"
        return "finish"

    def _pick_beat(self, match: Match, phase: MatchPhase) -> str:
        beats = MATCH_BEATS.get(phase, MATCH_BEATS["mid"])
        mtype = self.match_types.get(match.type)
        if mtype is None or not mtype.weapons_allowed:
            beats = tuple(b for b in beats if b != WEAPON_BEAT)
        return self._rng.choice(beats)

    def _resolve_beat(
        self, match: Match, beat: str, actor: str, target: str, phase: MatchPhase,
    ) -> tuple[int, int]:
        swing = self._rng.randint(1, 3)
        momentum, damage = match.momentum, match.damage

        momentum[actor] = min(MOMENTUM_CAP, momentum.get(actor, 0.0) + swing)
        momentum[target] = max(-MOMENTUM_CAP, momentum.get(target, 0.0) - 1)

        base, width = DAMAGE_RANGES[phase]
        dmg = base + self._rng.random() * width
        damage[target] = min(DAMAGE_CAP, damage.get(target, 0.0) + dmg)

        if beat in REVERSAL_BEATS:
            momentum[actor] = max(-MOMENTUM_CAP, momentum[actor] - swing * 2)
            momentum[target] = min(MOMENTUM_CAP, momentum[target] + swing * 2)
            damage[actor] = min(DAMAGE_CAP, damage.get(actor, 0.0) + dmg * 0.5)

        return swing, round(dmg)

    def _resolve_finish(self, match: Match, actor: str, target: str) -> None:
        actor_score = match.momentum.get(actor, 0.0) + match.damage.get(target, 0.0) / 10
        target_score = match.momentum.get(target, 0.0) + match.damage.get(actor, 0.0) / 10

        actor_final = actor_score + self._rng.random() * FINISH_JITTER
        target_final = target_score + self._rng.random() * FINISH_JITTER

        match.winner = actor if actor_final >= target_final else target
        mtype = self.match_types.get(match.type)
        methods = mtype.win_conditions if mtype else ("pinfall",)
        match.win_method = self._rng.choice(methods)

    def _force_finish(self, match: Match) -> None:
        alive = [p for p in match.participants if p not in match.eliminated]
        winner = alive[0]
        best = float("-inf")
        for p in alive:
            inflicted = sum(v for k, v in match.damage.items() if k != p)
            if inflicted > best:
                best, winner = inflicted, p

        mtype = self.match_types.get(match.type)
        match.winner = winner
        match.win_method = mtype.win_conditions[0] if mtype else "pinfall"
        logger.info("Safety ceiling hit in %s, %s wins by %s", match.id, winner, match.win_method)
