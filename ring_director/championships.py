"""Championship ledger: who holds which title, for how long, and how often defended."""

from __future__ import annotations

import logging
from typing import Any

from ring_director.clock import Clock, now_ms
from ring_director.models import HeldTitle, Title, TitleChange, TitleReign, TitleState
from ring_director.prompts import CHALLENGER_CONTEXT, CHAMPION_CONTEXT, render_prompt

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 20

CHAMPIONSHIPS: dict[str, Title] = {
    "wwe-championship": Title(
        name="WWE Championship",
        display_name="🏆 WWE Championship",
        prestige=10,
        description="The most prestigious title in sports entertainment",
    ),
    "intercontinental": Title(
        name="Intercontinental Championship",
        display_name="🥈 Intercontinental Championship",
        prestige=7,
        description="The workhorse title",
    ),
    "tag-team": Title(
        name="Tag Team Championship",
        display_name="🤝 Tag Team Championship",
        prestige=6,
        description="Requires a tag team partner",
        is_tag_team=True,
    ),
    "hardcore": Title(
        name="Hardcore Championship",
        display_name="🔨 Hardcore Championship",
        prestige=4,
        description="24/7 rules, can be won anytime, anywhere",
        is_247=True,
    ),
}


class ChampionshipLedger:
    def __init__(self, titles: dict[str, Title] | None = None, clock: Clock | None = None) -> None:
        self.catalog = titles if titles is not None else CHAMPIONSHIPS
        self._clock = clock or now_ms
        self.titles: dict[str, TitleState] = {title_id: TitleState() for title_id in self.catalog}

    def load_from(self, data: dict[str, Any] | None) -> None:
        """Restore saved title state. Ids missing from the catalog are ignored."""
        if not data:
            return
        for title_id, saved in data.items():
            if title_id not in self.titles:
                logger.debug("Ignoring saved state for unknown title %s", title_id)
                continue
            state = TitleState.model_validate(saved)
            state.history = state.history[-HISTORY_LIMIT:]
            self.titles[title_id] = state

    def to_dict(self) -> dict[str, Any]:
        return {title_id: state.dump() for title_id, state in self.titles.items()}

    def _close_reign(self, state: TitleState, vacated: bool = False) -> None:
        state.history.append(TitleReign(
            holder=state.holder,
            won_at=state.won_at,
            lost_at=self._clock(),
            defenses=state.defenses,
            vacated=vacated,
        ))
        if len(state.history) > HISTORY_LIMIT:
            state.history = state.history[-HISTORY_LIMIT:]

    def award_title(self, title_id: str, character_id: str, method: str = "pinfall") -> TitleChange | None:
        state = self.titles.get(title_id)
        if state is None:
            return None
        previous = state.holder
        if previous is not None:
            self._close_reign(state)

        state.holder = character_id
        state.won_at = self._clock()
        state.defenses = 0

        logger.info("%s wins the %s from %s", character_id, title_id, previous or "vacancy")
        return TitleChange(
            title_id=title_id,
            title_name=self.catalog[title_id].display_name,
            new_champion=character_id,
            previous_champion=previous,
            method=method,
        )

    def record_defense(self, title_id: str) -> None:
        state = self.titles.get(title_id)
        if state is None or state.holder is None:
            return
        state.defenses += 1

    def vacate_title(self, title_id: str) -> None:
        state = self.titles.get(title_id)
        if state is None:
            return
        if state.holder is not None:
            self._close_reign(state, vacated=True)
            logger.info("%s vacated by %s", title_id, state.holder)
        state.holder = None
        state.won_at = None
        state.defenses = 0

    def get_champion(self, title_id: str) -> str | None:
        state = self.titles.get(title_id)
        return state.holder if state else None

    def get_titles_for_character(self, character_id: str) -> list[HeldTitle]:
        held = []
        for title_id, state in self.titles.items():
            if state.holder != character_id:
                continue
            title = self.catalog[title_id]
            held.append(HeldTitle(
                title_id=title_id,
                name=title.name,
                display_name=title.display_name,
                prestige=title.prestige,
                holder=character_id,
                won_at=state.won_at,
                defenses=state.defenses,
            ))
        return held

    def get_title_context(self, character_id: str, opponent_id: str) -> str:
        """A directive line for a champion, or for someone facing one. Empty otherwise."""
        own = self.get_titles_for_character(character_id)
        if own:
            belt = own[0]
            return render_prompt(CHAMPION_CONTEXT, {
                "title": belt.display_name,
                "defenses": str(belt.defenses),
                "one": belt.defenses == 1,
            })
        theirs = self.get_titles_for_character(opponent_id)
        if theirs:
            return render_prompt(CHALLENGER_CONTEXT, {"title": theirs[0].display_name})
        return ""

    def get_state(self) -> dict[str, Any]:
        result = {}
        for title_id, state in self.titles.items():
            title = self.catalog[title_id]
            result[title_id] = {
                **title.dump(),
                "holder": state.holder,
                "wonAt": state.won_at,
                "defenses": state.defenses,
                "historyCount": len(state.history),
            }
        return result
