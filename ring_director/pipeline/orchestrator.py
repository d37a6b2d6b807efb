"""Show orchestrator: turns engine decisions into paced, published lines.

Message flow:
  1. Record the inbound line in the channel log.
  2. Identify the author as a character, if it is one.
  3. Ask the storyline director who responds.
  4. For each responder, in order:
       wait response_delay + U[0, 2s)
       generate the in-character line (LLM)
       wait the typing delay, min(len * per_char, 5s)
       publish, and record the line in the channel log
  5. Surprise beats may draw a call from the announce team.

Everything is awaited sequentially. Responders are never generated
concurrently, so output order always matches the director's order.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Protocol

from pydantic import BaseModel

from ring_director.announcers import announcer_reactions, build_announcer_prompt
from ring_director.crowd import (
    BEAT_MOMENTS,
    character_chant,
    dueling_chant,
    moment_reaction,
    should_crowd_react,
)
from ring_director.engine import Promotion
from ring_director.llm import LLM, LLMError
from ring_director.models import EngineError, MatchResult, MatchResultRecord, PPVEvent, Responder
from ring_director.prompts import RESPONDER_PROMPT, render_prompt

logger = logging.getLogger(__name__)

CHANNEL_HISTORY = 20
PROMPT_HISTORY = 10
JITTER_MS = 2000
MAX_TYPING_MS = 5000
BETWEEN_ROUNDS_MS = 1500
SECONDS_PER_MINUTE = 60

CROWD_ID = "crowd"
CROWD_NAME = "The Crowd 🏟️"
RING_ANNOUNCER_ID = "ring-announcer"
RING_ANNOUNCER_NAME = "Ring Announcer 🎤"


class Publisher(Protocol):
    async def __call__(self, speaker_id: str, display_name: str, content: str) -> None: ...


class LogPublisher:
    """Publishes to the log. Used when no chat transport is attached."""

    def __init__(self) -> None:
        self.lines: list[tuple[str, str, str]] = []

    async def __call__(self, speaker_id: str, display_name: str, content: str) -> None:
        self.lines.append((speaker_id, display_name, content))
        logger.info("[%s] %s", display_name, content[:80])


class ChatLine(BaseModel):
    author: str
    content: str


class ChannelLog:
    """The last few lines of the arena channel, oldest first."""

    def __init__(self, limit: int = CHANNEL_HISTORY) -> None:
        self._lines: deque[ChatLine] = deque(maxlen=limit)

    def append(self, author: str, content: str) -> None:
        self._lines.append(ChatLine(author=author, content=content))

    def recent(self, n: int = PROMPT_HISTORY) -> list[ChatLine]:
        return list(self._lines)[-n:]

    def __len__(self) -> int:
        return len(self._lines)


class Pacing:
    """Dramatic timing. ``sleep`` is injectable so tests run instantly."""

    def __init__(
        self,
        response_delay_ms: int = 3000,
        typing_delay_per_char_ms: int = 30,
        max_response_length: int = 500,
        between_rounds_ms: int = BETWEEN_ROUNDS_MS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.response_delay_ms = response_delay_ms
        self.typing_delay_per_char_ms = typing_delay_per_char_ms
        self.max_response_length = max_response_length
        self.between_rounds_ms = between_rounds_ms
        self.sleep = sleep

    async def before_reply(self, rng: random.Random) -> None:
        await self.sleep((self.response_delay_ms + rng.random() * JITTER_MS) / 1000)

    async def typing(self, text: str) -> None:
        await self.sleep(min(len(text) * self.typing_delay_per_char_ms, MAX_TYPING_MS) / 1000)

    async def beat(self) -> None:
        await self.sleep(self.between_rounds_ms / 1000)


def trim_response(text: str, max_length: int) -> str:
    """Cut ``text`` to ``max_length``, backing up to a sentence end past the halfway mark."""
    text = text.strip()
    if len(text) <= max_length:
        return text
    text = text[:max_length].strip()
    last_end = max(text.rfind("."), text.rfind("!"), text.rfind("?"))
    if last_end > len(text) * 0.5:
        text = text[: last_end + 1]
    return text.strip()


async def generate_line(
    *,
    promotion: Promotion,
    llm: LLM,
    log: ChannelLog,
    responder: Responder,
    max_length: int,
    opponent_id: str | None = None,
) -> str | None:
    """Generate one in-character line. None on LLM failure or unknown character."""
    char = promotion.registry.get(responder.character_id)
    if char is None:
        return None

    context = responder.context
    if opponent_id:
        title_context = promotion.ledger.get_title_context(char.id, opponent_id)
        if title_context:
            context = f"{context} {title_context}".strip()

    prompt = render_prompt(RESPONDER_PROMPT, {
        "recent": [line.model_dump() for line in log.recent()],
        "context": context,
        "is_surprise": responder.is_surprise,
        "name": char.name,
    })
    try:
        text = await llm(responder.reason, prompt, char.personality)
    except LLMError as e:
        logger.warning("LLM error for %s: %s", char.name, e)
        return None
    text = trim_response(text, max_length)
    return text or None


async def _announce(
    *,
    promotion: Promotion,
    llm: LLM,
    publisher: Publisher,
    event_type: str,
    context: str,
) -> None:
    for announcer_id in announcer_reactions(event_type, promotion.rng):
        call = build_announcer_prompt(announcer_id, event_type, context)
        if call is None:
            continue
        try:
            text = await llm("announcer", call.prompt, call.system)
        except LLMError as e:
            logger.warning("LLM error for announcer %s: %s", announcer_id, e)
            continue
        await publisher(announcer_id, call.display_name, text.strip())


async def _crowd(promotion: Promotion, publisher: Publisher, moment: str) -> None:
    if not should_crowd_react(moment, promotion.rng):
        return
    reaction = moment_reaction(moment, promotion.rng)
    if reaction:
        await publisher(CROWD_ID, CROWD_NAME, reaction)


async def speak(
    *,
    promotion: Promotion,
    llm: LLM,
    publisher: Publisher,
    log: ChannelLog,
    responder: Responder,
    pacing: Pacing,
    opponent_id: str | None = None,
) -> str | None:
    """Pace, generate and publish one responder's line."""
    char = promotion.registry.get(responder.character_id)
    if char is None:
        return None

    await pacing.before_reply(promotion.rng)
    text = await generate_line(
        promotion=promotion, llm=llm, log=log, responder=responder,
        max_length=pacing.max_response_length, opponent_id=opponent_id,
    )
    if text is None:
        return None
    await pacing.typing(text)
    await publisher(char.id, char.display_name, text)
    log.append(char.name, text)
    return text


async def handle_message(
    *,
    promotion: Promotion,
    llm: LLM,
    publisher: Publisher,
    log: ChannelLog,
    author: str,
    content: str,
    pacing: Pacing,
) -> list[str]:
    """React to one inbound chat message. Returns the lines published by characters."""
    log.append(author, content)
    author_id = promotion.registry.identify(author)
    responders = promotion.director.decide_responders(content, author_id)

    published: list[str] = []
    for responder in responders:
        opponent = author_id if responder.reason == "feud-response" else None
        text = await speak(
            promotion=promotion, llm=llm, publisher=publisher, log=log,
            responder=responder, pacing=pacing, opponent_id=opponent,
        )
        if text is None:
            continue
        published.append(text)

        if responder.is_surprise:
            char = promotion.registry.get(responder.character_id)
            name = char.name if char else responder.character_id
            moment = "betrayal" if responder.surprise_type == "betrayal" else "entrance"
            await _crowd(promotion, publisher, moment)
            await _announce(
                promotion=promotion, llm=llm, publisher=publisher,
                event_type=f"surprise-{responder.surprise_type}",
                context=f"{name} just showed up",
            )
    return published


async def run_promo(
    *,
    promotion: Promotion,
    llm: LLM,
    publisher: Publisher,
    log: ChannelLog,
    pacing: Pacing,
) -> str | None:
    """Have a random active character cut a scheduled promo."""
    char_id = promotion.director.pick_promo_character()
    if char_id is None:
        return None
    directive = promotion.director.generate_promo(char_id)
    if directive is None:
        return None

    responder = Responder(character_id=char_id, reason="scheduled-promo", context=directive)
    text = await speak(
        promotion=promotion, llm=llm, publisher=publisher, log=log,
        responder=responder, pacing=pacing,
    )
    if text is None:
        return None

    if should_crowd_react("character-chant", promotion.rng):
        chant = character_chant(char_id, promotion.rng)
        if chant:
            await publisher(CROWD_ID, CROWD_NAME, chant)
    char = promotion.registry.get(char_id)
    await _announce(
        promotion=promotion, llm=llm, publisher=publisher,
        event_type="scheduled-promo", context=f"{char.name if char else char_id} said: {text}",
    )
    return text


async def promo_loop(
    *,
    promotion: Promotion,
    llm: LLM,
    publisher: Publisher,
    log: ChannelLog,
    pacing: Pacing,
    interval_minutes: int,
    stop: asyncio.Event,
) -> None:
    """Cut a promo every ``interval_minutes`` until ``stop`` is set. 0 disables.

    A failed promo is logged and the schedule carries on.
    """
    if interval_minutes <= 0:
        return
    logger.info("Promo schedule: every %d minutes", interval_minutes)
    while not stop.is_set():
        try:
            await asyncio.wait_for(stop.wait(), timeout=interval_minutes * SECONDS_PER_MINUTE)
            break
        except asyncio.TimeoutError:
            pass
        try:
            await run_promo(promotion=promotion, llm=llm, publisher=publisher, log=log, pacing=pacing)
        except Exception as e:
            logger.error("Scheduled promo failed: %s", e)


async def _present_match(
    *,
    promotion: Promotion,
    llm: LLM,
    publisher: Publisher,
    pacing: Pacing,
    result: MatchResult,
    record: MatchResultRecord,
) -> None:
    for round_result in result.rounds:
        prompt = promotion.simulator.build_round_prompt(round_result)
        narrative = prompt.narrative if prompt else round_result.narrative
        if narrative:
            await publisher(RING_ANNOUNCER_ID, RING_ANNOUNCER_NAME, narrative)
        moment = BEAT_MOMENTS.get(round_result.beat)
        if moment:
            await _crowd(promotion, publisher, moment)
        await pacing.beat()

    winner = promotion.registry.get(record.winner) if record.winner else None
    winner_name = winner.display_name if winner else str(record.winner)
    await publisher(
        RING_ANNOUNCER_ID, RING_ANNOUNCER_NAME,
        f"🏆 Here is your winner, by {record.win_method}: {winner_name}!",
    )
    if record.title_change is not None:
        change = record.title_change
        await publisher(
            RING_ANNOUNCER_ID, RING_ANNOUNCER_NAME,
            f"👑 AND NEW {change.title_name.upper()} CHAMPION: {winner_name}!",
        )
        await _crowd(promotion, publisher, "title-change")
        await _announce(
            promotion=promotion, llm=llm, publisher=publisher,
            event_type="title-change",
            context=f"{winner_name} just won the {change.title_name}",
        )
    await pacing.beat()


async def run_ppv_show(
    *,
    promotion: Promotion,
    llm: LLM,
    publisher: Publisher,
    pacing: Pacing,
    event_id: str,
) -> PPVEvent | EngineError:
    """Run a scheduled event with full presentation: hype, rounds, results.

    The card always runs to completion. A failed publish or LLM call is
    logged and the show moves on; every match is still simulated and
    recorded, and the event always leaves the live slot.
    """
    booker = promotion.booker
    event = booker.start_event(event_id)
    if isinstance(event, EngineError):
        return event

    try:
        try:
            for line in booker.build_hype_messages(event):
                await publisher(RING_ANNOUNCER_ID, RING_ANNOUNCER_NAME, line)
                await pacing.beat()
        except Exception as e:
            logger.error("Hype for %s failed: %s", event.name, e)

        for entry in list(event.match_card):
            names = [promotion.registry.get(p) for p in entry.participants]
            try:
                if len(entry.participants) == 2 and all(names):
                    if should_crowd_react("dueling-chant", promotion.rng):
                        await publisher(CROWD_ID, CROWD_NAME, dueling_chant(names[0].name, names[1].name, promotion.rng))
            except Exception as e:
                logger.error("Crowd chant before match %d of %s failed: %s", entry.order, event.name, e)

            played = promotion.play_card_match(entry)
            if isinstance(played, EngineError):
                logger.warning("Skipping match %d of %s: %s", entry.order, event.name, played.error)
                continue
            result, record = played

            try:
                await _present_match(
                    promotion=promotion, llm=llm, publisher=publisher, pacing=pacing,
                    result=result, record=record,
                )
            except Exception as e:
                logger.error("Presentation of match %d of %s failed: %s", entry.order, event.name, e)
    finally:
        completed = booker.complete_event() or event
        promotion.save()

    summary = booker.build_results_summary(completed)
    if summary:
        try:
            await publisher(RING_ANNOUNCER_ID, RING_ANNOUNCER_NAME, summary)
        except Exception as e:
            logger.error("Results summary for %s failed: %s", event.name, e)
    return completed


class Show:
    """Everything a running show needs, held by the app for its lifetime."""

    def __init__(
        self,
        promotion: Promotion,
        llm: LLM,
        publisher: Publisher,
        pacing: Pacing,
        log: ChannelLog | None = None,
    ) -> None:
        self.promotion = promotion
        self.llm = llm
        self.publisher = publisher
        self.pacing = pacing
        self.log = log or ChannelLog()

    async def handle_message(self, author: str, content: str) -> list[str]:
        return await handle_message(
            promotion=self.promotion, llm=self.llm, publisher=self.publisher,
            log=self.log, author=author, content=content, pacing=self.pacing,
        )

    async def speak(self, responder: Responder) -> str | None:
        return await speak(
            promotion=self.promotion, llm=self.llm, publisher=self.publisher,
            log=self.log, responder=responder, pacing=self.pacing,
        )

    async def run_ppv(self, event_id: str) -> PPVEvent | EngineError:
        return await run_ppv_show(
            promotion=self.promotion, llm=self.llm, publisher=self.publisher,
            pacing=self.pacing, event_id=event_id,
        )

    async def promo_loop(self, interval_minutes: int, stop: asyncio.Event) -> None:
        await promo_loop(
            promotion=self.promotion, llm=self.llm, publisher=self.publisher,
            log=self.log, pacing=self.pacing, interval_minutes=interval_minutes, stop=stop,
        )
