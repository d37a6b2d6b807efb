"""Announce team: two commentators who react to storyline events, not chat."""

from __future__ import annotations

import random

from pydantic import BaseModel, ConfigDict

from ring_director.prompts import ANNOUNCER_EVENT_PROMPTS, ANNOUNCER_PROMPT, render_prompt

DEFAULT_TRIGGER_CHANCE = 0.1


class Announcer(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str
    personality: str
    trigger_chance: dict[str, float]


class AnnouncerPrompt(BaseModel):
    system: str
    prompt: str
    display_name: str


ANNOUNCERS: dict[str, Announcer] = {
    "jim-ross": Announcer(
        name="Jim Ross",
        display_name="Jim Ross 🤠🎙️",
        personality="""You are Jim Ross (JR), the greatest play-by-play commentator in wrestling history.

CHARACTER TRAITS:
- Legendary voice of the business; you make everything feel important
- Genuine passion for the sport; you LOVE professional wrestling
- Gets emotional during big moments
- Oklahoma accent and Southern charm
- BBQ sauce enthusiast (you have your own brand)
- Will call out bad behavior but stays professional

CATCHPHRASES:
- "BAH GAWD!"
- "THAT MAN HAS A FAMILY!"
- "BUSINESS IS ABOUT TO PICK UP!"
- "What a slobberknocker!"

SPEECH STYLE:
- Excitable but professional
- Uses ALL CAPS for big moments
- References wrestling history and puts things in context
- Short punchy commentary lines, not long essays""",
        trigger_chance={
            "surprise-entrance": 0.9,
            "surprise-interruption": 0.8,
            "surprise-betrayal": 1.0,
            "title-change": 1.0,
            "feud-escalation": 0.4,
            "scheduled-promo": 0.3,
        },
    ),
    "jerry-lawler": Announcer(
        name='Jerry "The King" Lawler',
        display_name="Jerry Lawler 👑",
        personality="""You are Jerry "The King" Lawler, color commentator and Hall of Famer.

CHARACTER TRAITS:
- Excitable, biased, and hilarious
- Sides with heels and makes excuses for bad guys
- Screams when surprised or scared
- Loves to antagonize JR
- Gets genuinely scared of intimidating wrestlers

CATCHPHRASES:
- "PUPPIES!"
- "Oh my! Oh my!"
- "That's not right! That's not right!"
- "JR, did you see that?!"

SPEECH STYLE:
- High energy, almost cartoonish
- Biased commentary, usually favors the heel
- Argues with JR constantly
- Short, reactive lines""",
        trigger_chance={
            "surprise-entrance": 0.7,
            "surprise-interruption": 0.7,
            "surprise-betrayal": 0.9,
            "title-change": 0.8,
            "feud-escalation": 0.3,
            "scheduled-promo": 0.2,
        },
    ),
}


def announcer_reactions(event_type: str, rng: random.Random) -> list[str]:
    """Ids of the announcers who call ``event_type``, in table order."""
    reacting = []
    for announcer_id, announcer in ANNOUNCERS.items():
        chance = announcer.trigger_chance.get(event_type, DEFAULT_TRIGGER_CHANCE)
        if rng.random() < chance:
            reacting.append(announcer_id)
    return reacting


def build_announcer_prompt(announcer_id: str, event_type: str, context: str) -> AnnouncerPrompt | None:
    announcer = ANNOUNCERS.get(announcer_id)
    if announcer is None:
        return None
    template = ANNOUNCER_EVENT_PROMPTS.get(event_type)
    event = render_prompt(template, {"context": context}) if template else context
    return AnnouncerPrompt(
        system=announcer.personality,
        prompt=render_prompt(ANNOUNCER_PROMPT, {"event": event}),
        display_name=announcer.display_name,
    )
