"""Crowd reactions: chants for characters, pops for big moments."""

from __future__ import annotations

import random

CHARACTER_CHANTS: dict[str, dict[str, tuple[str, ...]]] = {
    "face": {
        "john-cena": (
            "🗣️ *LET'S GO CENA! LET'S GO CENA!*",
            "🗣️ *CENA! CENA! CENA!*",
            "🗣️ *LET'S GO CENA!* / *CENA SUCKS!*",
            "🗣️ *YOU CAN'T SEE ME!* 👋",
        ),
        "mankind": (
            "🗣️ *FOLEY! FOLEY! FOLEY!*",
            "🗣️ *SOCKO! SOCKO! SOCKO!* 🧦",
            "🗣️ *HAVE A NICE DAY!* 👏👏👏",
        ),
        "macho-man": (
            "🗣️ *MA-CHO MAN! MA-CHO MAN!*",
            "🗣️ *OH YEAH! OH YEAH! OH YEAH!*",
            "🗣️ *CREAM OF THE CROP!* 👏👏",
        ),
    },
    "heel": {
        "triple-h": (
            "🗣️ *YOU SUCK! YOU SUCK!*",
            "🗣️ *GAME OVER! GAME OVER!*",
            "🗣️ *BOOOOO!* 👎",
        ),
    },
    "tweener": {
        "the-rock": (
            "🗣️ *ROCKY! ROCKY! ROCKY!*",
            "🗣️ *IF YA SMELLLL!* 👃",
            "🗣️ *PEOPLE'S CHAMP! PEOPLE'S CHAMP!*",
        ),
        "stone-cold": (
            "🗣️ *AUSTIN! AUSTIN! AUSTIN!*",
            "🗣️ *WHAT? WHAT? WHAT?*",
            "🗣️ *HELL YEAH! HELL YEAH!*",
        ),
        "undertaker": (
            "🗣️ *UN-DER-TAKER! UN-DER-TAKER!*",
            "🗣️ *REST IN PEACE!* 🔔",
            "🗣️ *DEAD-MAN! DEAD-MAN!*",
        ),
    },
}

MOMENT_REACTIONS: dict[str, tuple[str, ...]] = {
    "near-fall": (
        "😱 *The crowd ERUPTS! THEY THOUGHT THAT WAS IT!*",
        "🤯 *NEAR FALL! The arena is going INSANE!*",
        "😮 *TWO COUNT! The crowd is on the edge of their seats!*",
    ),
    "finisher": (
        "🔥 *THE CROWD IS ON THEIR FEET!*",
        "💥 *THE ARENA EXPLODES!*",
        "🎆 *DEAFENING ROAR FROM THE CROWD!*",
    ),
    "surprise": (
        "😱 *WHAT?! THE CROWD CAN'T BELIEVE IT!*",
        "🤯 *THE ARENA ERUPTS IN SHOCK!*",
        "💀 *STUNNED SILENCE... THEN PANDEMONIUM!*",
    ),
    "boring": (
        "🗣️ *BORING! BORING!* 😴",
        "🗣️ *WE WANT TABLES!*",
    ),
    "awesome": (
        "🗣️ *THIS IS AWESOME!* 👏👏👏👏👏",
        "🗣️ *FIGHT FOREVER! FIGHT FOREVER!*",
    ),
    "entrance": (
        "🔊 *The crowd pops HUGE!*",
        "📢 *Deafening ovation from the crowd!*",
        "🗣️ *The arena is SHAKING!*",
    ),
    "title-change": (
        "🏆 *NEW CHAMP! NEW CHAMP! NEW CHAMP!*",
        "🎆 *The crowd is going ABSOLUTELY CRAZY! STREAMERS AND CONFETTI!*",
        "🗣️ *YOU DESERVE IT!* 👏👏👏👏👏",
    ),
    "betrayal": (
        "😱 *GASPS from the crowd! NOBODY SAW THIS COMING!*",
        "🗣️ *NO! NO! NO!*",
        "😡 *THE CROWD IS THROWING GARBAGE! THEY'RE FURIOUS!*",
    ),
}

DUELING_CHANTS: tuple[str, ...] = (
    "🗣️ *{a}!* / *{b}!* / *{a}!* / *{b}!*",
    "🗣️ *LET'S GO {A}!* / *{B} SUCKS!*",
    "🗣️ *The crowd is SPLIT! Half chanting for {a}, half for {b}!*",
)

REACTION_CHANCE: dict[str, float] = {
    "near-fall": 0.6,
    "finisher": 0.8,
    "surprise": 0.9,
    "boring": 0.1,
    "awesome": 0.5,
    "entrance": 0.7,
    "title-change": 0.95,
    "betrayal": 0.9,
    "character-chant": 0.25,
    "dueling-chant": 0.35,
}
DEFAULT_REACTION_CHANCE = 0.3

# Match beats that get a pop from the crowd, and which pop.
BEAT_MOMENTS: dict[str, str] = {
    "near-fall": "near-fall",
    "near-fall-kickout": "near-fall",
    "finisher-attempt": "finisher",
    "super-finisher": "finisher",
    "clean-finish": "finisher",
    "interference": "surprise",
    "surprise-roll-up": "surprise",
    "finisher-counter": "awesome",
    "comeback": "awesome",
}


def character_chant(character_id: str, rng: random.Random) -> str | None:
    for chants in CHARACTER_CHANTS.values():
        if character_id in chants:
            return rng.choice(chants[character_id])
    return None


def moment_reaction(moment: str, rng: random.Random) -> str | None:
    reactions = MOMENT_REACTIONS.get(moment)
    return rng.choice(reactions) if reactions else None


def dueling_chant(name_a: str, name_b: str, rng: random.Random) -> str:
    template = rng.choice(DUELING_CHANTS)
    return template.format(a=name_a, b=name_b, A=name_a.upper(), B=name_b.upper())


def should_crowd_react(moment: str, rng: random.Random) -> bool:
    return rng.random() < REACTION_CHANCE.get(moment, DEFAULT_REACTION_CHANCE)
